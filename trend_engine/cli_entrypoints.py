#!/usr/bin/env python3
"""Console-script wrappers for the trend service.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``trend-fetch`` – run the cascade once and print the snapshot
* ``trend-watch`` – keep refreshing on the cache interval
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import TrendSettings, credential_from_env
from .models import AiProvider, Language, TrendData
from .prompt_formatter import format_trends_for_prompt, ticker_items
from .refresh_scheduler import RefreshScheduler
from .service import TrendService

logger = logging.getLogger(__name__)


def _base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--language", choices=[l.value for l in Language], default=Language.TR.value)
    parser.add_argument(
        "--provider",
        choices=[p.value for p in AiProvider],
        default=None,
        help="AI provider used when both Google endpoints fail (key read from env).",
    )
    return parser


def _resolve_ai(args: argparse.Namespace) -> tuple[Optional[str], Optional[AiProvider]]:
    if not args.provider:
        return None, None
    provider = AiProvider(args.provider)
    credential = credential_from_env(provider)
    if not credential:
        logger.warning(f"No API key found for {provider.value}; AI fallback disabled")
        return None, None
    return credential, provider


def export_csv(data: TrendData, path: Path) -> Path:
    """Write *data* as one CSV row per trend."""
    rows = [
        {
            "rank": idx,
            "title": t.title,
            "search_volume": t.search_volume,
            "is_active": t.is_active,
            "category": t.category or "",
            "related_queries": " | ".join(t.related_queries),
            "region": data.region,
            "source": data.source.label,
            "fetched_at": data.fetched_at,
        }
        for idx, t in enumerate(data.trends, 1)
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def render(data: TrendData, fmt: str, language: Language) -> str:
    if fmt == "json":
        return json.dumps(data.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2)
    if fmt == "ticker":
        return "\n".join(ticker_items(data))
    return format_trends_for_prompt(data, language)


async def _fetch_once(args: argparse.Namespace) -> TrendData:
    credential, provider = _resolve_ai(args)
    service = TrendService(settings=TrendSettings.from_env())
    return await service.fetch_trends(Language(args.language), credential, provider)


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def fetch(argv: Optional[List[str]] = None) -> None:
    """Run the cascade once and print the result."""
    parser = _base_parser("Fetch current trending topics")
    parser.add_argument("--format", choices=["prompt", "json", "ticker"], default="json")
    parser.add_argument("--csv", type=Path, default=None, help="Also export the snapshot to CSV")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    data = asyncio.run(_fetch_once(args))

    print(render(data, args.format, Language(args.language)))
    if args.csv:
        logger.info(f"Wrote {export_csv(data, args.csv)}")


def watch(argv: Optional[List[str]] = None) -> None:
    """Refresh trends on a fixed interval until interrupted."""
    parser = _base_parser("Continuously refresh trending topics")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between cycles (default: cache window)")
    parser.add_argument("--cycles", type=int, default=None, help="Stop after this many cycles")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    credential, provider = _resolve_ai(args)
    scheduler = RefreshScheduler(
        TrendService(settings=TrendSettings.from_env()),
        language=Language(args.language),
        credential=credential,
        provider=provider,
        interval_seconds=args.interval,
    )
    asyncio.run(scheduler.run(max_cycles=args.cycles))


if __name__ == "__main__":
    fetch()
