"""Pure parsers turning upstream trend payloads into :class:`TrendItem` lists.

The feed parser uses targeted pattern extraction over the small, stable tag
set Google Trends emits; swapping it for a real XML parser only has to keep
the ``parse_feed_items`` signature.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from trend_engine.models import TrendItem

logger = logging.getLogger(__name__)

DEFAULT_TRAFFIC = "10K+"
ANTI_HIJACK_PREFIX = ")]}',"
MAX_RELATED = 3
MAX_DAYS = 2
MAX_SEARCHES_PER_DAY = 10

_ITEM_RE = re.compile(r"<item>([\s\S]*?)</item>")
_NEWS_TITLE_RE = re.compile(r"<ht:news_item_title>([\s\S]*?)</ht:news_item_title>")
_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def clean_text(text: str) -> str:
    """Strip CDATA markers, decode the basic XML entities and trim."""
    text = text.replace("<![CDATA[", "").replace("]]>", "")
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text.strip()


def extract_tag(xml: str, tag: str) -> Optional[str]:
    """Return the raw inner text of the first ``<tag ...>`` element, or None."""
    match = re.search(rf"<{re.escape(tag)}[^>]*>([\s\S]*?)</{re.escape(tag)}>", xml)
    return match.group(1) if match else None


def parse_feed_items(xml_text: str) -> List[TrendItem]:
    """Parse an RSS body from the Trending Now feed, keeping document order."""
    items: List[TrendItem] = []
    for match in _ITEM_RE.finditer(xml_text):
        item_xml = match.group(1)

        raw_title = extract_tag(item_xml, "title")
        title = clean_text(raw_title) if raw_title is not None else ""
        if not title:
            continue

        traffic = extract_tag(item_xml, "ht:approx_traffic") or extract_tag(item_xml, "ht:picture_source")
        news_titles = [clean_text(n) for n in _NEWS_TITLE_RE.findall(item_xml)]

        items.append(
            TrendItem(
                title=title,
                search_volume=clean_text(traffic or DEFAULT_TRAFFIC),
                is_active=True,
                related_queries=news_titles[:MAX_RELATED],
                category="trending",
            )
        )
    return items


def _daily_item(search: dict) -> TrendItem:
    """Build one item, falling back per field when a search entry is odd-shaped."""
    title = search.get("title")
    query = title.get("query") if isinstance(title, dict) else None

    related_raw = search.get("relatedQueries")
    related = [
        str(q["query"])
        for q in (related_raw if isinstance(related_raw, list) else [])
        if isinstance(q, dict) and q.get("query")
    ]

    return TrendItem(
        title=str(query or "Unknown"),
        search_volume=str(search.get("formattedTraffic") or DEFAULT_TRAFFIC),
        is_active=True,
        related_queries=related[:MAX_RELATED],
        category="daily_trend",
    )


def parse_daily_trends(text: str) -> List[TrendItem]:
    """Parse the ``dailytrends`` JSON body, tolerating Google's ``)]}',`` prefix.

    Only the first two days and the first ten searches per day are read, so at
    most 20 items come back. Any malformed payload yields an empty list.
    """
    if text.startswith(ANTI_HIJACK_PREFIX):
        text = text[len(ANTI_HIJACK_PREFIX):]

    try:
        data = json.loads(text)
        days = (data.get("default") or {}).get("trendingSearchesDays") or []

        items: List[TrendItem] = []
        for day in days[:MAX_DAYS]:
            if not isinstance(day, dict):
                continue
            for search in (day.get("trendingSearches") or [])[:MAX_SEARCHES_PER_DAY]:
                if isinstance(search, dict):
                    items.append(_daily_item(search))
        return items
    except (ValueError, AttributeError, TypeError, ValidationError) as e:
        logger.warning(
            f"Daily trends payload could not be parsed: {e}",
            extra={"event": "trend_parse_failed", "source": "Google Trends API", "reason": str(e)},
        )
        return []


def _strip_code_fence(text: str) -> str:
    clean = text.strip()
    if clean.startswith("```json"):
        clean = clean[7:]
    elif clean.startswith("```"):
        clean = clean[3:]
    if clean.endswith("```"):
        clean = clean[:-3]
    return clean.strip()


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def parse_ai_trends(text: str) -> List[TrendItem]:
    """Normalise a model's JSON answer into trend items.

    Accepts a bare array, or an object carrying a ``trends`` or ``topics``
    array (checked in that order).
    """
    try:
        data = json.loads(_strip_code_fence(text))
        if isinstance(data, list):
            raw_items = data
        elif isinstance(data, dict):
            raw_items = data.get("trends") or data.get("topics") or []
        else:
            raw_items = []

        items: List[TrendItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                raw = {}
            related = raw.get("relatedQueries") or []
            if not isinstance(related, list):
                related = []
            items.append(
                TrendItem(
                    title=str(_first(raw, "title", "topic", "name") or "Unknown"),
                    search_volume=str(_first(raw, "searchVolume", "volume") or "N/A"),
                    is_active=True,
                    related_queries=[str(q) for q in related][:MAX_RELATED],
                    category=str(raw.get("category") or "ai_generated"),
                )
            )
        return items
    except (ValueError, AttributeError, TypeError, ValidationError) as e:
        logger.warning(
            f"AI trend payload could not be parsed: {e}",
            extra={"event": "trend_parse_failed", "source": "AI", "reason": str(e)},
        )
        logger.debug(f"Raw response: {text}")
        return []
