"""Fetch trending searches from the public Google Trends endpoints."""
from __future__ import annotations

import asyncio
import logging
from typing import List

import httpx

from trend_engine.models import TrendItem, TrendSource

from .parsers import parse_daily_trends, parse_feed_items

logger = logging.getLogger(__name__)


def _log_failure(source: TrendSource, error: Exception) -> None:
    logger.warning(
        f"{source.label} failed: {error}",
        extra={"event": "trend_source_failed", "source": source.label, "reason": str(error)},
    )


async def _get_text(client: httpx.AsyncClient, url: str, timeout: float) -> str:
    # httpx applies timeout per phase; bound the whole request as well
    try:
        response = await asyncio.wait_for(client.get(url, timeout=timeout), timeout)
    except asyncio.TimeoutError:
        raise httpx.TimeoutException(f"No complete response from {url} within {timeout}s") from None
    response.raise_for_status()
    return response.text


async def fetch_feed_trends(client: httpx.AsyncClient, url: str, timeout: float = 10.0) -> List[TrendItem]:
    """Primary source: the Trending Now RSS feed. Returns [] on any failure."""
    try:
        xml_text = await _get_text(client, url, timeout)
        items = parse_feed_items(xml_text)
    except (httpx.HTTPError, ValueError) as e:
        _log_failure(TrendSource.GOOGLE_TRENDS_RSS, e)
        return []

    logger.info(f"Parsed {len(items)} items from {TrendSource.GOOGLE_TRENDS_RSS.label}")
    return items


async def fetch_daily_trends(client: httpx.AsyncClient, url: str, timeout: float = 10.0) -> List[TrendItem]:
    """Secondary source: the daily trends JSON API. Returns [] on any failure."""
    try:
        text = await _get_text(client, url, timeout)
    except httpx.HTTPError as e:
        _log_failure(TrendSource.GOOGLE_TRENDS_API, e)
        return []

    items = parse_daily_trends(text)
    logger.info(f"Parsed {len(items)} items from {TrendSource.GOOGLE_TRENDS_API.label}")
    return items
