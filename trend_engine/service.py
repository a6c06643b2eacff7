"""Trend acquisition with cascading fallback and a short in-memory cache.

Sources are tried strictly in order and the first one yielding at least one
item wins:

1. Google Trends RSS (free, no key)
2. Google Trends daily API (free, no key)
3. AI-generated trends (only when a credential *and* provider are given)

When all three come back empty the offline sentinel is returned. Whatever the
cycle produced, including the sentinel, is cached for the configured window.
"""
from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, List, Optional, Tuple

import httpx

from fetchers.ai_trend_fetcher import ModelCompletion, ProviderCompletion, fetch_ai_trends
from fetchers.google_trends_seeder import fetch_daily_trends, fetch_feed_trends

from .config import TrendSettings
from .models import AiProvider, Language, TrendData, TrendItem, TrendSource

logger = logging.getLogger(__name__)

MAX_TRENDS = 15


def iso_timestamp(epoch_seconds: float) -> str:
    """Format *epoch_seconds* as ``2026-10-19T09:30:00.000Z``."""
    stamp = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TrendService:
    """Owns the single cached :class:`TrendData` slot and the fetch cascade.

    The cache is one slot for the whole service, not keyed by language or
    region: a hit returns the last snapshot whatever language is requested.
    """

    def __init__(
        self,
        settings: Optional[TrendSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        completion: Optional[ModelCompletion] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or TrendSettings()
        self.completion = completion or ProviderCompletion(
            models=self.settings.models, timeout=self.settings.timeout_seconds * 3
        )
        self._http_client = http_client
        self._clock = clock
        self._cached: Optional[TrendData] = None
        self._last_fetch = 0.0
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def cached(self) -> Optional[TrendData]:
        return self._cached

    async def fetch_trends(
        self,
        language: Language,
        credential: Optional[str] = None,
        provider: Optional[AiProvider] = None,
    ) -> TrendData:
        """Return the cached snapshot if fresh, otherwise run the cascade."""
        language = Language(language)
        if provider is not None:
            provider = AiProvider(provider)

        async with self._cycle_lock():
            now = self._clock()
            if self._cached is not None and (now - self._last_fetch) < self.settings.cache_seconds:
                logger.debug(f"Trend cache hit ({now - self._last_fetch:.0f}s old, source={self._cached.source.label})")
                return self._cached

            items, source = await self._run_cascade(language, credential, provider)

            fetched_at = iso_timestamp(self._clock())
            if items:
                limit = min(self.settings.max_trends, MAX_TRENDS)
                result = TrendData(
                    trends=items[:limit],
                    region=self.settings.region,
                    fetched_at=fetched_at,
                    source=source,
                )
            else:
                logger.warning(
                    "All trend sources exhausted, serving offline sentinel",
                    extra={"event": "trend_sources_exhausted", "source": TrendSource.OFFLINE_CACHE.label},
                )
                result = TrendData.offline(region=self.settings.region, fetched_at=fetched_at)

            self._cached = result
            self._last_fetch = now
            logger.info(f"Fetched {len(result.trends)} trends from {result.source.label}")
            return result

    def _cycle_lock(self) -> asyncio.Lock:
        """Lock for the running loop; a service reused across ``asyncio.run`` calls gets a fresh one."""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def clear_trend_cache(self) -> None:
        """Drop the cached snapshot so the next fetch re-runs the cascade."""
        self._cached = None
        self._last_fetch = 0.0

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        # one short-lived client per cycle; cycles are minutes apart
        async with httpx.AsyncClient(
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
        ) as client:
            yield client

    async def _run_cascade(
        self,
        language: Language,
        credential: Optional[str],
        provider: Optional[AiProvider],
    ) -> Tuple[List[TrendItem], TrendSource]:
        timeout = self.settings.timeout_seconds

        async with self._http() as client:
            items = await fetch_feed_trends(client, self.settings.feed_url, timeout)
            if items:
                return items, TrendSource.GOOGLE_TRENDS_RSS

            items = await fetch_daily_trends(client, self.settings.daily_url, timeout)
            if items:
                return items, TrendSource.GOOGLE_TRENDS_API

        if not (credential and provider):
            logger.info("AI trend fallback skipped: no credential or provider configured")
            return [], TrendSource.OFFLINE_CACHE

        items = await fetch_ai_trends(
            self.completion, credential, provider, language, self.settings.region
        )
        if items:
            return items, TrendSource.for_provider(provider)
        return [], TrendSource.OFFLINE_CACHE


# ---------------------------------------------------------------------------
# Process-wide instance for callers that do not manage their own service
# ---------------------------------------------------------------------------

_default_service: Optional[TrendService] = None


def default_service() -> TrendService:
    """Get or create the shared :class:`TrendService` (lazy-loaded)."""
    global _default_service
    if _default_service is None:
        _default_service = TrendService(settings=TrendSettings.from_env())
    return _default_service


async def fetch_trends(
    language: Language,
    credential: Optional[str] = None,
    provider: Optional[AiProvider] = None,
) -> TrendData:
    return await default_service().fetch_trends(language, credential, provider)


def clear_trend_cache() -> None:
    default_service().clear_trend_cache()
