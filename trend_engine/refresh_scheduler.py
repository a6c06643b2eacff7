"""Refresh scheduler - re-run the trend cascade on a fixed interval."""
from __future__ import annotations

import asyncio
import logging
import signal
from datetime import datetime
from typing import Optional

from .models import AiProvider, Language, TrendData
from .prompt_formatter import ticker_items
from .service import TrendService

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Drives :meth:`TrendService.fetch_trends` every *interval_seconds*."""

    def __init__(
        self,
        service: TrendService,
        language: Language = Language.TR,
        credential: Optional[str] = None,
        provider: Optional[AiProvider] = None,
        interval_seconds: Optional[float] = None,
    ):
        self.service = service
        self.language = Language(language)
        self.credential = credential
        self.provider = provider
        # matches the cache window unless told otherwise
        self.interval_seconds = interval_seconds or service.settings.cache_seconds
        self.running = False
        self.cycle_count = 0
        self._wakeup = asyncio.Event()

    def _signal_handler(self, signum, frame=None):
        """Handle shutdown signals gracefully."""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.stop()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # not supported on this platform/thread
                logger.debug(f"Signal handler for {signum} not installed")

    def stop(self) -> None:
        self.running = False
        self._wakeup.set()

    async def refresh_now(self) -> TrendData:
        """User-initiated refresh: invalidate the cache and fetch."""
        self.service.clear_trend_cache()
        return await self._fetch()

    async def _fetch(self) -> TrendData:
        return await self.service.fetch_trends(self.language, self.credential, self.provider)

    def display_cycle_summary(self, cycle_num: int, data: TrendData) -> None:
        """Log a summary of the current cycle."""
        labels = ticker_items(data)
        logger.info(
            f"CYCLE {cycle_num} | {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} | "
            f"source={data.source.label} status={data.status.value} trends={len(data.trends)}"
        )
        if labels:
            logger.info("  " + "  ".join(labels[:5]))

    async def run(self, max_cycles: Optional[int] = None, install_signals: bool = True) -> int:
        """Fetch on every interval until stopped or *max_cycles* is reached.

        Returns the number of completed cycles.
        """
        if install_signals:
            self._install_signal_handlers()

        self.running = True
        logger.info(f"Starting trend refresh every {self.interval_seconds:.0f}s")

        while self.running:
            self.cycle_count += 1
            data = await self._fetch()
            self.display_cycle_summary(self.cycle_count, data)

            if not self.running or (max_cycles is not None and self.cycle_count >= max_cycles):
                break

            self._wakeup.clear()
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        self.running = False
        logger.info(f"Refresh scheduler stopped after {self.cycle_count} cycles")
        return self.cycle_count
