"""Pydantic data models shared by the fetchers and the trend service."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

OFFLINE_PLACEHOLDER_TITLE = "Trend verisi yüklenemedi"


class Language(str, Enum):
    """Output language of user-facing text."""

    TR = "TR"
    EN = "EN"


class AiProvider(str, Enum):
    """Model vendors that can stand in for the Google endpoints."""

    GEMINI = "GEMINI"
    OPENAI = "OPENAI"
    GROK = "GROK"


class TrendStatus(str, Enum):
    """Freshness class shown next to the ticker."""

    LIVE = "live"
    CACHED = "cached"
    OFFLINE = "offline"


class TrendSource(str, Enum):
    """Provenance of a :class:`TrendData` snapshot.

    The value doubles as the display label so serialised snapshots keep the
    familiar strings (``"Google Trends RSS"``, ``"GROK AI"`` ...).
    """

    GOOGLE_TRENDS_RSS = "Google Trends RSS"
    GOOGLE_TRENDS_API = "Google Trends API"
    GEMINI_AI = "GEMINI AI"
    OPENAI_AI = "OPENAI AI"
    GROK_AI = "GROK AI"
    OFFLINE_CACHE = "OFFLINE_CACHE"

    @classmethod
    def for_provider(cls, provider: AiProvider) -> "TrendSource":
        return _AI_SOURCES[AiProvider(provider)]

    @property
    def label(self) -> str:
        return self.value

    @property
    def is_ai(self) -> bool:
        return self in _AI_SOURCES.values()

    @property
    def is_offline(self) -> bool:
        return self is TrendSource.OFFLINE_CACHE

    @property
    def status(self) -> TrendStatus:
        if self.is_offline:
            return TrendStatus.OFFLINE
        if self.is_ai:
            return TrendStatus.CACHED
        return TrendStatus.LIVE


_AI_SOURCES = {
    AiProvider.GEMINI: TrendSource.GEMINI_AI,
    AiProvider.OPENAI: TrendSource.OPENAI_AI,
    AiProvider.GROK: TrendSource.GROK_AI,
}


class TrendItem(BaseModel):
    """One trending topic as reported by an upstream source."""

    title: str = Field(..., min_length=1, description="Topic name, e.g. 'Elections 2026'")
    search_volume: str = Field(..., description="Human-readable magnitude such as '50K+'")
    is_active: bool = Field(True, description="False for placeholder/failure rows")
    related_queries: List[str] = Field(default_factory=list, max_length=3)
    category: Optional[str] = Field(None, description="trending, daily_trend, ai_generated or system")

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class TrendData(BaseModel):
    """A single fetch-cycle snapshot."""

    trends: List[TrendItem] = Field(..., max_length=15)
    region: str
    fetched_at: str = Field(..., description="ISO-8601 UTC capture time")
    source: TrendSource

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def _check_sentinel(self) -> "TrendData":
        if self.source.is_offline:
            if len(self.trends) != 1 or self.trends[0].is_active or self.trends[0].category != "system":
                raise ValueError("offline snapshot must hold exactly one inactive system item")
        elif not self.trends:
            raise ValueError(f"{self.source.label} snapshot has no trends")
        return self

    @classmethod
    def offline(cls, region: str, fetched_at: str) -> "TrendData":
        """Return the sentinel snapshot used when every source came back empty."""
        placeholder = TrendItem(
            title=OFFLINE_PLACEHOLDER_TITLE,
            search_volume="-",
            is_active=False,
            category="system",
        )
        return cls(trends=[placeholder], region=region, fetched_at=fetched_at, source=TrendSource.OFFLINE_CACHE)

    @property
    def status(self) -> TrendStatus:
        return self.source.status

    @property
    def active_trends(self) -> List[TrendItem]:
        return [t for t in self.trends if t.is_active]
