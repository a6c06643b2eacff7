"""Runtime settings for the trend service, loaded from the environment."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

from .models import AiProvider

logger = logging.getLogger(__name__)

# Public Google Trends endpoints (no key needed), keyed by supported region
_REGION_PARAMS = {
    "TR": {"hl": "tr", "tz": -180},
    "US": {"hl": "en-US", "tz": 300},
}
SUPPORTED_REGIONS = tuple(_REGION_PARAMS)
DEFAULT_REGION = "TR"


def feed_url_for(region: str) -> str:
    return f"https://trends.google.com/trending/rss?geo={region}"


def daily_url_for(region: str) -> str:
    params = _REGION_PARAMS[region]
    return f"https://trends.google.com/trends/api/dailytrends?hl={params['hl']}&tz={params['tz']}&geo={region}&ns=15"


GOOGLE_TRENDS_RSS = {region: feed_url_for(region) for region in SUPPORTED_REGIONS}
GOOGLE_TRENDS_DAILY = daily_url_for(DEFAULT_REGION)

DEFAULT_MODELS = {
    AiProvider.GEMINI: "gemini-2.5-flash",
    AiProvider.OPENAI: "gpt-4o",
    AiProvider.GROK: "grok-2-latest",
}

# Env var holding the credential for each provider (used by the console scripts only)
CREDENTIAL_ENV_VARS = {
    AiProvider.GEMINI: "GEMINI_API_KEY",
    AiProvider.OPENAI: "OPENAI_API_KEY",
    AiProvider.GROK: "XAI_API_KEY",
}


@dataclass
class TrendSettings:
    """Tunables for :class:`trend_engine.service.TrendService`."""

    region: str = DEFAULT_REGION
    feed_url: str = GOOGLE_TRENDS_RSS["TR"]
    daily_url: str = GOOGLE_TRENDS_DAILY
    cache_seconds: float = 15 * 60
    max_trends: int = 15
    timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; trend-pulse/0.1)"
    models: Dict[AiProvider, str] = field(default_factory=lambda: dict(DEFAULT_MODELS))

    @classmethod
    def from_env(cls) -> "TrendSettings":
        """Build settings from ``TREND_*`` variables (``.env`` is honoured)."""
        load_dotenv()

        region = (os.getenv("TREND_REGION") or DEFAULT_REGION).strip().upper()
        if region not in SUPPORTED_REGIONS:
            logger.warning(
                f"Unsupported TREND_REGION={region!r} (expected one of {', '.join(SUPPORTED_REGIONS)}), "
                f"using {DEFAULT_REGION}"
            )
            region = DEFAULT_REGION

        settings = cls(
            region=region,
            feed_url=os.getenv("TREND_FEED_URL") or feed_url_for(region),
            daily_url=os.getenv("TREND_DAILY_URL") or daily_url_for(region),
            cache_seconds=_float_env("TREND_CACHE_SECONDS", cls.cache_seconds),
            timeout_seconds=_float_env("TREND_TIMEOUT_SECONDS", cls.timeout_seconds),
        )
        for provider in AiProvider:
            override = os.getenv(f"TREND_{provider.value}_MODEL")
            if override:
                settings.models[provider] = override
        return settings


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {name}={raw!r}, using {default}")
        return default
    return value


def credential_from_env(provider: AiProvider) -> str | None:
    """Return the API key for *provider* from the environment, if set."""
    load_dotenv()
    return os.getenv(CREDENTIAL_ENV_VARS[AiProvider(provider)]) or None
