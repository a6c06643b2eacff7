"""Trend Pulse engine.

Fetches a ranked list of trending topics with cascading fallback (Google
Trends RSS, Google Trends daily API, then an AI provider), caches the snapshot
for a short window and renders it as prompt context.
"""

from .models import TrendData, TrendItem, TrendSource

__all__ = [
    "TrendData",
    "TrendItem",
    "TrendSource",
]

__version__ = "0.1.0"
