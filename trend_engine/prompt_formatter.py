"""Render a trend snapshot as text for prompts and the ticker."""
from __future__ import annotations

import re
from datetime import datetime
from typing import List

from .models import OFFLINE_PLACEHOLDER_TITLE, Language, TrendData

MAX_PROMPT_TRENDS = 10
_WHITESPACE = re.compile(r"\s+")

_TEMPLATES = {
    Language.TR: (
        "\n**🔴 CANLI GÜNDEM VERİSİ ({region} — {time}):**\n"
        "Kaynak: {source}\n"
        "{trend_list}\n\n"
        "TALIMAT: Eğer kullanıcının tweet konusu yukarıdaki trendlerden biriyle ilişkiliyse, "
        "tweet'i o trendle bağlantılı hale getir. Uygun hashtag veya referans ekle. "
        "Eğer ilişkili değilse, trend verisini görmezden gel.\n"
    ),
    Language.EN: (
        "\n**🔴 LIVE TREND DATA ({region} — {time}):**\n"
        "Source: {source}\n"
        "{trend_list}\n\n"
        "INSTRUCTION: If the user's tweet topic relates to any trend above, connect the tweet to that trend. "
        "Add relevant hashtag or reference. If unrelated, ignore the trend data.\n"
    ),
}


def _local_time(fetched_at: str, language: Language) -> str:
    stamp = datetime.fromisoformat(fetched_at.replace("Z", "+00:00")).astimezone()
    if language is Language.TR:
        return stamp.strftime("%H:%M:%S")
    return stamp.strftime("%I:%M:%S %p").lstrip("0")


def format_trends_for_prompt(trend_data: TrendData, language: Language) -> str:
    """Return the live-trend context block, or "" when there is nothing usable.

    The offline sentinel and snapshots without active items never reach the
    prompt.
    """
    language = Language(language)
    active = trend_data.active_trends
    if trend_data.source.is_offline or not active:
        return ""

    lines = []
    for i, trend in enumerate(active[:MAX_PROMPT_TRENDS], 1):
        line = f'{i}. "{trend.title}" ({trend.search_volume} searches)'
        if trend.related_queries:
            line += f" — Related: {', '.join(trend.related_queries)}"
        lines.append(line)

    return _TEMPLATES[language].format(
        region=trend_data.region,
        time=_local_time(trend_data.fetched_at, language),
        source=trend_data.source.label,
        trend_list="\n".join(lines),
    )


def ticker_items(trend_data: TrendData) -> List[str]:
    """One ``#Hashtag (volume)`` label per active trend."""
    return [
        f"#{_WHITESPACE.sub('', t.title)} ({t.search_volume})"
        for t in trend_data.active_trends
        if t.title != OFFLINE_PLACEHOLDER_TITLE
    ]
