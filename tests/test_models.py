import pytest
from pydantic import ValidationError

from trend_engine.models import (
    OFFLINE_PLACEHOLDER_TITLE,
    AiProvider,
    TrendData,
    TrendItem,
    TrendSource,
    TrendStatus,
)

FETCHED_AT = "2026-10-19T09:30:00.000Z"


def test_source_for_provider():
    assert TrendSource.for_provider(AiProvider.GEMINI) is TrendSource.GEMINI_AI
    assert TrendSource.for_provider("OPENAI").label == "OPENAI AI"
    assert TrendSource.for_provider(AiProvider.GROK).label == "GROK AI"


@pytest.mark.parametrize(
    "source,status",
    [
        (TrendSource.GOOGLE_TRENDS_RSS, TrendStatus.LIVE),
        (TrendSource.GOOGLE_TRENDS_API, TrendStatus.LIVE),
        (TrendSource.GEMINI_AI, TrendStatus.CACHED),
        (TrendSource.OPENAI_AI, TrendStatus.CACHED),
        (TrendSource.GROK_AI, TrendStatus.CACHED),
        (TrendSource.OFFLINE_CACHE, TrendStatus.OFFLINE),
    ],
)
def test_every_source_has_a_status(source, status):
    assert source.status is status
    assert source.is_ai == (status is TrendStatus.CACHED)
    assert source.is_offline == (status is TrendStatus.OFFLINE)


def test_offline_sentinel_shape():
    data = TrendData.offline(region="TR", fetched_at=FETCHED_AT)
    assert data.source is TrendSource.OFFLINE_CACHE
    assert len(data.trends) == 1
    item = data.trends[0]
    assert item.title == OFFLINE_PLACEHOLDER_TITLE
    assert item.is_active is False
    assert item.category == "system"
    assert data.active_trends == []


def test_offline_source_requires_single_placeholder():
    active = TrendItem(title="Real", search_volume="1K", category="trending")
    with pytest.raises(ValidationError):
        TrendData(trends=[active], region="TR", fetched_at=FETCHED_AT, source=TrendSource.OFFLINE_CACHE)


def test_live_source_requires_items():
    with pytest.raises(ValidationError):
        TrendData(trends=[], region="TR", fetched_at=FETCHED_AT, source="Google Trends RSS")


def test_trend_cap_enforced():
    items = [TrendItem(title=f"T{i}", search_volume="1K") for i in range(16)]
    with pytest.raises(ValidationError):
        TrendData(trends=items, region="TR", fetched_at=FETCHED_AT, source=TrendSource.GOOGLE_TRENDS_RSS)


def test_item_validation():
    with pytest.raises(ValidationError):
        TrendItem(title="", search_volume="1K")
    with pytest.raises(ValidationError):
        TrendItem(title="X", search_volume="1K", related_queries=["a", "b", "c", "d"])


def test_camel_case_serialisation():
    item = TrendItem(title="Derbi", search_volume="50K+", related_queries=["fb"], category="trending")
    data = TrendData(trends=[item], region="TR", fetched_at=FETCHED_AT, source=TrendSource.GOOGLE_TRENDS_RSS)

    dumped = data.model_dump(mode="json", by_alias=True)

    assert dumped["source"] == "Google Trends RSS"
    assert dumped["fetchedAt"] == FETCHED_AT
    assert dumped["trends"][0] == {
        "title": "Derbi",
        "searchVolume": "50K+",
        "isActive": True,
        "relatedQueries": ["fb"],
        "category": "trending",
    }
    assert TrendData.model_validate(dumped) == data
