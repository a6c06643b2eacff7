"""
Shared test fixtures: canned upstream payloads, a mock HTTP transport,
a fake model completion and a controllable clock.
"""
import json
import pathlib
import sys

import httpx
import pytest

# Ensure project root is on path
_root = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_root))

from trend_engine.config import TrendSettings  # noqa: E402

FEED_URL = "https://feed.test/trending/rss?geo=TR"
DAILY_URL = "https://daily.test/trends/api/dailytrends"


def rss_item(title, traffic="50K+", news=()):
    news_xml = "".join(
        f"<ht:news_item><ht:news_item_title>{n}</ht:news_item_title></ht:news_item>" for n in news
    )
    traffic_xml = f"<ht:approx_traffic>{traffic}</ht:approx_traffic>" if traffic else ""
    return f"<item><title>{title}</title>{traffic_xml}{news_xml}</item>"


def rss_feed(*items):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss xmlns:ht="https://trends.google.com/trending/rss" version="2.0"><channel>'
        "<title>Daily Search Trends</title>"
        + "".join(items)
        + "</channel></rss>"
    )


def daily_payload(days, prefix=True):
    body = json.dumps({"default": {"trendingSearchesDays": days}})
    return (")]}',\n" + body) if prefix else body


def daily_search(query, traffic="20K+", related=()):
    return {
        "title": {"query": query},
        "formattedTraffic": traffic,
        "relatedQueries": [{"query": q} for q in related],
    }


class MockUpstream:
    """Routes feed/daily URLs to canned responses and records every request."""

    def __init__(self, feed=None, daily=None):
        # each value: str body, int status, or None for "unreachable"
        self.feed = feed
        self.daily = daily
        self.requested = []

    def _respond(self, request, reply):
        if reply is None:
            raise httpx.ConnectError("upstream unreachable", request=request)
        if isinstance(reply, int):
            return httpx.Response(reply, text="error", request=request)
        return httpx.Response(200, text=reply, request=request)

    def handler(self, request):
        url = str(request.url)
        self.requested.append(url)
        if url.startswith(FEED_URL):
            return self._respond(request, self.feed)
        if url.startswith(DAILY_URL):
            return self._respond(request, self.daily)
        return httpx.Response(404, request=request)

    def client(self):
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def hit(self, url):
        return sum(1 for u in self.requested if u.startswith(url))


class FakeCompletion:
    """Stands in for the model provider; records calls."""

    def __init__(self, response="[]", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def complete(self, prompt, credential, provider):
        self.calls.append((prompt, credential, provider))
        if self.error is not None:
            raise self.error
        return self.response


class FakeClock:
    def __init__(self, start=1_800_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return TrendSettings(feed_url=FEED_URL, daily_url=DAILY_URL, timeout_seconds=2.0)


@pytest.fixture
def clock():
    return FakeClock()
