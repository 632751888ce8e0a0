"""Shared fixtures: a scripted GNews upstream served through httpx.MockTransport."""

import httpx
import pytest

from news_proxy.config import Settings
from news_proxy.core.news_service import NewsService


SAMPLE_PAYLOAD = {
    "totalArticles": 3,
    "articles": [
        {
            "title": "Climate summit reaches deal",
            "description": "Leaders agree on emissions targets.",
            "content": "After two weeks of talks...",
            "url": "https://news.example.com/climate-deal",
            "image": "https://news.example.com/climate.jpg",
            "publishedAt": "2024-01-01T00:00:00Z",
            "source": {"name": "Reuters", "url": "https://www.reuters.com"},
        },
        {
            "title": "Markets rally on tech earnings",
            "description": "Stocks climb.",
            "content": "Shares of major tech firms...",
            "url": "https://news.example.com/markets",
            "image": None,
            "publishedAt": "2024-01-02T08:30:00Z",
            "source": {"name": "Bloomberg", "url": "https://www.bloomberg.com"},
        },
        {
            "title": "New CLIMATE data released",
            "description": "Satellite records updated.",
            "content": "Researchers published...",
            "url": "https://news.example.com/climate-data",
            "image": None,
            "publishedAt": "2024-01-03T12:00:00Z",
            "source": {"name": "BBC News", "url": "https://www.bbc.co.uk/news"},
        },
    ],
}


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGNews:
    """Callable MockTransport handler that records every upstream request."""

    def __init__(self, payload=None, status_code: int = 200):
        self.payload = SAMPLE_PAYLOAD if payload is None else payload
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last_params(self) -> dict:
        return dict(self.requests[-1].url.params)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_gnews() -> FakeGNews:
    return FakeGNews()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        gnews_api_key="test-key",
        gnews_base_url="https://gnews.test/api/v4",
        cache_ttl=300,
    )


@pytest.fixture
def service(test_settings, fake_gnews) -> NewsService:
    return NewsService.from_settings(test_settings, transport=httpx.MockTransport(fake_gnews))
