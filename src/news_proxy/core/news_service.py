from typing import Callable, List, Sequence

import httpx

from ..config import Settings
from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.news import Article, CacheStats, RawArticle, SearchParams
from ..tools.cache import TTLCache
from ..tools.gnews_tool import GNewsClient
from .params import DEFAULT_MAX_RESULTS
from .transform import transform_article


logger = get_logger("core.news_service")


def _contains(haystack: str | None, needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


class NewsService:
    """Query operations over the GNews API, backed by a response cache."""

    def __init__(self, client: GNewsClient, cache: TTLCache) -> None:
        self.client = client
        self.cache = cache

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "NewsService":
        cache = TTLCache(ttl=settings.cache_ttl, check_period=settings.cache_check_period)
        client = GNewsClient(
            api_key=settings.gnews_api_key,
            base_url=settings.gnews_base_url,
            cache=cache,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return cls(client, cache)

    async def _search(
        self,
        query: str,
        max_results: int,
        keep: Callable[[RawArticle], bool] | None = None,
    ) -> List[Article]:
        response = await self.client.fetch(
            "search",
            {"q": query, "max": max_results, "sortby": "relevance"},
        )
        raw_articles = response.articles
        if keep is not None:
            raw_articles = [article for article in raw_articles if keep(article)]
        return [transform_article(article) for article in raw_articles]

    async def get_top_headlines(self, params: SearchParams | None = None) -> List[Article]:
        params = params or SearchParams()
        query = {"lang": params.lang, "country": params.country, "max": params.max}
        response = await self.client.fetch("top-headlines", query)
        return [transform_article(article) for article in response.articles]

    async def search_articles(self, params: SearchParams) -> List[Article]:
        if not params.q:
            raise ValidationError("Search query is required")

        response = await self.client.fetch("search", params.to_query())
        return [transform_article(article) for article in response.articles]

    async def get_articles_by_title(self, title: str, max_results: int = DEFAULT_MAX_RESULTS) -> List[Article]:
        """Search by title, keeping only articles whose title contains it."""
        return await self._search(title, max_results, keep=lambda article: _contains(article.title, title))

    async def get_articles_by_author(self, author: str, max_results: int = DEFAULT_MAX_RESULTS) -> List[Article]:
        """Search by author; matched against the source name."""
        return await self._search(author, max_results, keep=lambda article: _contains(article.source.name, author))

    async def get_articles_by_keywords(
        self,
        keywords: Sequence[str],
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[Article]:
        return await self._search(" OR ".join(keywords), max_results)

    def clear_cache(self) -> None:
        self.cache.flush_all()
        logger.info("cache_cleared")

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()
