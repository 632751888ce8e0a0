"""Unit tests for the query operations over a scripted GNews upstream."""

import pytest

from news_proxy.errors import ValidationError
from news_proxy.models.news import SearchParams


@pytest.mark.asyncio
async def test_top_headlines_sends_lang_country_and_max(service, fake_gnews) -> None:
    articles = await service.get_top_headlines(SearchParams(lang="en", country="us", max=5))

    assert len(articles) == 3
    assert fake_gnews.requests[0].url.path.endswith("/top-headlines")
    assert fake_gnews.last_params == {"lang": "en", "country": "us", "max": "5", "token": "test-key"}


@pytest.mark.asyncio
async def test_top_headlines_defaults_to_ten_results(service, fake_gnews) -> None:
    await service.get_top_headlines()

    assert fake_gnews.last_params == {"max": "10", "token": "test-key"}


@pytest.mark.asyncio
async def test_search_without_query_fails_before_network(service, fake_gnews) -> None:
    with pytest.raises(ValidationError, match="Search query is required"):
        await service.search_articles(SearchParams())

    assert fake_gnews.calls == 0
    assert service.get_cache_stats().misses == 0


@pytest.mark.asyncio
async def test_search_forwards_all_parameters(service, fake_gnews) -> None:
    params = SearchParams(
        q="elections",
        lang="en",
        country="gb",
        max=7,
        from_="2024-01-01T00:00:00Z",
        to="2024-01-31T23:59:59Z",
        sortby="publishedAt",
    )

    articles = await service.search_articles(params)

    assert len(articles) == 3
    assert fake_gnews.requests[0].url.path.endswith("/search")
    assert fake_gnews.last_params == {
        "q": "elections",
        "lang": "en",
        "country": "gb",
        "max": "7",
        "from": "2024-01-01T00:00:00Z",
        "to": "2024-01-31T23:59:59Z",
        "sortby": "publishedAt",
        "token": "test-key",
    }


@pytest.mark.asyncio
async def test_by_title_keeps_case_insensitive_title_matches(service, fake_gnews) -> None:
    articles = await service.get_articles_by_title("Climate")

    assert [a.title for a in articles] == ["Climate summit reaches deal", "New CLIMATE data released"]
    assert fake_gnews.last_params == {"q": "Climate", "max": "10", "sortby": "relevance", "token": "test-key"}


@pytest.mark.asyncio
async def test_by_author_matches_source_name(service, fake_gnews) -> None:
    articles = await service.get_articles_by_author("bbc", max_results=4)

    assert len(articles) == 1
    assert articles[0].author == "BBC News"
    assert fake_gnews.last_params["max"] == "4"
    assert fake_gnews.last_params["sortby"] == "relevance"


@pytest.mark.asyncio
async def test_by_author_tolerates_missing_source_name(service, fake_gnews) -> None:
    fake_gnews.payload = {"totalArticles": 1, "articles": [{"title": "Untitled", "source": {}}]}

    assert await service.get_articles_by_author("reuters") == []


@pytest.mark.asyncio
async def test_by_keywords_joins_with_or(service, fake_gnews) -> None:
    articles = await service.get_articles_by_keywords(["climate", "energy", "policy"])

    assert len(articles) == 3
    assert fake_gnews.last_params["q"] == "climate OR energy OR policy"
    assert fake_gnews.last_params["sortby"] == "relevance"


@pytest.mark.asyncio
async def test_title_and_keyword_queries_share_cache_entry_when_identical(service, fake_gnews) -> None:
    await service.get_articles_by_title("climate")
    await service.get_articles_by_keywords(["climate"])

    assert fake_gnews.calls == 1


@pytest.mark.asyncio
async def test_stats_accounting_and_clear(service, fake_gnews) -> None:
    for _ in range(3):
        await service.get_top_headlines(SearchParams(lang="en"))

    stats = service.get_cache_stats()
    assert (stats.keys, stats.hits, stats.misses) == (1, 2, 1)
    assert fake_gnews.calls == 1

    service.clear_cache()

    stats = service.get_cache_stats()
    assert stats.keys == 0
    assert stats.hits == 2
    assert stats.misses == 1

    await service.get_top_headlines(SearchParams(lang="en"))
    assert fake_gnews.calls == 2


@pytest.mark.asyncio
async def test_transformed_article_example(service, fake_gnews) -> None:
    fake_gnews.payload = {
        "totalArticles": 1,
        "articles": [
            {
                "title": "A",
                "description": "d",
                "content": "c",
                "url": "https://example.com/a",
                "image": None,
                "publishedAt": "2024-01-01T00:00:00Z",
                "source": {"name": "X", "url": "u"},
            }
        ],
    }

    [article] = await service.get_top_headlines()

    assert article.author == "X"
    assert len(article.id) == 12
    assert article.source.url == "u"
