from .news import (  # noqa: F401
    ApiResponse,
    Article,
    ArticleSource,
    CacheStats,
    NewsResponse,
    RawArticle,
    SearchParams,
    SortBy,
)
