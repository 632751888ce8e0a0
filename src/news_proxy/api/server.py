import time
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import settings
from ..core.news_service import NewsService
from ..core.params import parse_keywords, parse_max, parse_sort
from ..errors import NewsProxyError, UpstreamError, ValidationError
from ..logging_config import get_logger
from ..models.news import ApiResponse, Article, CacheStats, SearchParams


logger = get_logger("api.server")

API_VERSION = "1.0.0"


def _envelope(status_code: int, **fields) -> JSONResponse:
    body = ApiResponse(success=False, **fields).model_dump(exclude_unset=True)
    return JSONResponse(status_code=status_code, content=body)


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


# ============================================================================
# News Endpoints
# ============================================================================


router = APIRouter(prefix="/api/news")

_ARTICLES = dict(response_model=ApiResponse[List[Article]], response_model_exclude_unset=True)


@router.get("/headlines", **_ARTICLES)
async def get_top_headlines(
    lang: Optional[str] = None,
    country: Optional[str] = None,
    max_results: Optional[str] = Query(None, alias="max"),
    service: NewsService = Depends(get_news_service),
) -> ApiResponse[List[Article]]:
    params = SearchParams(lang=lang, country=country, max=parse_max(max_results))
    articles = await service.get_top_headlines(params)
    return ApiResponse(
        success=True,
        data=articles,
        message=f"Retrieved {len(articles)} top headlines",
    )


@router.get("/search", **_ARTICLES)
async def search_articles(
    q: Optional[str] = None,
    lang: Optional[str] = None,
    country: Optional[str] = None,
    max_results: Optional[str] = Query(None, alias="max"),
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
    sortby: Optional[str] = None,
    service: NewsService = Depends(get_news_service),
) -> ApiResponse[List[Article]]:
    if not q:
        raise ValidationError('Search query parameter "q" is required')

    params = SearchParams(
        q=q,
        lang=lang,
        country=country,
        max=parse_max(max_results),
        from_=from_,
        to=to,
        sortby=parse_sort(sortby),
    )
    articles = await service.search_articles(params)
    return ApiResponse(
        success=True,
        data=articles,
        message=f'Found {len(articles)} articles for "{q}"',
    )


@router.get("/title", **_ARTICLES)
async def get_articles_by_title(
    title: Optional[str] = None,
    max_results: Optional[str] = Query(None, alias="max"),
    service: NewsService = Depends(get_news_service),
) -> ApiResponse[List[Article]]:
    if not title:
        raise ValidationError("Title parameter is required")

    articles = await service.get_articles_by_title(title, parse_max(max_results))
    return ApiResponse(
        success=True,
        data=articles,
        message=f'Found {len(articles)} articles with title containing "{title}"',
    )


@router.get("/author", **_ARTICLES)
async def get_articles_by_author(
    author: Optional[str] = None,
    max_results: Optional[str] = Query(None, alias="max"),
    service: NewsService = Depends(get_news_service),
) -> ApiResponse[List[Article]]:
    if not author:
        raise ValidationError("Author parameter is required")

    articles = await service.get_articles_by_author(author, parse_max(max_results))
    return ApiResponse(
        success=True,
        data=articles,
        message=f'Found {len(articles)} articles by author "{author}"',
    )


@router.get("/keywords", **_ARTICLES)
async def get_articles_by_keywords(
    keywords: Optional[str] = None,
    max_results: Optional[str] = Query(None, alias="max"),
    service: NewsService = Depends(get_news_service),
) -> ApiResponse[List[Article]]:
    keyword_list = parse_keywords(keywords)
    if not keyword_list:
        raise ValidationError("Keywords parameter is required (comma-separated)")

    articles = await service.get_articles_by_keywords(keyword_list, parse_max(max_results))
    return ApiResponse(
        success=True,
        data=articles,
        message=f"Found {len(articles)} articles matching keywords: {', '.join(keyword_list)}",
    )


# ============================================================================
# Cache Management Endpoints
# ============================================================================


@router.post("/cache/clear", response_model=ApiResponse, response_model_exclude_unset=True)
def clear_cache(service: NewsService = Depends(get_news_service)) -> ApiResponse:
    service.clear_cache()
    return ApiResponse(success=True, message="Cache cleared successfully")


@router.get("/cache/stats", response_model=ApiResponse[CacheStats], response_model_exclude_unset=True)
def get_cache_stats(service: NewsService = Depends(get_news_service)) -> ApiResponse[CacheStats]:
    stats = service.get_cache_stats()
    return ApiResponse(
        success=True,
        data=stats,
        message="Cache statistics retrieved successfully",
    )


# ============================================================================
# Application
# ============================================================================


def create_app(service: NewsService | None = None) -> FastAPI:
    """Build the API around `service`, or one configured from settings."""

    app = FastAPI(
        title="News Proxy API",
        description="Caching proxy over the GNews API with search and filtering",
        version=API_VERSION,
    )
    app.state.news_service = service if service is not None else NewsService.from_settings(settings)
    app.state.started_at = time.monotonic()

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("request_received", method=request.method, path=request.url.path)
        return await call_next(request)

    @app.exception_handler(NewsProxyError)
    async def handle_news_proxy_error(request: Request, exc: NewsProxyError) -> JSONResponse:
        if isinstance(exc, UpstreamError):
            logger.error("upstream_error", path=request.url.path, error=exc.message)
        else:
            logger.warning("validation_error", path=request.url.path, error=exc.message)
        return _envelope(exc.status_code, error=exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            return _envelope(
                404,
                error="Endpoint not found",
                message=f"The endpoint {request.method} {request.url.path} does not exist",
            )
        return _envelope(exc.status_code, error=str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        message = str(exc) if settings.environment == "development" else "Something went wrong"
        return _envelope(500, error="Internal server error", message=message)

    @app.get("/health")
    def health() -> dict:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - app.state.started_at,
        }

    @app.get("/")
    def service_info() -> dict:
        return {
            "name": "News Proxy API",
            "version": API_VERSION,
            "description": "A simple API that proxies the GNews API for fetching articles",
            "endpoints": {
                "health": "GET /health",
                "headlines": "GET /api/news/headlines",
                "search": "GET /api/news/search?q=query",
                "byTitle": "GET /api/news/title?title=title",
                "byAuthor": "GET /api/news/author?author=author",
                "byKeywords": "GET /api/news/keywords?keywords=keyword1,keyword2",
                "clearCache": "POST /api/news/cache/clear",
                "cacheStats": "GET /api/news/cache/stats",
            },
            "documentation": "/docs",
        }

    app.include_router(router)
    return app


app = create_app()
