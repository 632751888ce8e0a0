from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


SortBy = Literal["publishedAt", "relevance", "popularity"]

T = TypeVar("T")


class ArticleSource(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class RawArticle(BaseModel):
    """Article record as returned by the GNews API."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    source: ArticleSource = Field(default_factory=ArticleSource)

    @field_validator("source", mode="before")
    @classmethod
    def _null_source(cls, value):
        return value or {}


class NewsResponse(BaseModel):
    """Upstream response envelope, cached as-is."""

    model_config = ConfigDict(populate_by_name=True)

    total_articles: int = Field(default=0, alias="totalArticles")
    articles: List[RawArticle] = []

    @field_validator("articles", mode="before")
    @classmethod
    def _null_articles(cls, value):
        return value or []


class Article(BaseModel):
    """Public article shape served by the proxy."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    url: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[str] = Field(default=None, alias="publishedAt")
    author: Optional[str] = None
    source: ArticleSource


class SearchParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    q: Optional[str] = None
    lang: Optional[str] = None
    country: Optional[str] = None
    max: int = 10
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    sortby: Optional[SortBy] = None

    def to_query(self) -> dict:
        """Upstream query parameters, unset fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CacheStats(BaseModel):
    keys: int
    hits: int
    misses: int


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
