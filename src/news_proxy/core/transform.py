import base64

from ..models.news import Article, ArticleSource, RawArticle


def generate_article_id(title: str | None, published_at: str | None) -> str:
    """Short identifier derived from title and publication time.

    Not unique: two articles with the same title and timestamp collide.
    """

    seed = f"{title or ''}-{published_at or ''}"
    return base64.b64encode(seed.encode("utf-8")).decode("ascii")[:12]


def transform_article(raw: RawArticle) -> Article:
    # GNews has no byline, so the source name stands in for the author.
    return Article(
        id=generate_article_id(raw.title, raw.published_at),
        title=raw.title,
        description=raw.description,
        content=raw.content,
        url=raw.url,
        image=raw.image,
        published_at=raw.published_at,
        author=raw.source.name,
        source=ArticleSource(name=raw.source.name, url=raw.source.url),
    )
