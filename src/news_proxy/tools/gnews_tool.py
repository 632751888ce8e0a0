import asyncio
import functools
from typing import Any, Dict, Mapping

import httpx

from ..errors import UpstreamError
from ..logging_config import get_logger
from ..models.news import NewsResponse
from .cache import TTLCache


logger = get_logger("tools.gnews")


def _clean_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: value for name, value in params.items() if value is not None}


def build_cache_key(endpoint: str, params: Mapping[str, Any]) -> str:
    """Derive the cache key for an upstream call.

    Parameter names are sorted so insertion order never changes the key,
    e.g. ``search:max:10|q:ai|sortby:relevance``.
    """

    cleaned = _clean_params(params)
    pairs = "|".join(f"{name}:{cleaned[name]}" for name in sorted(cleaned))
    return f"{endpoint}:{pairs}"


class GNewsClient:
    """Caching client for the GNews REST API.

    Responses are cached per (endpoint, parameters). Concurrent misses on
    the same key share a single upstream request.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str,
        cache: TTLCache,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            logger.warning("gnews_api_key_missing", base_url=base_url)
        self._api_key = api_key or ""
        self._base_url = base_url.rstrip("/")
        self._cache = cache
        self._timeout = timeout
        self._transport = transport
        self._in_flight: Dict[str, asyncio.Future] = {}

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def fetch(self, endpoint: str, params: Mapping[str, Any]) -> NewsResponse:
        key = build_cache_key(endpoint, params)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info("cache_hit", key=key)
            return cached

        pending = self._in_flight.get(key)
        if pending is None:
            logger.info("cache_miss", key=key)
            pending = asyncio.ensure_future(self._request(endpoint, _clean_params(params), key))
            self._in_flight[key] = pending
            pending.add_done_callback(functools.partial(self._request_done, key))
        else:
            logger.info("request_coalesced", key=key)

        # Shielded so one cancelled caller does not abort the shared request.
        return await asyncio.shield(pending)

    def _request_done(self, key: str, future: asyncio.Future) -> None:
        self._in_flight.pop(key, None)
        # Mark a failure as retrieved even when every waiter was cancelled.
        if not future.cancelled():
            future.exception()

    async def _request(self, endpoint: str, params: Dict[str, Any], key: str) -> NewsResponse:
        url = f"{self._base_url}/{endpoint}"
        query = {**params, "token": self._api_key}

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, params=query)
                response.raise_for_status()
            envelope = NewsResponse.model_validate(response.json())
        except httpx.HTTPStatusError as exc:
            logger.error(
                "gnews_request_failed",
                endpoint=endpoint,
                status_code=exc.response.status_code,
                body=exc.response.text[:200],
            )
            raise UpstreamError() from exc
        except (httpx.HTTPError, ValueError) as exc:
            # ValueError covers undecodable JSON and envelope validation errors.
            logger.error(
                "gnews_request_failed",
                endpoint=endpoint,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise UpstreamError() from exc

        self._cache.set(key, envelope)
        logger.info("gnews_response_cached", key=key, total_articles=envelope.total_articles)
        return envelope
