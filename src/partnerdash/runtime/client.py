"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/client.py.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

import httpx

from ..cache.base import TTLCacheBackend
from ..errors import FetchError, HttpError, MalformedResponseError, NetworkFailureError
from ..metrics import FetchMetrics, NoOpFetchMetrics
from ..settings import DashboardSettings
from ..types import CacheKey, JSONValue
from .coalescing import RequestCoalescer

logger = logging.getLogger("partnerdash.fetch")

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class FetchClient:
    """
    Cache-first JSON API client with in-flight request deduplication.

    One instance belongs to one dashboard session and shares that session's
    TTL cache and request coalescer with every loader.
    """

    def __init__(
        self,
        *,
        settings: DashboardSettings,
        cache: TTLCacheBackend,
        coalescer: RequestCoalescer,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        metrics: FetchMetrics | None = None,
    ) -> None:
        self.settings = settings
        self._cache = cache
        self._coalescer = coalescer
        self._metrics = metrics or NoOpFetchMetrics()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=settings.api_base_url,
            transport=transport,
            timeout=settings.request_timeout_s,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def fetch(
        self,
        path: str,
        *,
        cache_key: CacheKey | None = None,
        ttl_s: float = 0.0,
        method: str = "GET",
        body: JSONValue = None,
        headers: Mapping[str, str] | None = None,
    ) -> JSONValue:
        """
        Return the JSON payload for `path`, from cache when still fresh.

        A miss joins the outstanding request for the same key or starts one.
        Successful payloads are committed to the cache when `ttl_s > 0`.

        Raises:
            HttpError: Server answered with a non-2xx status.
            MalformedResponseError: 2xx answer that is not JSON.
            NetworkFailureError: Request could not complete.
        """
        key = cache_key or path
        row = self._cache.lookup(key)
        if row is not None:
            self._metrics.incr("fetch_cache_hits_total")
            logger.debug("Cache hit for %s", key)
            return row.value

        if self._coalescer.in_flight(key):
            self._metrics.incr("fetch_coalesced_total")
            logger.debug("Joining in-flight request for %s", key)
        else:
            self._metrics.incr("fetch_cache_misses_total")

        return await self._coalescer.run(
            key,
            lambda: self._network_call(
                path,
                key=key,
                ttl_s=ttl_s,
                method=method,
                body=body,
                headers=headers,
            ),
        )

    async def _network_call(
        self,
        path: str,
        *,
        key: CacheKey,
        ttl_s: float,
        method: str,
        body: JSONValue,
        headers: Mapping[str, str] | None,
    ) -> JSONValue:
        try:
            data = await self._request(path, method=method, body=body, headers=headers)
        except FetchError as error:
            self._metrics.incr("fetch_errors_total", tags={"kind": error.kind})
            raise

        if ttl_s > 0:
            self._cache.set(key, data, ttl_s=ttl_s)
        return data

    async def _request(
        self,
        path: str,
        *,
        method: str,
        body: JSONValue,
        headers: Mapping[str, str] | None,
    ) -> JSONValue:
        merged = {**DEFAULT_HEADERS, **(headers or {})}
        content = json.dumps(body).encode("utf-8") if body is not None else None
        url = f"{self.settings.api_prefix}{path}"
        limit = self.settings.error_body_chars

        self._metrics.incr("fetch_network_calls_total")
        logger.debug("%s %s", method, url)
        try:
            response = await self._http.request(
                method,
                url,
                content=content,
                headers=merged,
            )
        except httpx.HTTPError as e:
            raise NetworkFailureError(path, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise HttpError(path, response.status_code, response.text[:limit])

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise MalformedResponseError(path, response.status_code, response.text[:limit])

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                path, response.status_code, response.text[:limit]
            ) from e
