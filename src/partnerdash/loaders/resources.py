"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Typed resource loaders on top of the session fetch client.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterable

from ..cache.base import TTLCacheBackend
from ..errors import HttpError
from ..runtime.client import FetchClient
from ..settings import DashboardSettings
from ..types import JSONValue
from .descriptors import (
    ALERTS,
    ANALYTICS,
    CDR,
    CUSTOMER_REFRESH_RESOURCES,
    CUSTOMERS,
    DEVICES,
    HEALTH,
    HEALTH_FORCE,
    HISTORY,
    LICENSE_ALERT,
    LICENSES,
    PLATFORM_STATUS,
    PSTN,
    REEVAL,
    ResourceDescriptor,
    ResourceRequest,
)

logger = logging.getLogger("partnerdash.loaders")

# Statuses meaning "re-evaluation endpoint not implemented"; only these
# fall back to the forced health read.
REEVAL_FALLBACK_STATUSES = frozenset({404, 405, 501})


def _default_token() -> str:
    return uuid.uuid4().hex


class ResourceLoaders:
    """One accessor per logical resource; each maps a customer key to a fixed request."""

    def __init__(
        self,
        client: FetchClient,
        cache: TTLCacheBackend,
        settings: DashboardSettings,
        *,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._settings = settings
        self._token_factory = token_factory or _default_token

    def resolve(
        self,
        descriptor: ResourceDescriptor,
        key: str | None = None,
        **params: str,
    ) -> ResourceRequest:
        """Map a resource and optional customer key to its fetch request."""
        ttl_s = self._settings.ttl_for(descriptor.name, descriptor.ttl_s)
        token = None if descriptor.cacheable else self._token_factory()
        return ResourceRequest(
            path=descriptor.path(key, **params),
            cache_key=descriptor.cache_key(key, token=token),
            ttl_s=ttl_s if descriptor.cacheable else 0.0,
            method=descriptor.method,
        )

    async def _load(
        self,
        descriptor: ResourceDescriptor,
        key: str | None = None,
        *,
        body: JSONValue = None,
        **params: str,
    ) -> JSONValue:
        request = self.resolve(descriptor, key, **params)
        return await self._client.fetch(
            request.path,
            cache_key=request.cache_key,
            ttl_s=request.ttl_s,
            method=request.method,
            body=body,
        )

    async def load_customers(self) -> JSONValue:
        return await self._load(CUSTOMERS)

    async def load_customer_health(self, key: str) -> JSONValue:
        return await self._load(HEALTH, key)

    async def load_health_history(self, key: str) -> JSONValue:
        return await self._load(HISTORY, key)

    async def load_licenses(self, key: str) -> JSONValue:
        return await self._load(LICENSES, key)

    async def load_devices(self, key: str) -> JSONValue:
        return await self._load(DEVICES, key)

    async def load_alerts(self, key: str) -> JSONValue:
        return await self._load(ALERTS, key)

    async def load_analytics(self, key: str) -> JSONValue:
        return await self._load(ANALYTICS, key)

    async def load_pstn(self, key: str) -> JSONValue:
        return await self._load(PSTN, key)

    async def load_cdr(self, key: str) -> JSONValue:
        return await self._load(CDR, key)

    async def load_platform_status(self) -> JSONValue:
        return await self._load(PLATFORM_STATUS)

    async def trigger_reeval(self, key: str) -> JSONValue:
        """
        Ask the backend to re-evaluate one customer's health.

        Prefers the POST endpoint. Only when that endpoint is not implemented
        (404/405/501) does it fall back to a forced, cache-busting health
        read; any other failure propagates so a side-effecting
        re-evaluation is never triggered twice.
        """
        logger.info("Manual re-evaluation requested for %s", key)
        try:
            result = await self._load(REEVAL, key)
        except HttpError as error:
            if error.status not in REEVAL_FALLBACK_STATUSES:
                raise
            logger.warning(
                "Re-evaluation endpoint unavailable for %s (%s); using forced health read",
                key,
                error.status,
            )
            stamp = str(int(time.time() * 1000))
            result = await self._load(HEALTH_FORCE, key, stamp=stamp)

        self.invalidate(HEALTH.prefix(key))
        return result

    async def send_license_alert(self, key: str) -> JSONValue:
        """Send the license alert notification for one customer."""
        logger.info("Sending license alert for %s", key)
        result = await self._load(LICENSE_ALERT, key, body={})
        self.invalidate(ALERTS.prefix(key))
        return result

    def invalidate(self, *prefixes: str) -> int:
        return sum(self._cache.delete_prefix(prefix) for prefix in prefixes)

    def invalidate_customer(
        self,
        key: str,
        resources: Iterable[ResourceDescriptor] = CUSTOMER_REFRESH_RESOURCES,
    ) -> int:
        """Drop every cached family in `resources` for one customer."""
        return self.invalidate(*(descriptor.prefix(key) for descriptor in resources))
