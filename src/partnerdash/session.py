"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Session wiring: one cache, one coalescer and one fetch client shared by
every loader and page opened in the same dashboard session.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import httpx

from .cache.base import TTLCacheBackend
from .cache.inmemory import InMemoryTTLCache
from .hydration.customer import CustomerPage
from .hydration.portfolio import CustomersListPage, DashboardKpiPage, ExecutiveRollupPage
from .hydration.report import ReportPage
from .loaders.resources import ResourceLoaders
from .metrics import FetchMetrics
from .runtime.client import FetchClient
from .runtime.coalescing import RequestCoalescer
from .settings import DashboardSettings
from .types import Clock


class DashboardSession:
    """Owns the shared data layer for one dashboard session."""

    def __init__(
        self,
        *,
        settings: DashboardSettings,
        cache: TTLCacheBackend,
        coalescer: RequestCoalescer,
        client: FetchClient,
        loaders: ResourceLoaders,
        clock: Clock | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings
        self.cache = cache
        self.coalescer = coalescer
        self.client = client
        self.loaders = loaders
        self._clock = clock
        self._now = now

    def customer_page(self, key: str) -> CustomerPage:
        return CustomerPage(
            key,
            loaders=self.loaders,
            cache=self.cache,
            settings=self.settings,
            clock=self._clock,
            now=self._now,
        )

    def customers_page(self) -> CustomersListPage:
        return CustomersListPage(loaders=self.loaders, cache=self.cache, clock=self._clock)

    def kpi_page(self) -> DashboardKpiPage:
        return DashboardKpiPage(loaders=self.loaders, cache=self.cache, clock=self._clock)

    def executive_page(self) -> ExecutiveRollupPage:
        return ExecutiveRollupPage(
            loaders=self.loaders,
            cache=self.cache,
            settings=self.settings,
            clock=self._clock,
        )

    def report_page(self, key: str) -> ReportPage:
        return ReportPage(key, loaders=self.loaders, cache=self.cache, clock=self._clock)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "DashboardSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_dashboard_session(
    settings: DashboardSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    http_client: httpx.AsyncClient | None = None,
    clock: Clock | None = None,
    now: Callable[[], datetime] | None = None,
    metrics: FetchMetrics | None = None,
    token_factory: Callable[[], str] | None = None,
) -> DashboardSession:
    """
    Build a session with in-memory cache and coalescer.

    `settings` defaults to `DashboardSettings.from_env()`. `clock` drives
    cache expiry and view timestamps; `now` drives device staleness.
    """
    settings = settings or DashboardSettings.from_env()
    cache = InMemoryTTLCache(clock=clock)
    coalescer: RequestCoalescer = RequestCoalescer()
    client = FetchClient(
        settings=settings,
        cache=cache,
        coalescer=coalescer,
        http_client=http_client,
        transport=transport,
        metrics=metrics,
    )
    loaders = ResourceLoaders(client, cache, settings, token_factory=token_factory)
    return DashboardSession(
        settings=settings,
        cache=cache,
        coalescer=coalescer,
        client=client,
        loaders=loaders,
        clock=clock,
        now=now,
    )
