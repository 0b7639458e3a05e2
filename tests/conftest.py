from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from partnerdash import DashboardSettings, InMemoryFetchMetrics, create_dashboard_session

API_PREFIX = "/api"


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeApi:
    """In-process backend served through `httpx.MockTransport`."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.requests: list[httpx.Request] = []

    def json(self, path: str, payload: Any, *, method: str = "GET", status: int = 200) -> None:
        self.routes[(method, API_PREFIX + path)] = lambda request: httpx.Response(
            status, json=payload
        )

    def error(self, path: str, status: int, text: str = "boom", *, method: str = "GET") -> None:
        self.routes[(method, API_PREFIX + path)] = lambda request: httpx.Response(
            status, text=text
        )

    def route(
        self,
        path: str,
        responder: Callable[[httpx.Request], httpx.Response],
        *,
        method: str = "GET",
    ) -> None:
        self.routes[(method, API_PREFIX + path)] = responder

    def gate(self, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[API_PREFIX + path] = event
        return event

    def count(self, path: str, *, method: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if request.url.path == API_PREFIX + path
            and (method is None or request.method == method)
        )

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        gate = self.gates.get(request.url.path)
        if gate is not None:
            await gate.wait()
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, text="not found")
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def seed_customer(api: FakeApi, key: str = "acme", *, overall: str = "green", **extra: Any) -> None:
    """Register the shell resources (health, history, licenses) for one customer."""
    health = {
        "customer": {"name": extra.pop("name", key.title()), "orgId": f"org-{key}"},
        "overall": overall,
        "health": {
            "calling": extra.pop("calling", overall),
            "messaging": "green",
            "meetings": "green",
            "devices": extra.pop("devices", "green"),
        },
        "evaluatedAt": "2026-10-01T00:00:00Z",
    }
    health.update(extra)
    api.json(f"/customer/{key}/health", health)
    api.json(
        f"/customer/{key}/health-history",
        {"history": [{"date": "2026-09-30", "overall": "green"}, {"date": "2026-10-01", "overall": overall}]},
    )
    api.json(
        f"/customer/{key}/licenses",
        {"licenses": [{"sku": "CALLING", "total": 10, "used": 4, "available": 6}]},
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def metrics() -> InMemoryFetchMetrics:
    return InMemoryFetchMetrics()


@pytest.fixture
def make_session(api: FakeApi, clock: FakeClock, metrics: InMemoryFetchMetrics):
    def _make(**overrides: Any):
        settings = overrides.pop("settings", None) or DashboardSettings(debounce_delay_s=0.01)
        return create_dashboard_session(
            settings,
            transport=api.transport,
            clock=clock,
            metrics=metrics,
            **overrides,
        )

    return _make


@pytest.fixture
def seed(api: FakeApi):
    def _seed(key: str = "acme", **kwargs: Any) -> None:
        seed_customer(api, key, **kwargs)

    return _seed
