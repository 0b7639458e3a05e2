from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from partnerdash import (
    DashboardSettings,
    HttpError,
    InMemoryTTLCache,
    MalformedResponseError,
    NetworkFailureError,
    RequestCoalescer,
)
from partnerdash.runtime import FetchClient


def run_async(coro):
    return asyncio.run(coro)


def make_client(api, clock, metrics=None, settings=None):
    cache = InMemoryTTLCache(clock=clock)
    client = FetchClient(
        settings=settings or DashboardSettings(),
        cache=cache,
        coalescer=RequestCoalescer(),
        transport=api.transport,
        metrics=metrics,
    )
    return client, cache


def test_fresh_entry_is_served_without_network(api, clock, metrics):
    api.json("/customer/acme/health", {"overall": "green"})

    async def scenario() -> None:
        client, _ = make_client(api, clock, metrics)
        first = await client.fetch("/customer/acme/health", cache_key="health:acme", ttl_s=30)
        clock.advance(29)
        second = await client.fetch("/customer/acme/health", cache_key="health:acme", ttl_s=30)
        await client.aclose()

        assert first == second == {"overall": "green"}
        assert api.count("/customer/acme/health") == 1
        assert metrics.value("fetch_cache_hits_total") == 1
        assert metrics.value("fetch_cache_misses_total") == 1

    run_async(scenario())


def test_expired_entry_triggers_new_request(api, clock):
    api.json("/customers", {"customers": []})

    async def scenario() -> None:
        client, _ = make_client(api, clock)
        await client.fetch("/customers", cache_key="customers", ttl_s=60)
        clock.advance(60)
        await client.fetch("/customers", cache_key="customers", ttl_s=60)
        await client.aclose()
        assert api.count("/customers") == 2

    run_async(scenario())


def test_concurrent_fetches_issue_one_request(api, clock, metrics):
    api.json("/customer/acme/licenses", {"licenses": []})
    gate = api.gate("/customer/acme/licenses")

    async def scenario() -> None:
        client, _ = make_client(api, clock, metrics)
        first = asyncio.create_task(
            client.fetch("/customer/acme/licenses", cache_key="licenses:acme", ttl_s=120)
        )
        second = asyncio.create_task(
            client.fetch("/customer/acme/licenses", cache_key="licenses:acme", ttl_s=120)
        )
        await asyncio.sleep(0.01)
        gate.set()
        results = await asyncio.gather(first, second)
        await client.aclose()

        assert results[0] == results[1] == {"licenses": []}
        assert api.count("/customer/acme/licenses") == 1
        assert metrics.value("fetch_coalesced_total") == 1
        assert metrics.value("fetch_network_calls_total") == 1

    run_async(scenario())


def test_concurrent_uncacheable_fetches_are_deduplicated(api, clock):
    api.json("/customer/acme/pstn", {"trunks": []})
    gate = api.gate("/customer/acme/pstn")

    async def scenario() -> None:
        client, cache = make_client(api, clock)
        tasks = [
            asyncio.create_task(client.fetch("/customer/acme/pstn", cache_key="pstn:x"))
            for _ in range(3)
        ]
        await asyncio.sleep(0.01)
        gate.set()
        await asyncio.gather(*tasks)
        await client.aclose()

        assert api.count("/customer/acme/pstn") == 1
        assert cache.get("pstn:x") is None

    run_async(scenario())


def test_http_error_propagates_and_is_not_cached(api, clock, metrics):
    api.error("/customer/acme/health", 500, text="kaput")

    async def scenario() -> None:
        client, cache = make_client(api, clock, metrics)
        with pytest.raises(HttpError) as info:
            await client.fetch("/customer/acme/health", cache_key="health:acme", ttl_s=30)
        assert info.value.status == 500
        assert info.value.body == "kaput"
        assert str(info.value) == "API /customer/acme/health failed (500)"
        assert cache.lookup("health:acme") is None

        api.json("/customer/acme/health", {"overall": "red"})
        assert await client.fetch(
            "/customer/acme/health", cache_key="health:acme", ttl_s=30
        ) == {"overall": "red"}
        await client.aclose()

        assert api.count("/customer/acme/health") == 2
        assert metrics.value("fetch_errors_total", tags={"kind": "http"}) == 1

    run_async(scenario())


def test_concurrent_waiters_all_see_failure(api, clock):
    api.error("/customer/acme/alerts", 503)
    gate = api.gate("/customer/acme/alerts")

    async def scenario() -> None:
        client, _ = make_client(api, clock)
        tasks = [
            asyncio.create_task(
                client.fetch("/customer/acme/alerts", cache_key="alerts:acme", ttl_s=60)
            )
            for _ in range(2)
        ]
        await asyncio.sleep(0.01)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        await client.aclose()

        assert all(isinstance(r, HttpError) and r.status == 503 for r in results)
        assert api.count("/customer/acme/alerts") == 1

    run_async(scenario())


def test_error_body_is_truncated(api, clock):
    api.error("/customers", 502, text="x" * 50)

    async def scenario() -> None:
        client, _ = make_client(api, clock, settings=DashboardSettings(error_body_chars=10))
        with pytest.raises(HttpError) as info:
            await client.fetch("/customers", cache_key="customers", ttl_s=60)
        await client.aclose()
        assert info.value.body == "x" * 10

    run_async(scenario())


def test_non_json_success_is_malformed(api, clock, metrics):
    api.route("/status", lambda request: httpx.Response(200, text="<html>ok</html>"))

    async def scenario() -> None:
        client, cache = make_client(api, clock, metrics)
        with pytest.raises(MalformedResponseError) as info:
            await client.fetch("/status", cache_key="platform-status", ttl_s=60)
        await client.aclose()
        assert info.value.status == 200
        assert "Non-JSON response from /status" in str(info.value)
        assert cache.lookup("platform-status") is None
        assert metrics.value("fetch_errors_total", tags={"kind": "malformed"}) == 1

    run_async(scenario())


def test_unparseable_json_body_is_malformed(api, clock):
    api.route(
        "/customers",
        lambda request: httpx.Response(
            200, content=b"{nope", headers={"content-type": "application/json"}
        ),
    )

    async def scenario() -> None:
        client, _ = make_client(api, clock)
        with pytest.raises(MalformedResponseError):
            await client.fetch("/customers")
        await client.aclose()

    run_async(scenario())


def test_transport_failure_is_network_error(api, clock, metrics):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    api.route("/customers", refuse)

    async def scenario() -> None:
        client, _ = make_client(api, clock, metrics)
        with pytest.raises(NetworkFailureError) as info:
            await client.fetch("/customers", cache_key="customers", ttl_s=60)
        await client.aclose()
        assert "connection refused" in info.value.reason
        assert isinstance(info.value.__cause__, httpx.ConnectError)
        assert metrics.value("fetch_errors_total", tags={"kind": "network"}) == 1

    run_async(scenario())


def test_headers_url_and_json_body(api, clock):
    api.json("/customer/acme/license-alert", {"ok": True}, method="POST")

    async def scenario() -> None:
        client, _ = make_client(api, clock)
        await client.fetch(
            "/customer/acme/license-alert",
            cache_key="license_alert:acme:t1",
            method="POST",
            body={"reason": "manual"},
            headers={"X-Trace": "abc", "Accept": "application/vnd.partner+json"},
        )
        await client.aclose()

        request = api.requests[-1]
        assert request.method == "POST"
        assert request.url.path == "/api/customer/acme/license-alert"
        assert request.headers["content-type"] == "application/json"
        assert request.headers["accept"] == "application/vnd.partner+json"
        assert request.headers["x-trace"] == "abc"
        assert json.loads(request.content) == {"reason": "manual"}

    run_async(scenario())


def test_zero_ttl_is_never_cached(api, clock):
    api.json("/customer/acme/cdr", {"metrics": {}})

    async def scenario() -> None:
        client, cache = make_client(api, clock)
        await client.fetch("/customer/acme/cdr", cache_key="cdr:acme", ttl_s=0)
        await client.fetch("/customer/acme/cdr", cache_key="cdr:acme", ttl_s=0)
        await client.aclose()
        assert api.count("/customer/acme/cdr") == 2
        assert cache.lookup("cdr:acme") is None

    run_async(scenario())


def test_cache_key_defaults_to_path(api, clock):
    api.json("/customers", {"customers": []})

    async def scenario() -> None:
        client, cache = make_client(api, clock)
        await client.fetch("/customers", ttl_s=60)
        await client.aclose()
        assert cache.get("/customers") == {"customers": []}

    run_async(scenario())
