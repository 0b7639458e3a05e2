from __future__ import annotations

import asyncio

import pytest

from partnerdash.runtime import RequestCoalescer


def run_async(coro):
    return asyncio.run(coro)


def test_concurrent_callers_share_one_call():
    async def scenario() -> None:
        coalescer = RequestCoalescer()
        calls = 0
        release = asyncio.Event()

        async def factory() -> dict[str, int]:
            nonlocal calls
            calls += 1
            await release.wait()
            return {"value": calls}

        first = asyncio.create_task(coalescer.run("k", factory))
        second = asyncio.create_task(coalescer.run("k", factory))
        await asyncio.sleep(0)
        assert coalescer.in_flight("k")
        release.set()

        assert await first == {"value": 1}
        assert await second == {"value": 1}
        assert calls == 1
        assert not coalescer.in_flight("k")

    run_async(scenario())


def test_failure_is_shared_and_entry_released():
    async def scenario() -> None:
        coalescer = RequestCoalescer()
        attempts = 0

        async def failing() -> None:
            nonlocal attempts
            attempts += 1
            await asyncio.sleep(0)
            raise RuntimeError("upstream down")

        results = await asyncio.gather(
            coalescer.run("k", failing),
            coalescer.run("k", failing),
            return_exceptions=True,
        )
        assert attempts == 1
        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(coalescer) == 0

        async def ok() -> str:
            return "fine"

        assert await coalescer.run("k", ok) == "fine"

    run_async(scenario())


def test_distinct_keys_run_independently():
    async def scenario() -> None:
        coalescer = RequestCoalescer()

        async def value(v: str) -> str:
            await asyncio.sleep(0)
            return v

        a, b = await asyncio.gather(
            coalescer.run("a", lambda: value("A")),
            coalescer.run("b", lambda: value("B")),
        )
        assert (a, b) == ("A", "B")

    run_async(scenario())


def test_cancelled_waiter_does_not_cancel_shared_request():
    async def scenario() -> None:
        coalescer = RequestCoalescer()
        release = asyncio.Event()

        async def slow() -> str:
            await release.wait()
            return "done"

        impatient = asyncio.create_task(coalescer.run("k", slow))
        patient = asyncio.create_task(coalescer.run("k", slow))
        await asyncio.sleep(0)

        impatient.cancel()
        with pytest.raises(asyncio.CancelledError):
            await impatient

        release.set()
        assert await patient == "done"

    run_async(scenario())
