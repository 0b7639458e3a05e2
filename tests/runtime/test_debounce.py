from __future__ import annotations

import asyncio

import pytest

from partnerdash.runtime import Debouncer


def run_async(coro):
    return asyncio.run(coro)


def test_only_last_call_fires():
    async def scenario() -> None:
        seen: list[str] = []
        debounced = Debouncer(seen.append, delay_s=0.02)

        debounced("a")
        debounced("ab")
        debounced("abc")
        assert debounced.pending
        await asyncio.sleep(0.06)

        assert seen == ["abc"]
        assert not debounced.pending

    run_async(scenario())


def test_cancel_drops_pending_call():
    async def scenario() -> None:
        seen: list[str] = []
        debounced = Debouncer(seen.append, delay_s=0.01)
        debounced("x")
        debounced.cancel()
        await asyncio.sleep(0.03)
        assert seen == []

    run_async(scenario())


def test_coroutine_callback_is_scheduled():
    async def scenario() -> None:
        seen: list[str] = []

        async def handler(text: str) -> None:
            await asyncio.sleep(0)
            seen.append(text)

        debounced = Debouncer(handler, delay_s=0.01)
        debounced("query")
        await asyncio.sleep(0.03)
        await debounced.wait()
        assert seen == ["query"]

    run_async(scenario())


def test_negative_delay_is_rejected():
    with pytest.raises(ValueError):
        Debouncer(print, delay_s=-1)
