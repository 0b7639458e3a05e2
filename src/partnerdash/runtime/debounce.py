"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/debounce.py.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any


class Debouncer:
    """
    Fixed-delay debounce for rapid user input such as search boxes.

    Every call cancels the pending callback and restarts the timer, so only
    the last call after a quiet period of `delay_s` executes. Coroutine
    callbacks are scheduled as tasks on the running loop.
    """

    def __init__(self, fn: Callable[..., Any], *, delay_s: float = 0.3) -> None:
        if delay_s < 0:
            raise ValueError("delay_s must be >= 0")
        self._fn = fn
        self._delay_s = delay_s
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[Any] | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay_s, self._fire, args, kwargs)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self._handle = None
        result = self._fn(*args, **kwargs)
        if inspect.isawaitable(result):
            self._task = asyncio.ensure_future(result)

    async def wait(self) -> None:
        """Wait for the last fired coroutine callback, if any, to finish."""
        if self._task is not None:
            await self._task
