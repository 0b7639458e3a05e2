"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/coalescing.py.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..types import CacheKey

T = TypeVar("T")


class RequestCoalescer:
    """Deduplicate identical in-flight requests."""

    def __init__(self) -> None:
        self._tasks: dict[CacheKey, asyncio.Task[Any]] = {}

    def in_flight(self, key: CacheKey) -> bool:
        return key in self._tasks

    def get_or_start(
        self,
        key: CacheKey,
        factory: Callable[[], Awaitable[T]],
    ) -> asyncio.Task[T]:
        """
        Return the outstanding task for `key`, starting one if none exists.

        The entry is released from inside the task when it settles, success
        or failure, so a failed fetch never blocks later attempts.
        """
        existing = self._tasks.get(key)
        if existing is not None:
            return existing

        async def _settle() -> T:
            try:
                return await factory()
            finally:
                if self._tasks.get(key) is task:
                    del self._tasks[key]

        task: asyncio.Task[T] = asyncio.get_running_loop().create_task(_settle())
        self._tasks[key] = task
        return task

    async def run(self, key: CacheKey, factory: Callable[[], Awaitable[T]]) -> T:
        # Shielded: a cancelled waiter must not abort the shared request.
        return await asyncio.shield(self.get_or_start(key, factory))

    def __len__(self) -> int:
        return len(self._tasks)
