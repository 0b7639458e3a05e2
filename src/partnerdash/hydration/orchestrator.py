"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Lazy hydration orchestrator: one state machine per dashboard view.

    UNACTIVATED --activate--> LOADING --> LOADED | FAILED
    FAILED      --activate--> LOADING            (user retry)
    any state   --refresh---> LOADING            (cache prefixes dropped first)

Each load runs as its own asyncio task and every error is converted into
a view-scoped outcome, so one view can never abort another.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..cache.base import TTLCacheBackend
from ..errors import FetchError, is_not_found
from ..types import Clock
from .state import ViewOutcome, ViewState, ViewStatus

logger = logging.getLogger("partnerdash.hydration")

ViewLoader = Callable[[], Awaitable[ViewOutcome]]


@dataclass(frozen=True, slots=True)
class ViewSpec:
    """
    Static description of one view.

    Attributes:
        name: View id (usually the tab name).
        load: Coroutine factory producing the view outcome.
        invalidates: Cache-key prefixes dropped by a forced refresh.
        title: Human label used in default outcome messages.
        not_available_message: Message when the backend answers 404.
        failure_message: Message prefix for any other failure.
    """

    name: str
    load: ViewLoader
    invalidates: tuple[str, ...] = ()
    title: str = ""
    not_available_message: str | None = None
    failure_message: str | None = None


class HydrationOrchestrator:
    def __init__(self, cache: TTLCacheBackend, *, clock: Clock | None = None) -> None:
        self._cache = cache
        self._clock = clock or time.monotonic
        self._specs: dict[str, ViewSpec] = {}
        self._states: dict[str, ViewState] = {}
        self._tasks: dict[str, asyncio.Task[ViewState]] = {}

    def register(self, spec: ViewSpec) -> None:
        if spec.name in self._specs:
            raise ValueError(f"View already registered: {spec.name}")
        self._specs[spec.name] = spec
        self._states[spec.name] = ViewState(name=spec.name)

    def _spec(self, name: str) -> ViewSpec:
        try:
            return self._specs[name]
        except KeyError as exc:
            raise KeyError(f"Unknown view '{name}'") from exc

    def state(self, name: str) -> ViewState:
        self._spec(name)
        return self._states[name]

    @property
    def views(self) -> list[str]:
        return list(self._specs)

    def activate(self, name: str) -> asyncio.Task[ViewState]:
        """
        Mark a view active and load it if it has never loaded.

        Loaded or loading views are served from memory; a failed view is
        retried.
        """
        state = self.state(name)
        state.activated = True
        existing = self._tasks.get(name)
        if existing is None or state.status is ViewStatus.FAILED:
            return self.reload(name)
        return existing

    def reload(self, name: str) -> asyncio.Task[ViewState]:
        """Start a load now, whatever the current state (cache still honoured)."""
        spec = self._spec(name)
        state = self._states[name]
        state.activated = True
        state.status = ViewStatus.LOADING
        state.generation += 1
        state.load_count += 1
        task = asyncio.get_running_loop().create_task(
            self._run(spec, state, state.generation)
        )
        self._tasks[name] = task
        return task

    def refresh(self, name: str) -> asyncio.Task[ViewState]:
        """Drop the view's cache prefixes, then reload it."""
        spec = self._spec(name)
        dropped = sum(self._cache.delete_prefix(prefix) for prefix in spec.invalidates)
        logger.info("Refreshing view %s (%d cache entries dropped)", name, dropped)
        return self.reload(name)

    async def wait(self, name: str) -> ViewState:
        """Wait for the newest load of `name`, following superseding refreshes."""
        while True:
            task = self._tasks.get(name)
            if task is None:
                return self.state(name)
            await asyncio.shield(task)
            if self._tasks.get(name) is task:
                return self.state(name)

    async def wait_all(self) -> None:
        for name in list(self._tasks):
            await self.wait(name)

    async def _run(self, spec: ViewSpec, state: ViewState, generation: int) -> ViewState:
        try:
            outcome = await spec.load()
        except FetchError as error:
            outcome = self._failure_outcome(spec, error)
            logger.warning("View %s failed: %s", spec.name, error)
        except Exception as error:  # noqa: BLE001
            logger.exception("View %s failed with an unexpected error", spec.name)
            outcome = self._failure_outcome(spec, error)

        if state.generation != generation:
            # A newer refresh owns this view now.
            return state

        state.outcome = outcome
        if outcome.ok:
            state.status = ViewStatus.LOADED
            state.last_loaded_at = self._clock()
        else:
            state.status = ViewStatus.FAILED
        return state

    @staticmethod
    def _failure_outcome(spec: ViewSpec, error: Exception) -> ViewOutcome:
        title = spec.title or spec.name
        if is_not_found(error):
            return ViewOutcome(
                kind="not_available",
                message=spec.not_available_message or f"{title} not available yet.",
                error=error,
            )
        prefix = spec.failure_message or f"{title} failed to load"
        return ViewOutcome(kind="failed", message=f"{prefix}: {error}", error=error)
