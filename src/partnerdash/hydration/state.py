"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-view hydration state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

OutcomeKind = Literal["loaded", "empty", "not_available", "failed"]


class ViewStatus(str, Enum):
    UNACTIVATED = "unactivated"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ViewOutcome:
    """
    What a view shows after one load attempt.

    `empty` is a successful load with nothing to list, `not_available`
    means the backend does not serve the resource yet (HTTP 404) and
    `failed` covers every other error. Each carries a message so a view
    is never blank.
    """

    kind: OutcomeKind
    message: str = ""
    data: Any = None
    error: BaseException | None = None

    @classmethod
    def loaded(cls, data: Any, message: str = "") -> "ViewOutcome":
        return cls(kind="loaded", message=message, data=data)

    @classmethod
    def empty(cls, message: str, data: Any = None) -> "ViewOutcome":
        return cls(kind="empty", message=message, data=data)

    @property
    def ok(self) -> bool:
        return self.kind in ("loaded", "empty")


@dataclass(slots=True)
class ViewState:
    """Mutable state owned by the orchestrator for one view."""

    name: str
    status: ViewStatus = ViewStatus.UNACTIVATED
    activated: bool = False
    last_loaded_at: float | None = None
    outcome: ViewOutcome | None = None
    load_count: int = 0
    generation: int = 0
