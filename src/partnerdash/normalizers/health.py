"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Health payload normalization.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..payloads import DeficientSku, HealthTransition, parse_deficient_skus, parse_transition
from .devices import PLACEHOLDER

HEALTH_ORDER = {"red": 3, "yellow": 2, "green": 1, "unknown": 0}


def health_order(level: Any) -> int:
    """Rank a health colour; anything unrecognised ranks as unknown."""
    if not isinstance(level, str):
        return 0
    return HEALTH_ORDER.get(level, 0)


def health_class(level: Any) -> str:
    if not level:
        return "health-unknown"
    return f"health-{level}"


@dataclass(frozen=True, slots=True)
class HealthSummary:
    overall: str | None
    calling: str | None
    messaging: str | None
    meetings: str | None
    devices: str
    evaluated_at: Any
    transition: HealthTransition | None
    deficient_skus: tuple[DeficientSku, ...]


def _inner(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    inner = payload.get("health")
    return inner if isinstance(inner, Mapping) else payload


def normalize_health(payload: Any) -> HealthSummary:
    """Flatten the two health payload shapes (nested `health` or flat)."""
    if not isinstance(payload, Mapping):
        payload = {}
    inner = _inner(payload)
    return HealthSummary(
        overall=payload.get("overall") or inner.get("overall"),
        calling=inner.get("calling"),
        messaging=inner.get("messaging"),
        meetings=inner.get("meetings"),
        devices=inner.get("devices") or "unknown",
        evaluated_at=payload.get("evaluatedAt"),
        transition=parse_transition(payload),
        deficient_skus=tuple(parse_deficient_skus(payload)),
    )


@dataclass(frozen=True, slots=True)
class CustomerIdentity:
    key: str
    name: str
    org_id: str


def customer_identity(key: str, health: Any, licenses: Any = None) -> CustomerIdentity:
    """Resolve display identity from the health payload, then licenses."""
    customer: Mapping[str, Any] = {}
    for payload in (health, licenses):
        if isinstance(payload, Mapping) and isinstance(payload.get("customer"), Mapping):
            customer = payload["customer"]
            if customer:
                break
    return CustomerIdentity(
        key=key,
        name=str(customer.get("name") or f"Customer: {key}"),
        org_id=str(customer.get("orgId") or PLACEHOLDER),
    )


@dataclass(frozen=True, slots=True)
class TrendDot:
    date: Any
    overall: str | None
    css_class: str


def history_entries(payload: Any) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    items = payload.get("history") or []
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def trend_dots(payload: Any) -> list[TrendDot]:
    """Daily overall-health dots from a health-history payload."""
    return [
        TrendDot(
            date=item.get("date"),
            overall=item.get("overall"),
            css_class=health_class(item.get("overall")),
        )
        for item in history_entries(payload)
    ]
