"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Health alert audit rows.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .devices import PLACEHOLDER, first_present

OCCURRED_AT_ALIASES = ("occurredAt", "when", "timestamp")
FROM_ALIASES = ("from", "prev")
TO_ALIASES = ("to", "current")
REASON_ALIASES = ("reason", "why", "message")
DEFAULT_REASON = "Health degradation"


@dataclass(frozen=True, slots=True)
class AlertRow:
    occurred_at: Any
    from_level: str
    to_level: str
    reason: str
    emailed_to: str


def normalize_alert_row(record: Mapping[str, Any]) -> AlertRow:
    emailed = record.get("emailedTo")
    if isinstance(emailed, list):
        emailed_to = ", ".join(str(item) for item in emailed)
    else:
        emailed_to = str(emailed or PLACEHOLDER)
    return AlertRow(
        occurred_at=first_present(record, OCCURRED_AT_ALIASES),
        from_level=str(first_present(record, FROM_ALIASES) or PLACEHOLDER),
        to_level=str(first_present(record, TO_ALIASES) or PLACEHOLDER),
        reason=str(first_present(record, REASON_ALIASES) or DEFAULT_REASON),
        emailed_to=emailed_to,
    )


def extract_alerts(payload: Any) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    items = payload.get("alerts") or payload.get("items") or []
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def normalize_alerts(payload: Any) -> list[AlertRow]:
    return [normalize_alert_row(record) for record in extract_alerts(payload)]
