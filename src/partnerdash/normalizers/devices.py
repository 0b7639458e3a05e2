"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Device inventory normalization and the root-cause heuristic.

Upstream device records use different field names per device type and
vendor. Each logical field has an ordered alias list; the first present
alias wins and total absence yields the placeholder.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

PLACEHOLDER = "—"

NAME_ALIASES = ("displayName", "name", "deviceName")
MODEL_ALIASES = ("product", "model", "deviceModel")
STATUS_ALIASES = ("connectionStatus", "status")
LAST_SEEN_ALIASES = ("lastSeen", "lastActivityTime", "lastUpdated")
LOCATION_ALIASES = ("locationName", "placeName", "location")

ROOT_CAUSE_REGISTRATION_DRIFT = "Cloud inventory / registration drift"
ROOT_CAUSE_POWER_OUTAGE = "Power / site outage likely"
ROOT_CAUSE_INTERMITTENT = "Network / power intermittent"
ROOT_CAUSE_NETWORK_DROP = "LAN / network drop likely"
ROOT_CAUSE_NONE = PLACEHOLDER

DEFAULT_STALE_AFTER_HOURS = 48.0

DeviceFilter = Literal["all", "offline", "online"]


def first_present(record: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    """Return the value of the first alias holding a non-empty value."""
    for alias in aliases:
        value = record.get(alias)
        if value is not None and value != "":
            return value
    return None


def normalize_status(raw: Any) -> str:
    """Collapse vendor status strings into `offline` / `online` / verbatim."""
    text = str(raw or "").lower()
    if "offline" in text or "disconnected" in text:
        return "offline"
    if "online" in text or "connected" in text:
        return "online"
    return text or "unknown"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO-8601 strings or epoch milliseconds into aware datetimes."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def hours_since(value: Any, *, now: datetime | None = None) -> float | None:
    seen = parse_timestamp(value)
    if seen is None:
        return None
    current = now or datetime.now(timezone.utc)
    return (current - seen).total_seconds() / 3600.0


def guess_device_root_cause(
    status: str,
    last_seen: Any,
    *,
    now: datetime | None = None,
    stale_after_hours: float = DEFAULT_STALE_AFTER_HOURS,
) -> str:
    if not last_seen:
        return ROOT_CAUSE_REGISTRATION_DRIFT
    if status == "offline":
        hours = hours_since(last_seen, now=now)
        if hours is not None and hours > stale_after_hours:
            return ROOT_CAUSE_POWER_OUTAGE
        return ROOT_CAUSE_INTERMITTENT
    if status != "online":
        return ROOT_CAUSE_NETWORK_DROP
    return ROOT_CAUSE_NONE


def status_class(status: str) -> str:
    if status == "offline":
        return "health-red"
    if status == "online":
        return "health-green"
    return "health-unknown"


@dataclass(frozen=True, slots=True)
class DeviceRow:
    """Canonical device row; recomputed from the cached payload, never cached."""

    name: str
    model: str
    status: str
    status_class: str
    last_seen: Any
    location: str
    root_cause: str
    searchable: str


def normalize_device_row(
    record: Mapping[str, Any],
    *,
    now: datetime | None = None,
    stale_after_hours: float = DEFAULT_STALE_AFTER_HOURS,
) -> DeviceRow:
    name = str(first_present(record, NAME_ALIASES) or PLACEHOLDER)
    model = str(first_present(record, MODEL_ALIASES) or PLACEHOLDER)
    status = normalize_status(first_present(record, STATUS_ALIASES))
    last_seen = first_present(record, LAST_SEEN_ALIASES)
    location = str(first_present(record, LOCATION_ALIASES) or PLACEHOLDER)

    searchable = " ".join(
        [
            name,
            model,
            status,
            location,
            str(record.get("mac") or ""),
            str(record.get("ipAddress") or ""),
        ]
    ).lower()

    return DeviceRow(
        name=name,
        model=model,
        status=status,
        status_class=status_class(status),
        last_seen=last_seen,
        location=location,
        root_cause=guess_device_root_cause(
            status,
            last_seen,
            now=now,
            stale_after_hours=stale_after_hours,
        ),
        searchable=searchable,
    )


def extract_devices(payload: Any) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    items = payload.get("devices") or payload.get("items") or []
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, Mapping)]


def normalize_devices(
    payload: Any,
    *,
    now: datetime | None = None,
    stale_after_hours: float = DEFAULT_STALE_AFTER_HOURS,
) -> list[DeviceRow]:
    return [
        normalize_device_row(record, now=now, stale_after_hours=stale_after_hours)
        for record in extract_devices(payload)
    ]


def filter_device_rows(
    rows: Iterable[DeviceRow],
    mode: DeviceFilter | str = "all",
    query: str = "",
) -> list[DeviceRow]:
    """Apply the status filter and a case-insensitive search."""
    selected = list(rows)
    if mode == "offline":
        selected = [r for r in selected if r.status in ("offline", "disconnected")]
    elif mode == "online":
        selected = [r for r in selected if r.status in ("online", "connected")]

    needle = query.strip().lower()
    if needle:
        selected = [r for r in selected if needle in r.searchable]
    return selected


@dataclass(frozen=True, slots=True)
class DeviceSummary:
    total: int
    offline: int

    @property
    def text(self) -> str:
        return f"{self.total} devices • {self.offline} offline/disconnected"


def summarize_devices(rows: Iterable[DeviceRow]) -> DeviceSummary:
    materialized = list(rows)
    offline = sum(1 for row in materialized if row.status_class == "health-red")
    return DeviceSummary(total=len(materialized), offline=offline)
