"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Printable customer report.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Final

from ..cache.base import TTLCacheBackend
from ..errors import DashboardConfigurationError
from ..loaders.descriptors import ALERTS, DEVICES, HEALTH, HISTORY, LICENSES
from ..loaders.resources import ResourceLoaders
from ..normalizers.alerts import AlertRow, normalize_alert_row
from ..normalizers.devices import DeviceSummary
from ..normalizers.health import (
    CustomerIdentity,
    HealthSummary,
    TrendDot,
    customer_identity,
    normalize_health,
    trend_dots,
)
from ..types import Clock
from .orchestrator import HydrationOrchestrator, ViewSpec
from .state import ViewOutcome, ViewState

logger = logging.getLogger("partnerdash.hydration")

REPORT_ALERT_LIMIT = 10
DEVICES_ABSENT_MESSAGE = "Devices API not available yet"
ALERTS_ABSENT_MESSAGE = "Alerts API not available yet"


class _Absent:
    """Marker for supplementary data that could not be loaded."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()


async def best_effort(label: str, load: Callable[[], Awaitable[Any]]) -> Any:
    """Run an optional load; any error yields `ABSENT` instead of propagating."""
    try:
        return await load()
    except Exception as error:  # noqa: BLE001
        logger.warning("Best-effort %s load failed: %s", label, error)
        return ABSENT


def _ok_list(payload: Any, field: str) -> list[Any] | None:
    """Return `payload[field]` when the payload is an ok envelope with a list."""
    if payload is ABSENT or not isinstance(payload, dict) or not payload.get("ok"):
        return None
    items = payload.get(field)
    return items if isinstance(items, list) else None


def summarize_report_devices(payload: Any) -> DeviceSummary | None:
    devices = _ok_list(payload, "devices")
    if devices is None:
        return None
    offline = sum(
        1
        for device in devices
        if isinstance(device, dict)
        and "offline" in str(device.get("connectionStatus") or "").lower()
    )
    return DeviceSummary(total=len(devices), offline=offline)


def report_alerts(payload: Any, *, limit: int = REPORT_ALERT_LIMIT) -> tuple[AlertRow, ...] | None:
    alerts = _ok_list(payload, "alerts")
    if alerts is None:
        return None
    return tuple(normalize_alert_row(item) for item in alerts[:limit] if isinstance(item, dict))


@dataclass(frozen=True, slots=True)
class CustomerReport:
    identity: CustomerIdentity
    health: HealthSummary
    trend: tuple[TrendDot, ...]
    devices: DeviceSummary | None
    alerts: tuple[AlertRow, ...] | None

    @property
    def devices_message(self) -> str:
        if self.devices is None:
            return DEVICES_ABSENT_MESSAGE
        return self.devices.text

    @property
    def alerts_message(self) -> str:
        if self.alerts is None:
            return ALERTS_ABSENT_MESSAGE
        return "" if self.alerts else "No alerts recorded"

    @property
    def deficiency_message(self) -> str:
        return "" if self.health.deficient_skus else "No deficiencies detected"


class ReportPage:
    view_name = "report"

    def __init__(
        self,
        key: str,
        *,
        loaders: ResourceLoaders,
        cache: TTLCacheBackend,
        clock: Clock | None = None,
    ) -> None:
        if not key:
            raise DashboardConfigurationError("Missing customer parameter.")
        self.key = key
        self._loaders = loaders
        self.orchestrator = HydrationOrchestrator(cache, clock=clock)
        self.orchestrator.register(
            ViewSpec(
                name=self.view_name,
                load=self._load,
                invalidates=tuple(
                    descriptor.prefix(key)
                    for descriptor in (HEALTH, HISTORY, LICENSES, DEVICES, ALERTS)
                ),
                title="Report",
                failure_message="Report failed to load",
            )
        )

    @property
    def state(self) -> ViewState:
        return self.orchestrator.state(self.view_name)

    @property
    def report(self) -> CustomerReport | None:
        outcome = self.state.outcome
        if outcome is None or not outcome.ok:
            return None
        return outcome.data

    async def hydrate(self) -> ViewState:
        self.orchestrator.activate(self.view_name)
        return await self.orchestrator.wait(self.view_name)

    async def refresh(self) -> ViewState:
        """Drop this customer's cached report inputs, then reload."""
        self.orchestrator.refresh(self.view_name)
        return await self.orchestrator.wait(self.view_name)

    async def _load(self) -> ViewOutcome:
        key = self.key
        health, history, licenses = await asyncio.gather(
            self._loaders.load_customer_health(key),
            self._loaders.load_health_history(key),
            self._loaders.load_licenses(key),
        )
        devices, alerts = await asyncio.gather(
            best_effort("devices", lambda: self._loaders.load_devices(key)),
            best_effort("alerts", lambda: self._loaders.load_alerts(key)),
        )
        report = CustomerReport(
            identity=customer_identity(key, health, licenses),
            health=normalize_health(health),
            trend=tuple(trend_dots(history)),
            devices=summarize_report_devices(devices),
            alerts=report_alerts(alerts),
        )
        return ViewOutcome.loaded(report)
