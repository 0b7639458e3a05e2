"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-customer deep-dive page.

The page shell needs health, history and licenses; those three are
requested together and the shell renders only once all of them settle.
Devices, alerts and the report preview are then hydrated best-effort
without holding up the shell, and the analytics/PSTN/CDR tabs load
lazily on first activation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..cache.base import TTLCacheBackend
from ..errors import DashboardConfigurationError, FetchError
from ..loaders.descriptors import ALERTS, ANALYTICS, CDR, DEVICES, HEALTH, HISTORY, LICENSES, PSTN
from ..loaders.resources import ResourceLoaders
from ..normalizers.alerts import AlertRow, normalize_alerts
from ..normalizers.devices import (
    DeviceFilter,
    DeviceRow,
    DeviceSummary,
    filter_device_rows,
    normalize_devices,
    summarize_devices,
)
from ..normalizers.health import (
    CustomerIdentity,
    HealthSummary,
    TrendDot,
    customer_identity,
    normalize_health,
    trend_dots,
)
from ..normalizers.insights import build_analytics_view, build_cdr_view, build_pstn_view
from ..payloads import LicenseRow, parse_licenses
from ..runtime.debounce import Debouncer
from ..settings import DashboardSettings
from ..types import Clock
from .orchestrator import HydrationOrchestrator, ViewSpec
from .state import ViewOutcome, ViewState, ViewStatus

logger = logging.getLogger("partnerdash.hydration")

SHELL_VIEW = "shell"
PREVIEW_VIEW = "report_preview"
DEFAULT_TAB = "licenses"

# Tab name -> view id; the licenses tab is rendered from the shell data.
TAB_VIEWS = {
    "licenses": SHELL_VIEW,
    "devices": "devices",
    "alerts": "alerts",
    "analytics": "analytics",
    "pstn": "pstn",
    "cdr": "cdr",
}
SECONDARY_VIEWS = ("devices", "alerts")


@dataclass(frozen=True, slots=True)
class CustomerShell:
    identity: CustomerIdentity
    health: HealthSummary
    trend: tuple[TrendDot, ...]
    licenses: tuple[LicenseRow, ...]

    @property
    def trend_hint(self) -> str:
        return f"{len(self.trend)} days"


@dataclass(frozen=True, slots=True)
class DeviceInventory:
    rows: tuple[DeviceRow, ...]
    summary: DeviceSummary


@dataclass(frozen=True, slots=True)
class ReportPreview:
    identity: CustomerIdentity
    health: HealthSummary
    trend: tuple[TrendDot, ...]


@dataclass(frozen=True, slots=True)
class ActionResult:
    ok: bool
    message: str


class CustomerPage:
    """Hydration controller for one customer's page and its tabs."""

    def __init__(
        self,
        key: str,
        *,
        loaders: ResourceLoaders,
        cache: TTLCacheBackend,
        settings: DashboardSettings,
        clock: Clock | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        if not key:
            raise DashboardConfigurationError("Customer page requires a customer key")
        self.key = key
        self._loaders = loaders
        self._settings = settings
        self._now = now
        self.orchestrator = HydrationOrchestrator(cache, clock=clock)
        self.active_tab: str | None = None
        self.device_filter: DeviceFilter | str = "all"
        self.device_query = ""
        self.reevaluating = False
        self._device_search = Debouncer(
            self._apply_device_query,
            delay_s=settings.debounce_delay_s,
        )
        self._register_views()

    def _register_views(self) -> None:
        key = self.key
        views = (
            ViewSpec(
                name=SHELL_VIEW,
                load=self._load_shell,
                invalidates=(HEALTH.prefix(key), HISTORY.prefix(key), LICENSES.prefix(key)),
                title="Customer health",
            ),
            ViewSpec(
                name="devices",
                load=self._load_devices,
                invalidates=(DEVICES.prefix(key),),
                title="Devices",
                not_available_message=(
                    "Devices endpoint not available yet. "
                    "Add /api/customer/:key/devices to the backend."
                ),
                failure_message="Device data unavailable",
            ),
            ViewSpec(
                name="alerts",
                load=self._load_alerts,
                invalidates=(ALERTS.prefix(key),),
                title="Alerts",
                not_available_message=(
                    "Alerts endpoint not available yet. "
                    "Add /api/customer/:key/alerts to the backend."
                ),
                failure_message="Alert history unavailable",
            ),
            ViewSpec(
                name="analytics",
                load=self._load_analytics,
                invalidates=(ANALYTICS.prefix(key),),
                title="Analytics",
                failure_message="Analytics unavailable",
            ),
            ViewSpec(
                name="pstn",
                load=self._load_pstn,
                invalidates=(PSTN.prefix(key),),
                title="PSTN",
                failure_message="PSTN unavailable",
            ),
            ViewSpec(
                name="cdr",
                load=self._load_cdr,
                invalidates=(CDR.prefix(key),),
                title="CDR",
                failure_message="CDR unavailable (ensure CDR access is enabled for this org)",
            ),
            ViewSpec(name=PREVIEW_VIEW, load=self._load_preview, title="Report preview"),
        )
        for spec in views:
            self.orchestrator.register(spec)

    # ------------------------------------------------------------------ state

    def view(self, name: str) -> ViewState:
        return self.orchestrator.state(name)

    @property
    def shell(self) -> CustomerShell | None:
        outcome = self.view(SHELL_VIEW).outcome
        if outcome is None or not outcome.ok:
            return None
        return outcome.data

    @property
    def devices(self) -> DeviceInventory | None:
        outcome = self.view("devices").outcome
        if outcome is None or not outcome.ok:
            return None
        return outcome.data

    @property
    def visible_devices(self) -> list[DeviceRow]:
        inventory = self.devices
        if inventory is None:
            return []
        return filter_device_rows(inventory.rows, self.device_filter, self.device_query)

    # -------------------------------------------------------------- lifecycle

    async def init(self) -> ViewState:
        """Open the default tab and hydrate the page."""
        self.active_tab = DEFAULT_TAB
        return await self.hydrate()

    async def hydrate(self, *, force: bool = False) -> ViewState:
        """
        Load the shell, then kick off secondary views without awaiting them.

        With `force`, every view is refreshed (cache prefixes dropped) rather
        than served from memory.
        """
        if force:
            self.orchestrator.refresh(SHELL_VIEW)
        else:
            self.orchestrator.activate(SHELL_VIEW)
        state = await self.orchestrator.wait(SHELL_VIEW)

        for name in SECONDARY_VIEWS:
            if force:
                self.orchestrator.refresh(name)
            else:
                self.orchestrator.activate(name)
        if state.status is ViewStatus.LOADED:
            self.orchestrator.reload(PREVIEW_VIEW)
        return state

    def activate_tab(self, tab: str) -> asyncio.Task[ViewState]:
        """Switch tabs; a tab's data is fetched on its first activation only."""
        try:
            view = TAB_VIEWS[tab]
        except KeyError as exc:
            raise KeyError(f"Unknown tab '{tab}'") from exc
        self.active_tab = tab
        return self.orchestrator.activate(view)

    async def refresh(self) -> ViewState:
        """Drop every cached family for this customer, then rehydrate."""
        dropped = self._loaders.invalidate_customer(self.key)
        logger.info("Refresh for %s dropped %d cache entries", self.key, dropped)
        return await self.hydrate(force=True)

    async def refresh_alerts(self) -> ViewState:
        self.orchestrator.refresh("alerts")
        return await self.orchestrator.wait("alerts")

    async def reevaluate(self) -> ActionResult:
        self.reevaluating = True
        try:
            self._loaders.invalidate(HEALTH.prefix(self.key))
            await self._loaders.trigger_reeval(self.key)
            await self.hydrate(force=True)
            return ActionResult(ok=True, message="Re-evaluation complete")
        except FetchError as error:
            logger.warning("Re-evaluation failed for %s: %s", self.key, error)
            return ActionResult(ok=False, message=f"Re-evaluation failed: {error}")
        finally:
            self.reevaluating = False

    async def send_license_alert(self) -> ActionResult:
        try:
            await self._loaders.send_license_alert(self.key)
        except FetchError as error:
            logger.warning("License alert failed for %s: %s", self.key, error)
            return ActionResult(ok=False, message=f"Failed to send: {error}")
        return ActionResult(ok=True, message="Email Sent")

    def set_device_filter(self, mode: DeviceFilter | str) -> None:
        self.device_filter = mode

    def search_devices(self, query: str) -> None:
        """Debounced device search; only the last query after a pause applies."""
        self._device_search(query)

    def _apply_device_query(self, query: str) -> None:
        self.device_query = query

    # ---------------------------------------------------------------- loaders

    async def _load_shell(self) -> ViewOutcome:
        health, history, licenses = await asyncio.gather(
            self._loaders.load_customer_health(self.key),
            self._loaders.load_health_history(self.key),
            self._loaders.load_licenses(self.key),
        )
        shell = CustomerShell(
            identity=customer_identity(self.key, health, licenses),
            health=normalize_health(health),
            trend=tuple(trend_dots(history)),
            licenses=tuple(parse_licenses(licenses)),
        )
        return ViewOutcome.loaded(shell)

    async def _load_devices(self) -> ViewOutcome:
        payload = await self._loaders.load_devices(self.key)
        rows = tuple(
            normalize_devices(
                payload,
                now=self._now() if self._now else None,
                stale_after_hours=self._settings.stale_after_hours,
            )
        )
        inventory = DeviceInventory(rows=rows, summary=summarize_devices(rows))
        if not rows:
            return ViewOutcome.empty("No devices found", inventory)
        return ViewOutcome.loaded(inventory, inventory.summary.text)

    async def _load_alerts(self) -> ViewOutcome:
        rows: tuple[AlertRow, ...] = tuple(
            normalize_alerts(await self._loaders.load_alerts(self.key))
        )
        if not rows:
            return ViewOutcome.empty("No alerts recorded", rows)
        return ViewOutcome.loaded(rows)

    async def _load_analytics(self) -> ViewOutcome:
        view = build_analytics_view(await self._loaders.load_analytics(self.key))
        message = "" if view.insights else "No risk insights detected for this period."
        return ViewOutcome.loaded(view, message)

    async def _load_pstn(self) -> ViewOutcome:
        view = build_pstn_view(await self._loaders.load_pstn(self.key))
        if view.is_empty:
            return ViewOutcome.empty("No PSTN trunks or PSTN-enabled sites configured", view)
        return ViewOutcome.loaded(view)

    async def _load_cdr(self) -> ViewOutcome:
        return ViewOutcome.loaded(build_cdr_view(await self._loaders.load_cdr(self.key)))

    async def _load_preview(self) -> ViewOutcome:
        shell = self.shell
        if shell is None:
            return ViewOutcome.empty("Report preview waits for customer health data.")
        return ViewOutcome.loaded(
            ReportPreview(identity=shell.identity, health=shell.health, trend=shell.trend)
        )
