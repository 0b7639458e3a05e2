"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Portfolio-level pages: the customer list, the dashboard KPI strip and the
executive rollup across every customer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..cache.base import TTLCacheBackend
from ..errors import FetchError
from ..loaders.descriptors import CUSTOMERS, HEALTH, HISTORY, PLATFORM_STATUS
from ..loaders.resources import ResourceLoaders
from ..normalizers.devices import PLACEHOLDER
from ..normalizers.health import (
    CustomerIdentity,
    HealthSummary,
    TrendDot,
    health_order,
    history_entries,
    normalize_health,
    trend_dots,
)
from ..normalizers.insights import TrendBar, build_trend_bars
from ..payloads import CustomerRef, HealthTransition, parse_customers
from ..runtime.debounce import Debouncer
from ..settings import DashboardSettings
from ..types import Clock
from .orchestrator import HydrationOrchestrator, ViewSpec
from .state import ViewOutcome, ViewState

logger = logging.getLogger("partnerdash.hydration")

KPI_ERROR = "error"
OPERATIONAL = "operational"


def _identity(customer: CustomerRef) -> CustomerIdentity:
    return CustomerIdentity(
        key=customer.key,
        name=customer.display_name,
        org_id=customer.org_id or PLACEHOLDER,
    )


class _SingleViewPage:
    view_name = ""

    def __init__(self, cache: TTLCacheBackend, *, clock: Clock | None = None) -> None:
        self.orchestrator = HydrationOrchestrator(cache, clock=clock)

    @property
    def state(self) -> ViewState:
        return self.orchestrator.state(self.view_name)

    @property
    def data(self) -> Any:
        outcome = self.state.outcome
        if outcome is None or not outcome.ok:
            return None
        return outcome.data

    async def hydrate(self) -> ViewState:
        self.orchestrator.activate(self.view_name)
        return await self.orchestrator.wait(self.view_name)

    async def refresh(self) -> ViewState:
        self.orchestrator.refresh(self.view_name)
        return await self.orchestrator.wait(self.view_name)


# ---------------------------------------------------------------- customers


@dataclass(frozen=True, slots=True)
class CustomerListRow:
    identity: CustomerIdentity
    overall: str | None
    evaluated_at: Any
    trend: tuple[TrendDot, ...]


class CustomersListPage(_SingleViewPage):
    """Every customer with its current health and daily trend."""

    view_name = "customers"

    def __init__(
        self,
        *,
        loaders: ResourceLoaders,
        cache: TTLCacheBackend,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(cache, clock=clock)
        self._loaders = loaders
        self.orchestrator.register(
            ViewSpec(
                name=self.view_name,
                load=self._load,
                invalidates=(CUSTOMERS.prefix(), HEALTH.prefix(), HISTORY.prefix()),
                title="Customers",
                failure_message="Failed to load customers",
            )
        )

    async def _row(self, customer: CustomerRef) -> CustomerListRow:
        health, history = await asyncio.gather(
            self._loaders.load_customer_health(customer.key),
            self._loaders.load_health_history(customer.key),
        )
        summary = normalize_health(health)
        return CustomerListRow(
            identity=_identity(customer),
            overall=summary.overall,
            evaluated_at=summary.evaluated_at,
            trend=tuple(trend_dots(history)),
        )

    async def _load(self) -> ViewOutcome:
        customers = parse_customers(await self._loaders.load_customers())
        if not customers:
            return ViewOutcome.empty("No customers found", ())
        rows = await asyncio.gather(*(self._row(customer) for customer in customers))
        return ViewOutcome.loaded(tuple(rows))


# ------------------------------------------------------------------- KPIs


@dataclass(frozen=True, slots=True)
class DashboardKpis:
    customers: int | str
    worst_health: str
    license_risk: str
    platform: str

    @classmethod
    def errored(cls) -> "DashboardKpis":
        return cls(
            customers=KPI_ERROR,
            worst_health=KPI_ERROR,
            license_risk=KPI_ERROR,
            platform=KPI_ERROR,
        )


class DashboardKpiPage(_SingleViewPage):
    """
    Landing-page KPI strip.

    Worst health stops scanning at the first red customer and license risk
    at the first customer reporting deficient SKUs. Platform status is
    best-effort and reads `unknown` when unavailable.
    """

    view_name = "kpis"

    def __init__(
        self,
        *,
        loaders: ResourceLoaders,
        cache: TTLCacheBackend,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(cache, clock=clock)
        self._loaders = loaders
        self.orchestrator.register(
            ViewSpec(
                name=self.view_name,
                load=self._load,
                invalidates=(
                    CUSTOMERS.prefix(),
                    HEALTH.prefix(),
                    PLATFORM_STATUS.prefix(),
                ),
                title="Dashboard KPIs",
                failure_message="KPI load failed",
            )
        )

    @property
    def kpis(self) -> DashboardKpis | None:
        state = self.state
        if state.outcome is not None and not state.outcome.ok:
            return DashboardKpis.errored()
        return self.data

    async def _worst_health(self, customers: list[CustomerRef]) -> str:
        worst = "green"
        for customer in customers:
            overall = normalize_health(
                await self._loaders.load_customer_health(customer.key)
            ).overall
            if health_order(overall) > health_order(worst):
                worst = overall or worst
            if worst == "red":
                break
        return worst

    async def _license_risk(self, customers: list[CustomerRef]) -> str:
        for customer in customers:
            summary = normalize_health(await self._loaders.load_customer_health(customer.key))
            if summary.deficient_skus:
                return "red"
        return "green"

    async def _platform_status(self) -> str:
        try:
            payload = await self._loaders.load_platform_status()
        except FetchError as error:
            logger.warning("Platform status unavailable: %s", error)
            return "unknown"
        components = payload.get("components") if isinstance(payload, dict) else None
        if not isinstance(components, list):
            components = []
        degraded = any(
            isinstance(component, dict)
            and component.get("status")
            and component.get("status") != OPERATIONAL
            for component in components
        )
        return "degraded" if degraded else OPERATIONAL

    async def _load(self) -> ViewOutcome:
        customers = parse_customers(await self._loaders.load_customers())
        kpis = DashboardKpis(
            customers=len(customers),
            worst_health=await self._worst_health(customers),
            license_risk=await self._license_risk(customers),
            platform=await self._platform_status(),
        )
        return ViewOutcome.loaded(kpis)


# -------------------------------------------------------------- executive


@dataclass(frozen=True, slots=True)
class ExecutiveRow:
    identity: CustomerIdentity
    health: HealthSummary
    history: tuple[TrendBar, ...]

    @property
    def transition(self) -> HealthTransition | None:
        return self.health.transition

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (
            health_order(self.health.overall),
            health_order(self.health.devices),
            health_order(self.health.calling),
        )


@dataclass(frozen=True, slots=True)
class ExecutiveRollup:
    rows: tuple[ExecutiveRow, ...]
    counts: dict[str, int]
    worst: tuple[ExecutiveRow, ...]
    transitions: tuple[ExecutiveRow, ...]


def build_rollup(rows: list[ExecutiveRow], *, worst_n: int = 5, transitions_n: int = 5) -> ExecutiveRollup:
    """Sort worst-first (overall, then devices, then calling) and summarise."""
    ordered = sorted(rows, key=lambda row: row.sort_key, reverse=True)
    counts = {"green": 0, "yellow": 0, "red": 0, "total": len(ordered)}
    for row in ordered:
        if row.health.overall in counts:
            counts[row.health.overall] += 1
    transitions = [row for row in ordered if row.transition is not None]
    return ExecutiveRollup(
        rows=tuple(ordered),
        counts=counts,
        worst=tuple(ordered[:worst_n]),
        transitions=tuple(transitions[:transitions_n]),
    )


class ExecutiveRollupPage(_SingleViewPage):
    """Cross-customer rollup with a debounced name filter."""

    view_name = "executive"

    def __init__(
        self,
        *,
        loaders: ResourceLoaders,
        cache: TTLCacheBackend,
        settings: DashboardSettings,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(cache, clock=clock)
        self._loaders = loaders
        self.filter_text = ""
        self._filter = Debouncer(self._apply_filter, delay_s=settings.debounce_delay_s)
        self.orchestrator.register(
            ViewSpec(
                name=self.view_name,
                load=self._load,
                invalidates=(CUSTOMERS.prefix(), HEALTH.prefix(), HISTORY.prefix()),
                title="Executive rollup",
                failure_message="Failed to load executive view",
            )
        )

    @property
    def rollup(self) -> ExecutiveRollup | None:
        return self.data

    @property
    def visible_rows(self) -> list[ExecutiveRow]:
        rollup = self.rollup
        if rollup is None:
            return []
        needle = self.filter_text.strip().lower()
        if not needle:
            return list(rollup.rows)
        return [row for row in rollup.rows if needle in row.identity.name.lower()]

    def search(self, text: str) -> None:
        self._filter(text)

    def _apply_filter(self, text: str) -> None:
        self.filter_text = text

    async def _row(self, customer: CustomerRef) -> ExecutiveRow:
        health, history = await asyncio.gather(
            self._loaders.load_customer_health(customer.key),
            self._loaders.load_health_history(customer.key),
        )
        bars = build_trend_bars(
            (health_order(item.get("overall")), item.get("date"), item.get("overall"))
            for item in history_entries(history)
        )
        return ExecutiveRow(
            identity=_identity(customer),
            health=normalize_health(health),
            history=tuple(bars),
        )

    async def _load(self) -> ViewOutcome:
        customers = parse_customers(await self._loaders.load_customers())
        rows = await asyncio.gather(*(self._row(customer) for customer in customers))
        rollup = build_rollup(list(rows))
        if not rollup.rows:
            return ViewOutcome.empty("No customers found", rollup)
        return ViewOutcome.loaded(rollup)
