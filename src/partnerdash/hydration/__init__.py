"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Lazy view hydration and the dashboard pages built on it.
"""

from .customer import (
    DEFAULT_TAB,
    TAB_VIEWS,
    ActionResult,
    CustomerPage,
    CustomerShell,
    DeviceInventory,
    ReportPreview,
)
from .orchestrator import HydrationOrchestrator, ViewSpec
from .portfolio import (
    CustomerListRow,
    CustomersListPage,
    DashboardKpiPage,
    DashboardKpis,
    ExecutiveRollup,
    ExecutiveRollupPage,
    ExecutiveRow,
    build_rollup,
)
from .report import ABSENT, CustomerReport, ReportPage, best_effort
from .state import ViewOutcome, ViewState, ViewStatus

__all__ = [
    "ABSENT",
    "DEFAULT_TAB",
    "TAB_VIEWS",
    "ActionResult",
    "CustomerListRow",
    "CustomerPage",
    "CustomerReport",
    "CustomerShell",
    "CustomersListPage",
    "DashboardKpiPage",
    "DashboardKpis",
    "DeviceInventory",
    "ExecutiveRollup",
    "ExecutiveRollupPage",
    "ExecutiveRow",
    "HydrationOrchestrator",
    "ReportPage",
    "ReportPreview",
    "ViewOutcome",
    "ViewSpec",
    "ViewState",
    "ViewStatus",
    "best_effort",
    "build_rollup",
]
