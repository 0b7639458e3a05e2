"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

partnerdash: cached, deduplicated data layer for the partner operations
dashboard, with lazy per-view hydration.
"""

from .cache import CacheEntry, InMemoryTTLCache, TTLCacheBackend
from .errors import (
    DashboardConfigurationError,
    FetchError,
    HttpError,
    MalformedResponseError,
    NetworkFailureError,
    is_not_found,
)
from .hydration import (
    ABSENT,
    CustomerPage,
    CustomersListPage,
    DashboardKpiPage,
    ExecutiveRollupPage,
    HydrationOrchestrator,
    ReportPage,
    ViewOutcome,
    ViewSpec,
    ViewState,
    ViewStatus,
)
from .loaders import ResourceDescriptor, ResourceLoaders
from .metrics import InMemoryFetchMetrics, NoOpFetchMetrics, PrometheusFetchMetrics
from .runtime import Debouncer, FetchClient, RequestCoalescer
from .session import DashboardSession, create_dashboard_session
from .settings import DashboardSettings

__all__ = [
    "ABSENT",
    "CacheEntry",
    "CustomerPage",
    "CustomersListPage",
    "DashboardConfigurationError",
    "DashboardKpiPage",
    "DashboardSession",
    "DashboardSettings",
    "Debouncer",
    "ExecutiveRollupPage",
    "FetchClient",
    "FetchError",
    "HttpError",
    "HydrationOrchestrator",
    "InMemoryFetchMetrics",
    "InMemoryTTLCache",
    "MalformedResponseError",
    "NetworkFailureError",
    "NoOpFetchMetrics",
    "PrometheusFetchMetrics",
    "ReportPage",
    "RequestCoalescer",
    "ResourceDescriptor",
    "ResourceLoaders",
    "TTLCacheBackend",
    "ViewOutcome",
    "ViewSpec",
    "ViewState",
    "ViewStatus",
    "create_dashboard_session",
    "is_not_found",
]
