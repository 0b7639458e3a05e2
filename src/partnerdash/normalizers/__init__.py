"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pure transforms from upstream JSON into canonical view rows.
"""

from .alerts import AlertRow, extract_alerts, normalize_alert_row, normalize_alerts
from .devices import (
    PLACEHOLDER,
    ROOT_CAUSE_INTERMITTENT,
    ROOT_CAUSE_NETWORK_DROP,
    ROOT_CAUSE_NONE,
    ROOT_CAUSE_POWER_OUTAGE,
    ROOT_CAUSE_REGISTRATION_DRIFT,
    DeviceRow,
    DeviceSummary,
    extract_devices,
    filter_device_rows,
    guess_device_root_cause,
    normalize_device_row,
    normalize_devices,
    normalize_status,
    parse_timestamp,
    summarize_devices,
)
from .health import (
    CustomerIdentity,
    HealthSummary,
    TrendDot,
    customer_identity,
    health_class,
    health_order,
    normalize_health,
    trend_dots,
)
from .insights import (
    AnalyticsView,
    CdrView,
    PstnView,
    TrendBar,
    build_analytics_view,
    build_cdr_view,
    build_pstn_view,
    build_trend_bars,
)

__all__ = [
    "PLACEHOLDER",
    "ROOT_CAUSE_INTERMITTENT",
    "ROOT_CAUSE_NETWORK_DROP",
    "ROOT_CAUSE_NONE",
    "ROOT_CAUSE_POWER_OUTAGE",
    "ROOT_CAUSE_REGISTRATION_DRIFT",
    "AlertRow",
    "AnalyticsView",
    "CdrView",
    "CustomerIdentity",
    "DeviceRow",
    "DeviceSummary",
    "HealthSummary",
    "PstnView",
    "TrendBar",
    "TrendDot",
    "build_analytics_view",
    "build_cdr_view",
    "build_pstn_view",
    "build_trend_bars",
    "customer_identity",
    "extract_alerts",
    "extract_devices",
    "filter_device_rows",
    "guess_device_root_cause",
    "health_class",
    "health_order",
    "normalize_alert_row",
    "normalize_alerts",
    "normalize_device_row",
    "normalize_devices",
    "normalize_health",
    "normalize_status",
    "parse_timestamp",
    "summarize_devices",
    "trend_dots",
]
