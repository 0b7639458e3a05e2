"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

View models for the analytics, PSTN and CDR tabs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .devices import PLACEHOLDER


def _number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _or_placeholder(mapping: Mapping[str, Any], key: str) -> Any:
    value = mapping.get(key)
    return PLACEHOLDER if value is None else value


def _rows(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


@dataclass(frozen=True, slots=True)
class TrendBar:
    value: float
    label: Any
    level: str
    height_pct: int


def build_trend_bars(points: Iterable[tuple[Any, Any, str]]) -> list[TrendBar]:
    """Scale `(value, label, level)` points to percentages of the max (floor 1)."""
    materialized = [(_number(value), label, level) for value, label, level in points]
    if not materialized:
        return []
    peak = max([value for value, _, _ in materialized] + [1.0])
    return [
        TrendBar(
            value=value,
            label=label,
            level=level or "green",
            height_pct=round(value / peak * 100),
        )
        for value, label, level in materialized
    ]


def hourly_call_level(calls: Any, *, warn_threshold: Any, crit_threshold: Any) -> str:
    value = _number(calls)
    if crit_threshold is not None and value < _number(crit_threshold):
        return "red"
    if warn_threshold is not None and value < _number(warn_threshold):
        return "yellow"
    return "green"


def trunk_utilization_level(pct: Any) -> str:
    value = _number(pct)
    if value > 85:
        return "red"
    if value > 65:
        return "yellow"
    return "green"


def call_failure_level(pct: Any) -> str:
    value = _number(pct)
    if value > 5:
        return "red"
    if value > 2:
        return "yellow"
    return "green"


@dataclass(frozen=True, slots=True)
class Insight:
    level: str
    title: str
    message: str


@dataclass(frozen=True, slots=True)
class AnalyticsView:
    total_calls: Any
    failed_pct: float
    pstn_pct: float
    peak_hour: Any
    hourly: tuple[TrendBar, ...]
    total_meetings: Any
    join_failure_pct: float
    avg_participants: Any
    insights: tuple[Insight, ...]


def build_analytics_view(payload: Any) -> AnalyticsView:
    kpis = _mapping(_mapping(payload).get("kpis"))
    calling = _mapping(kpis.get("calling"))
    meetings = _mapping(kpis.get("meetings"))
    hourly = build_trend_bars(
        (
            hour.get("calls"),
            hour.get("hour"),
            hourly_call_level(
                hour.get("calls"),
                warn_threshold=calling.get("warnThreshold"),
                crit_threshold=calling.get("critThreshold"),
            ),
        )
        for hour in _rows(calling.get("hourly"))
    )
    insights = tuple(
        Insight(
            level=str(item.get("level") or "info"),
            title=str(item.get("title") or ""),
            message=str(item.get("message") or ""),
        )
        for item in _rows(_mapping(payload).get("insights"))
    )
    return AnalyticsView(
        total_calls=_or_placeholder(calling, "totalCalls"),
        failed_pct=_number(calling.get("failedPct")),
        pstn_pct=_number(calling.get("pstnPct")),
        peak_hour=_or_placeholder(calling, "peakHour"),
        hourly=tuple(hourly),
        total_meetings=_or_placeholder(meetings, "totalMeetings"),
        join_failure_pct=_number(meetings.get("joinFailurePct")),
        avg_participants=_or_placeholder(meetings, "avgParticipants"),
        insights=insights,
    )


@dataclass(frozen=True, slots=True)
class TrunkRow:
    name: str
    active_calls: float
    max_calls: float
    utilization_pct: float
    utilization_level: str
    health: str | None


@dataclass(frozen=True, slots=True)
class SiteRow:
    name: str
    pstn_type: str
    redundant: bool


@dataclass(frozen=True, slots=True)
class PstnView:
    trunks: tuple[TrunkRow, ...]
    sites: tuple[SiteRow, ...]

    @property
    def is_empty(self) -> bool:
        return not self.trunks and not self.sites


def build_pstn_view(payload: Any) -> PstnView:
    data = _mapping(payload)
    trunks = tuple(
        TrunkRow(
            name=str(t.get("name") or PLACEHOLDER),
            active_calls=_number(t.get("activeCalls")),
            max_calls=_number(t.get("maxCalls")),
            utilization_pct=_number(t.get("utilizationPct")),
            utilization_level=trunk_utilization_level(t.get("utilizationPct")),
            health=t.get("health"),
        )
        for t in _rows(data.get("trunks"))
    )
    sites = tuple(
        SiteRow(
            name=str(s.get("name") or PLACEHOLDER),
            pstn_type=str(s.get("pstnType") or PLACEHOLDER),
            redundant=bool(s.get("redundancy")),
        )
        for s in _rows(data.get("sites"))
    )
    return PstnView(trunks=trunks, sites=sites)


@dataclass(frozen=True, slots=True)
class CdrView:
    total_calls: Any
    dropped_call_pct: float
    avg_duration_seconds: float
    peak_hour: Any
    trend: tuple[TrendBar, ...]


def build_cdr_view(payload: Any) -> CdrView:
    data = _mapping(payload)
    metrics = _mapping(data.get("metrics") or data.get("kpis"))
    trend = build_trend_bars(
        (day.get("totalCalls"), day.get("date"), call_failure_level(day.get("failedPct")))
        for day in _rows(data.get("trend"))
    )
    return CdrView(
        total_calls=_or_placeholder(metrics, "totalCalls"),
        dropped_call_pct=_number(metrics.get("droppedCallPct")),
        avg_duration_seconds=_number(metrics.get("avgDurationSeconds")),
        peak_hour=_or_placeholder(metrics, "peakHour"),
        trend=tuple(trend),
    )
