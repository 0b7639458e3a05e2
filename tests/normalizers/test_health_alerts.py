from __future__ import annotations

from partnerdash.normalizers import (
    PLACEHOLDER,
    customer_identity,
    health_class,
    health_order,
    normalize_alerts,
    normalize_health,
    trend_dots,
)
from partnerdash.payloads import parse_customers, parse_licenses


def test_nested_health_payload_is_flattened():
    summary = normalize_health(
        {
            "overall": "yellow",
            "health": {"calling": "red", "messaging": "green", "meetings": "green"},
            "evaluatedAt": "2026-10-01T00:00:00Z",
            "transition": {"from": "green", "to": "yellow", "occurredAt": "2026-10-01"},
            "deficientSkus": [{"sku": "MEETINGS", "available": "1", "threshold": 5}],
        }
    )
    assert summary.overall == "yellow"
    assert summary.calling == "red"
    assert summary.devices == "unknown"
    assert summary.transition is not None
    assert summary.transition.from_level == "green"
    assert summary.deficient_skus[0].available == 1.0
    assert summary.deficient_skus[0].threshold == 5.0


def test_flat_health_payload_and_half_transition():
    summary = normalize_health(
        {"overall": "green", "calling": "green", "devices": "yellow", "transition": {"from": "red"}}
    )
    assert summary.devices == "yellow"
    assert summary.transition is None
    assert summary.deficient_skus == ()


def test_health_order_and_class():
    assert health_order("red") > health_order("yellow") > health_order("green") > health_order(None)
    assert health_order("purple") == 0
    assert health_class(None) == "health-unknown"
    assert health_class("red") == "health-red"


def test_identity_prefers_health_then_licenses():
    assert customer_identity(
        "acme", {"customer": {}}, {"customer": {"name": "Acme Corp", "orgId": "o1"}}
    ).name == "Acme Corp"
    fallback = customer_identity("acme", {}, None)
    assert fallback.name == "Customer: acme"
    assert fallback.org_id == PLACEHOLDER


def test_trend_dots_from_history():
    dots = trend_dots({"history": [{"date": "d1", "overall": "red"}, {"date": "d2"}]})
    assert [d.css_class for d in dots] == ["health-red", "health-unknown"]
    assert trend_dots({"history": None}) == []


def test_alert_aliases_and_defaults():
    rows = normalize_alerts(
        {
            "items": [
                {"when": "2026-10-01", "prev": "green", "current": "red", "emailedTo": ["a@x", "b@x"]},
                {"timestamp": 1, "why": "License shortfall"},
            ]
        }
    )
    assert rows[0].occurred_at == "2026-10-01"
    assert (rows[0].from_level, rows[0].to_level) == ("green", "red")
    assert rows[0].reason == "Health degradation"
    assert rows[0].emailed_to == "a@x, b@x"
    assert rows[1].reason == "License shortfall"
    assert rows[1].from_level == PLACEHOLDER
    assert rows[1].emailed_to == PLACEHOLDER


def test_license_rows_coerce_numbers_and_skip_garbage():
    rows = parse_licenses(
        {"licenses": [{"sku": "CALL", "total": "10", "used": None, "available": 3}, "junk"]}
    )
    assert len(rows) == 1
    assert (rows[0].total, rows[0].used, rows[0].available) == (10.0, 0.0, 3.0)


def test_customer_rows_require_a_key():
    customers = parse_customers(
        {"customers": [{"key": "acme", "name": "Acme", "orgId": "o1"}, {"name": "keyless"}]}
    )
    assert [c.key for c in customers] == ["acme"]
    assert customers[0].org_id == "o1"
    assert parse_customers([]) == []


def test_customer_rows_tolerate_null_and_numeric_fields():
    customers = parse_customers(
        {
            "customers": [
                {"key": "beta", "name": None, "orgId": "o1"},
                {"key": "gamma", "orgId": 12345},
                {"key": 42, "name": "Numeric", "orgId": None},
                {"key": None, "name": "no key"},
                {"key": "", "name": "empty key"},
            ]
        }
    )
    assert [c.key for c in customers] == ["beta", "gamma", "42"]
    assert customers[0].name == ""
    assert customers[0].display_name == "beta"
    assert customers[1].org_id == "12345"
    assert customers[2].org_id is None
