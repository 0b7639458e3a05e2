from __future__ import annotations

import pytest

from partnerdash import DashboardConfigurationError, DashboardSettings


def test_defaults():
    settings = DashboardSettings()
    assert settings.api_base_url == "http://localhost:8787"
    assert settings.api_prefix == "/api"
    assert settings.error_body_chars == 300
    assert settings.request_timeout_s is None
    assert settings.ttl_for("health", 30.0) == 30.0


def test_from_env_reads_partnerdash_variables(monkeypatch):
    monkeypatch.setenv("PARTNERDASH_API_BASE_URL", "https://partner.example.com")
    monkeypatch.setenv("PARTNERDASH_API_PREFIX", "/v2")
    monkeypatch.setenv("PARTNERDASH_ERROR_BODY_CHARS", "80")
    monkeypatch.setenv("PARTNERDASH_REQUEST_TIMEOUT_S", "12.5")
    monkeypatch.setenv("PARTNERDASH_TTL_HEALTH", "5")
    monkeypatch.setenv("PARTNERDASH_TTL_CDR", "0")

    settings = DashboardSettings.from_env()

    assert settings.api_base_url == "https://partner.example.com"
    assert settings.api_prefix == "/v2"
    assert settings.error_body_chars == 80
    assert settings.request_timeout_s == 12.5
    assert settings.ttl_for("health", 30.0) == 5.0
    assert settings.ttl_for("cdr", 120.0) == 0.0
    assert settings.ttl_for("alerts", 60.0) == 60.0


def test_from_env_ignores_blank_values(monkeypatch):
    monkeypatch.setenv("PARTNERDASH_TTL_HEALTH", "   ")
    monkeypatch.setenv("PARTNERDASH_REQUEST_TIMEOUT_S", "")
    settings = DashboardSettings.from_env()
    assert "health" not in settings.ttl_overrides
    assert settings.request_timeout_s is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"error_body_chars": 0},
        {"debounce_delay_s": -0.1},
        {"request_timeout_s": 0},
        {"ttl_overrides": {"health": -1}},
    ],
)
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(DashboardConfigurationError):
        DashboardSettings(**kwargs)
