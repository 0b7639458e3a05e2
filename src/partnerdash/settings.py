"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dashboard data-layer settings and explicit config loading.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .errors import DashboardConfigurationError

TTL_ENV_PREFIX = "PARTNERDASH_TTL_"


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


@dataclass(frozen=True, slots=True)
class DashboardSettings:
    """Explicit settings used by the fetch client, loaders and pages."""

    api_base_url: str = "http://localhost:8787"
    api_prefix: str = "/api"
    error_body_chars: int = 300
    debounce_delay_s: float = 0.2
    stale_after_hours: float = 48.0
    request_timeout_s: float | None = None
    ttl_overrides: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.error_body_chars <= 0:
            raise DashboardConfigurationError("error_body_chars must be > 0")
        if self.debounce_delay_s < 0:
            raise DashboardConfigurationError("debounce_delay_s must be >= 0")
        if self.request_timeout_s is not None and self.request_timeout_s <= 0:
            raise DashboardConfigurationError("request_timeout_s must be > 0")
        for name, ttl_s in self.ttl_overrides.items():
            if ttl_s < 0:
                raise DashboardConfigurationError(
                    f"TTL override for '{name}' must be >= 0"
                )

    def ttl_for(self, resource: str, default_s: float) -> float:
        """Return the effective TTL in seconds for one resource kind."""
        return float(self.ttl_overrides.get(resource, default_s))

    @staticmethod
    def from_env() -> "DashboardSettings":
        """Load settings from `PARTNERDASH_*` environment variables."""
        overrides: dict[str, float] = {}
        for name, raw in os.environ.items():
            if not name.startswith(TTL_ENV_PREFIX) or not raw.strip():
                continue
            resource = name[len(TTL_ENV_PREFIX):].strip().lower()
            if resource:
                overrides[resource] = float(raw)

        return DashboardSettings(
            api_base_url=os.getenv("PARTNERDASH_API_BASE_URL", "http://localhost:8787"),
            api_prefix=os.getenv("PARTNERDASH_API_PREFIX", "/api"),
            error_body_chars=int(os.getenv("PARTNERDASH_ERROR_BODY_CHARS", "300")),
            debounce_delay_s=float(os.getenv("PARTNERDASH_DEBOUNCE_DELAY_S", "0.2")),
            stale_after_hours=float(os.getenv("PARTNERDASH_STALE_AFTER_HOURS", "48")),
            request_timeout_s=_optional_float(os.getenv("PARTNERDASH_REQUEST_TIMEOUT_S")),
            ttl_overrides=overrides,
        )
