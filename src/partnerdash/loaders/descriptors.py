"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Static resource descriptors: path template, default TTL and cache identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from ..errors import DashboardConfigurationError
from ..types import CacheKey


@dataclass(frozen=True, slots=True)
class ResourceRequest:
    """Resolved `(path, cache_key, ttl)` triple handed to the fetch client."""

    path: str
    cache_key: CacheKey
    ttl_s: float
    method: str = "GET"


@dataclass(frozen=True, slots=True)
class ResourceDescriptor:
    """
    Read-only configuration for one resource kind.

    Attributes:
        name: Resource kind, also the cache-key prefix.
        path_template: API path relative to the API prefix; `{key}` is
            replaced by the percent-encoded customer identifier.
        ttl_s: Default cache lifetime in seconds; 0 marks the resource as
            non-cacheable.
        per_customer: Whether the path and key are scoped to one customer.
        method: HTTP method used for the request.
        cache_key_override: Fixed cache key for global resources.
    """

    name: str
    path_template: str
    ttl_s: float
    per_customer: bool = True
    method: str = "GET"
    cache_key_override: str | None = None

    @property
    def cacheable(self) -> bool:
        return self.ttl_s > 0

    def prefix(self, key: str | None = None) -> str:
        """Cache-key prefix covering this resource (for one customer if given)."""
        if not self.per_customer:
            return self.cache_key_override or self.name
        if key is None:
            return f"{self.name}:"
        return f"{self.name}:{key}"

    def path(self, key: str | None = None, **params: str) -> str:
        if self.per_customer:
            if not key:
                raise DashboardConfigurationError(
                    f"Resource '{self.name}' requires a customer key"
                )
            return self.path_template.format(key=quote(key, safe=""), **params)
        return self.path_template.format(**params)

    def cache_key(self, key: str | None = None, *, token: str | None = None) -> CacheKey:
        """
        Build the cache key for one request.

        Non-cacheable resources take a per-invocation `token` so separate
        user actions are never deduplicated against each other.
        """
        if self.cache_key_override is not None:
            base = self.cache_key_override
        elif self.per_customer:
            base = f"{self.name}:{key}"
        else:
            base = self.name
        if not self.cacheable:
            if not token:
                raise DashboardConfigurationError(
                    f"Non-cacheable resource '{self.name}' requires a unique token"
                )
            return f"{base}:{token}"
        return base


CUSTOMERS = ResourceDescriptor("customers", "/customers", 60.0, per_customer=False)
HEALTH = ResourceDescriptor("health", "/customer/{key}/health", 30.0)
HISTORY = ResourceDescriptor("history", "/customer/{key}/health-history", 300.0)
LICENSES = ResourceDescriptor("licenses", "/customer/{key}/licenses", 120.0)
DEVICES = ResourceDescriptor("devices", "/customer/{key}/devices", 120.0)
ALERTS = ResourceDescriptor("alerts", "/customer/{key}/alerts", 60.0)
ANALYTICS = ResourceDescriptor("analytics", "/customer/{key}/analytics", 120.0)
PSTN = ResourceDescriptor("pstn", "/customer/{key}/pstn", 120.0)
CDR = ResourceDescriptor("cdr", "/customer/{key}/cdr", 120.0)
PLATFORM_STATUS = ResourceDescriptor(
    "status",
    "/status",
    60.0,
    per_customer=False,
    cache_key_override="platform-status",
)

# Mutating / forced actions: ttl 0, unique key per invocation.
REEVAL = ResourceDescriptor("reeval", "/customer/{key}/health/reeval", 0.0, method="POST")
HEALTH_FORCE = ResourceDescriptor(
    "health_force", "/customer/{key}/health?force=1&t={stamp}", 0.0
)
LICENSE_ALERT = ResourceDescriptor(
    "license_alert", "/customer/{key}/license-alert", 0.0, method="POST"
)

RESOURCES: dict[str, ResourceDescriptor] = {
    d.name: d
    for d in (
        CUSTOMERS,
        HEALTH,
        HISTORY,
        LICENSES,
        DEVICES,
        ALERTS,
        ANALYTICS,
        PSTN,
        CDR,
        PLATFORM_STATUS,
        REEVAL,
        HEALTH_FORCE,
        LICENSE_ALERT,
    )
}

# Per-customer families cleared by the customer page refresh action.
CUSTOMER_REFRESH_RESOURCES: tuple[ResourceDescriptor, ...] = (
    HEALTH,
    HISTORY,
    LICENSES,
    DEVICES,
    ALERTS,
)


def get_descriptor(name: str) -> ResourceDescriptor:
    try:
        return RESOURCES[name]
    except KeyError as exc:
        raise DashboardConfigurationError(f"Unknown resource '{name}'") from exc
