"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Permissive models for upstream JSON envelopes.

The backend adds fields over time and omits optional ones freely, so every
model accepts extra keys and defaults anything missing.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("partnerdash.payloads")


def _coerce_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class _Permissive(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)


class CustomerRef(_Permissive):
    """One entry of the `/customers` listing."""

    key: str
    name: str = ""
    org_id: str | None = Field(default=None, alias="orgId")

    @field_validator("key", mode="before")
    @classmethod
    def _key(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("customer key is required")
        return text

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("org_id", mode="before")
    @classmethod
    def _org_id(cls, value: Any) -> str | None:
        return None if value is None or value == "" else str(value)

    @property
    def display_name(self) -> str:
        return self.name or self.key


class LicenseRow(_Permissive):
    sku: str = ""
    total: float = 0.0
    used: float = 0.0
    available: float = 0.0
    deficient: bool = False

    @field_validator("sku", mode="before")
    @classmethod
    def _sku(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("total", "used", "available", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return _coerce_number(value)

    @field_validator("deficient", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return bool(value)


class DeficientSku(_Permissive):
    sku: str = ""
    available: float = 0.0
    threshold: float = 0.0

    @field_validator("sku", mode="before")
    @classmethod
    def _sku(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("available", "threshold", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> float:
        return _coerce_number(value)


class HealthTransition(_Permissive):
    from_level: str | None = Field(default=None, alias="from")
    to_level: str | None = Field(default=None, alias="to")
    occurred_at: Any = Field(default=None, alias="occurredAt")

    @property
    def is_complete(self) -> bool:
        return bool(self.from_level and self.to_level)


def _parse_rows(model: type[_Permissive], items: Any) -> list[Any]:
    if not isinstance(items, list):
        return []
    rows = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            rows.append(model.model_validate(item))
        except ValidationError as error:
            logger.debug("Skipping malformed %s row: %s", model.__name__, error)
    return rows


def parse_customers(payload: Any) -> list[CustomerRef]:
    """Extract customer refs from a `/customers` payload, skipping bad rows."""
    items = payload.get("customers") if isinstance(payload, dict) else None
    return _parse_rows(CustomerRef, items)


def parse_licenses(payload: Any) -> list[LicenseRow]:
    items = payload.get("licenses") if isinstance(payload, dict) else None
    return _parse_rows(LicenseRow, items)


def parse_deficient_skus(payload: Any) -> list[DeficientSku]:
    items = payload.get("deficientSkus") if isinstance(payload, dict) else None
    return _parse_rows(DeficientSku, items)


def parse_transition(payload: Any) -> HealthTransition | None:
    """Return the health transition only when both ends are present."""
    raw = payload.get("transition") if isinstance(payload, dict) else None
    if not isinstance(raw, dict):
        return None
    try:
        transition = HealthTransition.model_validate(raw)
    except ValidationError:
        return None
    return transition if transition.is_complete else None
