"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..types import CacheKey, JSONValue


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached API payload with its absolute expiry (clock seconds)."""

    value: JSONValue
    expires_at_s: float


class TTLCacheBackend(Protocol):
    """
    Protocol implemented by page-lifetime response caches.

    Methods are synchronous: under the cooperative scheduler a single call
    is never interleaved with another mutation, so every write and every
    prefix invalidation is observed atomically by readers.
    """

    backend_id: str

    def lookup(self, key: CacheKey) -> CacheEntry | None: ...

    def get(self, key: CacheKey, default: JSONValue = None) -> JSONValue: ...

    def set(self, key: CacheKey, value: JSONValue, *, ttl_s: float) -> None: ...

    def delete(self, key: CacheKey) -> None: ...

    def delete_prefix(self, prefix: str) -> int: ...
