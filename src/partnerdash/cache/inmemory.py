"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import logging
import time

from ..types import CacheKey, Clock, JSONValue
from .base import CacheEntry, TTLCacheBackend

logger = logging.getLogger("partnerdash.cache")


class InMemoryTTLCache(TTLCacheBackend):
    """
    Process-local TTL cache scoped to one dashboard session.

    Expiry is lazy: entries are checked (and dropped) on read, never swept.
    There is no size bound; the cache lives only as long as its session.
    """

    backend_id = "inmemory"

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or time.monotonic
        self._rows: dict[CacheKey, CacheEntry] = {}

    def lookup(self, key: CacheKey) -> CacheEntry | None:
        """Return the live entry for `key`, or None when absent or expired."""
        row = self._rows.get(key)
        if row is None:
            return None
        if row.expires_at_s <= self._clock():
            self._rows.pop(key, None)
            return None
        return row

    def get(self, key: CacheKey, default: JSONValue = None) -> JSONValue:
        row = self.lookup(key)
        if row is None:
            return default
        return row.value

    def set(self, key: CacheKey, value: JSONValue, *, ttl_s: float) -> None:
        if ttl_s <= 0:
            return
        self._rows[key] = CacheEntry(value=value, expires_at_s=self._clock() + ttl_s)

    def delete(self, key: CacheKey) -> None:
        self._rows.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        """Remove every stored key starting with `prefix`; return the count."""
        doomed = [key for key in self._rows if key.startswith(prefix)]
        for key in doomed:
            del self._rows[key]
        logger.debug("Invalidated %d cache entries for prefix %r", len(doomed), prefix)
        return len(doomed)

    def clear(self) -> None:
        self._rows.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None

    def __len__(self) -> int:
        return len(self._rows)
