"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Common type aliases shared by the cache, fetch and hydration layers.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

# Opaque resource identity, e.g. ``health:acme``.
CacheKey: TypeAlias = str

# Monotonic seconds source; injectable so tests can move time.
Clock: TypeAlias = Callable[[], float]
