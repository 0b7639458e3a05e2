"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheEntry, TTLCacheBackend
from .inmemory import InMemoryTTLCache

__all__ = [
    "CacheEntry",
    "TTLCacheBackend",
    "InMemoryTTLCache",
]
