"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/__init__.py.
"""

from .client import DEFAULT_HEADERS, FetchClient
from .coalescing import RequestCoalescer
from .debounce import Debouncer

__all__ = [
    "DEFAULT_HEADERS",
    "FetchClient",
    "RequestCoalescer",
    "Debouncer",
]
