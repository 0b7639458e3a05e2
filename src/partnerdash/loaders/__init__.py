"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: loaders/__init__.py.
"""

from .descriptors import (
    CUSTOMER_REFRESH_RESOURCES,
    RESOURCES,
    ResourceDescriptor,
    ResourceRequest,
    get_descriptor,
)
from .resources import REEVAL_FALLBACK_STATUSES, ResourceLoaders

__all__ = [
    "CUSTOMER_REFRESH_RESOURCES",
    "RESOURCES",
    "REEVAL_FALLBACK_STATUSES",
    "ResourceDescriptor",
    "ResourceRequest",
    "ResourceLoaders",
    "get_descriptor",
]
