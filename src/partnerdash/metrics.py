"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics adapters for fetch-layer observability.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Any, Protocol


class FetchMetrics(Protocol):
    """Minimal metrics interface for fetch client instrumentation."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Increment a counter metric."""


class NoOpFetchMetrics:
    """Default metrics sink when no metrics backend is provided."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = name
        _ = value
        _ = tags


class InMemoryFetchMetrics:
    """Process-local counters, keyed by metric name plus sorted tags."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    @staticmethod
    def _key(name: str, tags: Mapping[str, str] | None) -> str:
        if not tags:
            return name
        rendered = ",".join(f"{k}={tags[k]}" for k in sorted(tags))
        return f"{name}{{{rendered}}}"

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        self.counts[self._key(name, tags)] += value

    def value(self, name: str, *, tags: Mapping[str, str] | None = None) -> int:
        return self.counts[self._key(name, tags)]


class PrometheusFetchMetrics:
    """
    Prometheus-backed fetch metrics adapter.

    Requires `prometheus_client` package.
    """

    def __init__(self, *, namespace: str = "partnerdash", registry: Any = None) -> None:
        try:
            from prometheus_client import Counter as PromCounter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusFetchMetrics requires `prometheus_client` to be installed."
            ) from exc

        self._Counter = PromCounter
        self._namespace = namespace
        self._registry = registry
        self._counters: dict[str, Any] = {}

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        label_names = tuple(sorted((tags or {}).keys()))
        key = f"{name}|{','.join(label_names)}"
        counter = self._counters.get(key)
        if counter is None:
            kwargs: dict[str, Any] = {}
            if self._registry is not None:
                kwargs["registry"] = self._registry
            counter = self._Counter(
                name=name,
                documentation=f"Dashboard fetch metric {name}",
                namespace=self._namespace,
                labelnames=label_names,
                **kwargs,
            )
            self._counters[key] = counter

        if label_names:
            label_values = [str((tags or {})[label]) for label in label_names]
            counter.labels(*label_values).inc(value)
        else:
            counter.inc(value)
