"""
Failure metrics for fire-and-forget operations.

This module provides ready-made failure actions that count observed
failures, for use with :func:`~async_futureutils.observer.observe_failure`:
- In-memory counters for development and testing
- Prometheus counters for production monitoring

Collectors are synchronous because failure actions run inside completion
continuations, on whichever thread resolved the result.
"""

import logging
import threading
import weakref
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry, Counter

logger = logging.getLogger(__name__)

# One counter per registry, shared by every collector built on it
_failure_counters: "weakref.WeakKeyDictionary[CollectorRegistry, Counter]" = (
    weakref.WeakKeyDictionary()
)
_failure_counters_lock = threading.Lock()


def _failure_counter(registry: "CollectorRegistry") -> "Counter":
    from prometheus_client import Counter

    with _failure_counters_lock:
        counter = _failure_counters.get(registry)
        if counter is None:
            counter = Counter(
                "async_failures_total",
                "Total number of failures observed on fire-and-forget operations",
                ["source", "error_type"],
                registry=registry,
            )
            _failure_counters[registry] = counter
        return counter


@dataclass
class FailureMetrics:
    """A single observed failure."""

    source: str
    error_type: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MetricsCollector(ABC):
    """Abstract base class for failure metrics backends."""

    @abstractmethod
    def record_failure(self, metrics: FailureMetrics) -> None:
        """Record an observed failure."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get aggregated statistics."""
        pass


class InMemoryMetricsCollector(MetricsCollector):
    """In-memory failure collector for development and testing."""

    def __init__(self, max_entries: int = 10000):
        self.max_entries = max_entries
        self.failures: deque = deque(maxlen=max_entries)
        self.error_counts: Dict[str, int] = defaultdict(int)
        self.source_counts: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def record_failure(self, metrics: FailureMetrics) -> None:
        """Record an observed failure."""
        with self._lock:
            self.failures.append(metrics)
            self.error_counts[metrics.error_type] += 1
            self.source_counts[metrics.source] += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get aggregated failure statistics."""
        with self._lock:
            if not self.failures:
                return {"message": "No failures recorded"}

            cutoff = datetime.now(timezone.utc) - timedelta(minutes=5)
            recent = [f for f in self.failures if f.timestamp > cutoff]

            return {
                "total_failures": sum(self.error_counts.values()),
                "recent_failures_5min": len(recent),
                "failures_per_second": len(recent) / 300,  # 5 minutes
                "error_summary": dict(self.error_counts),
                "top_sources": dict(
                    sorted(self.source_counts.items(), key=lambda x: x[1], reverse=True)[:10]
                ),
            }


class PrometheusMetricsCollector(MetricsCollector):
    """Prometheus failure collector for production monitoring."""

    failure_total: Optional["Counter"]
    _available: bool

    def __init__(self, registry: Optional["CollectorRegistry"] = None) -> None:
        try:
            from prometheus_client import REGISTRY

            self.failure_total = _failure_counter(registry if registry is not None else REGISTRY)
            self._available = True
        except ImportError:
            logger.warning("prometheus_client not available, metrics disabled")
            self.failure_total = None
            self._available = False

    def record_failure(self, metrics: FailureMetrics) -> None:
        """Record an observed failure to Prometheus."""
        if not self._available or self.failure_total is None:
            return

        self.failure_total.labels(source=metrics.source, error_type=metrics.error_type).inc()

    def get_stats(self) -> Dict[str, Any]:
        """Get current Prometheus metrics."""
        if not self._available:
            return {"error": "Prometheus client not available"}

        return {"message": "Metrics available via Prometheus endpoint"}


class FailureMetricsRecorder:
    """
    Failure action that fans observed failures out to metrics collectors.

    Instances are callable with the error, so they can be passed directly to
    ``observe_failure``. A collector that raises is not contained here; the
    observer logs it together with the original error.
    """

    def __init__(self, collectors: List[MetricsCollector], source: str = "default"):
        self.collectors = collectors
        self.source = source
        self._enabled = True

    def enable(self) -> None:
        """Enable metrics collection."""
        self._enabled = True

    def disable(self) -> None:
        """Disable metrics collection."""
        self._enabled = False

    def __call__(self, error: BaseException) -> None:
        if not self._enabled:
            return

        metrics = FailureMetrics(source=self.source, error_type=type(error).__name__)
        for collector in self.collectors:
            collector.record_failure(metrics)


def create_metrics_system(
    backend: str = "memory",
    prometheus_enabled: bool = False,
    source: str = "default",
    registry: Optional["CollectorRegistry"] = None,
) -> FailureMetricsRecorder:
    """Create a failure recorder with the specified backends."""
    collectors: List[MetricsCollector] = []

    if backend == "memory":
        collectors.append(InMemoryMetricsCollector())

    if prometheus_enabled:
        collectors.append(PrometheusMetricsCollector(registry=registry))

    return FailureMetricsRecorder(collectors, source=source)
