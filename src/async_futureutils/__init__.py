"""
async-futureutils: Fire-and-forget failure observation for asynchronous results.

This package lets callers discard the result of an asynchronous operation
while still handling its failure, for concurrent.futures, asyncio and
Cassandra driver futures.
"""

__version__ = "0.1.0"

from .completion import (
    SupportsCallbacks,
    SupportsDoneCallback,
    add_completion_callback,
    register_completion_adapter,
)
from .driver import execute_and_forget
from .exceptions import FutureUtilsError, UnsupportedResultError
from .metrics import (
    FailureMetrics,
    FailureMetricsRecorder,
    InMemoryMetricsCollector,
    MetricsCollector,
    PrometheusMetricsCollector,
    create_metrics_system,
)
from .observer import FailureAction, ObserverConfig, observe_failure

__all__ = [
    "observe_failure",
    "ObserverConfig",
    "FailureAction",
    "add_completion_callback",
    "register_completion_adapter",
    "SupportsDoneCallback",
    "SupportsCallbacks",
    "execute_and_forget",
    "FutureUtilsError",
    "UnsupportedResultError",
    "FailureMetrics",
    "FailureMetricsRecorder",
    "MetricsCollector",
    "InMemoryMetricsCollector",
    "PrometheusMetricsCollector",
    "create_metrics_system",
]
