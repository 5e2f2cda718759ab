"""
Metrics collection for MDB_AUTOINDEX.

Counts watcher operations (cache refreshes, index creations and drops,
reaper sweeps) in process, split by operation name and tags such as the
collection name.
"""

import threading
import time
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator


@dataclass
class OperationMetrics:
    """Counters for one operation/tag combination."""

    operation_name: str
    count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    last_execution: datetime | None = None

    def record(self, duration_ms: float, success: bool = True) -> None:
        self.count += 1
        self.total_duration_ms += duration_ms
        if not success:
            self.error_count += 1
        self.last_execution = datetime.now()


class MetricsCollector:
    """
    Thread-safe store of OperationMetrics.

    Entries are keyed by operation name plus sorted tags; once
    ``max_metrics`` keys exist the least recently updated one is evicted.
    """

    def __init__(self, max_metrics: int = 10000):
        self._metrics: OrderedDict[str, OperationMetrics] = OrderedDict()
        self._lock = threading.Lock()
        self._max_metrics = max_metrics

    def record_operation(
        self, operation_name: str, duration_ms: float, success: bool = True, **tags: Any
    ) -> None:
        """
        Record one execution of an operation.

        Args:
            operation_name: Name of the operation (e.g., "watcher.refresh")
            duration_ms: Duration in milliseconds
            success: Whether the operation succeeded
            **tags: Extra dimensions (collection, ...)
        """
        key = operation_name
        if tags:
            tag_str = "_".join(f"{k}={v}" for k, v in sorted(tags.items()))
            key = f"{operation_name}[{tag_str}]"

        with self._lock:
            metric = self._metrics.get(key)
            if metric is None:
                if len(self._metrics) >= self._max_metrics:
                    self._metrics.popitem(last=False)
                metric = self._metrics[key] = OperationMetrics(operation_name=operation_name)
            else:
                self._metrics.move_to_end(key)
            metric.record(duration_ms, success)

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()

    def get_operation_count(self, operation_name: str) -> int:
        """Executions of ``operation_name`` summed over all tags."""
        with self._lock:
            return sum(
                metric.count
                for metric in self._metrics.values()
                if metric.operation_name == operation_name
            )

    def get_error_count(self, operation_name: str) -> int:
        """Failed executions of ``operation_name`` summed over all tags."""
        with self._lock:
            return sum(
                metric.error_count
                for metric in self._metrics.values()
                if metric.operation_name == operation_name
            )


# Global metrics collector instance
_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def record_operation(
    operation_name: str, duration_ms: float, success: bool = True, **tags: Any
) -> None:
    """Record an operation in the global metrics collector."""
    get_metrics_collector().record_operation(operation_name, duration_ms, success, **tags)


@contextmanager
def timed_operation(operation_name: str, **tags: Any) -> Iterator[None]:
    """
    Time the enclosed block and record it in the global collector.

    The block counts as failed if it raises; the exception propagates.

    Example:
        with timed_operation("watcher.refresh", collection="orders"):
            await store.list_indexes()
    """
    start_time = time.time()
    success = False
    try:
        yield
        success = True
    finally:
        record_operation(operation_name, (time.time() - start_time) * 1000, success, **tags)
