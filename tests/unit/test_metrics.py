"""
Unit tests for the in-process metrics collector.
"""

import pytest

from mdb_autoindex.observability import (
    MetricsCollector,
    get_metrics_collector,
    timed_operation,
)


class TestMetricsCollector:
    """Test per-operation counters."""

    def test_counts_are_summed_over_tags(self):
        collector = MetricsCollector()
        collector.record_operation("watcher.refresh", 1.0, collection="orders")
        collector.record_operation("watcher.refresh", 2.0, collection="users")
        collector.record_operation("watcher.refresh", 3.0, success=False, collection="orders")

        assert collector.get_operation_count("watcher.refresh") == 3
        assert collector.get_error_count("watcher.refresh") == 1
        assert collector.get_operation_count("watcher.cleanup") == 0

    def test_oldest_key_is_evicted(self):
        collector = MetricsCollector(max_metrics=2)
        collector.record_operation("watcher.refresh", 1.0, collection="a")
        collector.record_operation("watcher.refresh", 1.0, collection="b")
        collector.record_operation("watcher.refresh", 1.0, collection="a")
        collector.record_operation("watcher.refresh", 1.0, collection="c")

        # "b" was the least recently updated key
        assert collector.get_operation_count("watcher.refresh") == 3

    def test_reset(self):
        collector = MetricsCollector()
        collector.record_operation("watcher.cleanup", 1.0)
        collector.reset()

        assert collector.get_operation_count("watcher.cleanup") == 0


class TestTimedOperation:
    """Test the timing context manager."""

    def test_records_success(self):
        with timed_operation("watcher.drop_index", collection="orders"):
            pass

        assert get_metrics_collector().get_operation_count("watcher.drop_index") == 1
        assert get_metrics_collector().get_error_count("watcher.drop_index") == 0

    def test_records_failure_and_reraises(self):
        with pytest.raises(ValueError, match="boom"):
            with timed_operation("watcher.drop_index", collection="orders"):
                raise ValueError("boom")

        assert get_metrics_collector().get_operation_count("watcher.drop_index") == 1
        assert get_metrics_collector().get_error_count("watcher.drop_index") == 1

    @pytest.mark.asyncio
    async def test_wraps_awaited_calls(self, watcher, fake_collection):
        fake_collection.index_docs.append({"key": {"a": 1}, "name": "di:a"})

        await watcher.cleanup()

        collector = get_metrics_collector()
        assert collector.get_operation_count("watcher.cleanup") == 1
        assert collector.get_operation_count("watcher.drop_index") == 1
        assert collector.get_operation_count("watcher.refresh") == 1
        assert collector.get_error_count("watcher.cleanup") == 0
