"""
Performance monitoring and metrics collection.
"""
import inspect
import time
import logging
from typing import Dict, Optional, Any
from functools import wraps
from collections import defaultdict
import threading

logger = logging.getLogger(__name__)

MAX_ENTRIES_PER_METRIC = 1000

# Thread-safe metrics storage
_metrics_lock = threading.Lock()
_metrics: Dict[str, list] = defaultdict(list)


class PerformanceMonitor:
    """Monitor and track engine timings."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a performance metric.

        Args:
            name: Metric name (e.g., 'build_profile', 'compute_statistic')
            value: Metric value (usually duration in seconds)
            metadata: Optional metadata (status, operation, ...)
        """
        with _metrics_lock:
            entries = _metrics[name]
            entries.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(entries) > MAX_ENTRIES_PER_METRIC:
                del entries[:-MAX_ENTRIES_PER_METRIC]

    @staticmethod
    def _summarize(values: list) -> Dict[str, float]:
        ordered = sorted(values)
        return {
            'count': len(ordered),
            'min': ordered[0],
            'max': ordered[-1],
            'mean': sum(ordered) / len(ordered),
            'p50': ordered[len(ordered) // 2],
            'p95': ordered[int(len(ordered) * 0.95)],
        }

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a metric.

        Returns:
            Dict with count, min, max, mean, p50, p95, or None if no data
        """
        with _metrics_lock:
            entries = _metrics.get(metric_name)
            if not entries:
                return None
            return PerformanceMonitor._summarize([m['value'] for m in entries])

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        """Get statistics for all metrics."""
        with _metrics_lock:
            return {
                name: PerformanceMonitor._summarize([m['value'] for m in entries])
                for name, entries in _metrics.items() if entries
            }

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def track_performance(metric_name: str):
    """
    Decorator to track function execution time.

    Usage:
        @track_performance("build_profile")
        def build_profile(...):
            ...
    """
    def _record(start_time: float, error: Optional[Exception] = None):
        duration = time.perf_counter() - start_time
        metadata = {'status': 'success' if error is None else 'error'}
        if error is not None:
            metadata['error'] = str(error)
        PerformanceMonitor.record_metric(metric_name, duration, metadata)
        logger.debug(
            f"{metric_name} {metadata['status']} in {duration:.4f}s",
            extra={'metric': metric_name, 'duration': duration}
        )

    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _record(start_time, e)
                raise
            _record(start_time)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record(start_time, e)
                raise
            _record(start_time)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
