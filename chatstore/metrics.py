"""
Prometheus metrics for the message store.

This module provides:
- Store operation counter (operation, result)
- Store operation latency histogram (operation)
- Gauge of messages held in memory

Metrics are stored in-memory using prometheus-client.
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest


# =============================================================================
# Metric Definitions
# =============================================================================

# operation: load, save
# result: ok, first_run, io_error, parse_error
store_operations_total = Counter(
    "store_operations_total",
    "Total message store operations",
    labelnames=["operation", "result"]
)

# Using default buckets: .005, .01, .025, .05, .075, .1, .25, .5, .75, 1.0, 2.5, 5.0, 7.5, 10.0
store_operation_latency_seconds = Histogram(
    "store_operation_latency_seconds",
    "Message store operation latency in seconds",
    labelnames=["operation"]
)

stored_messages = Gauge(
    "stored_messages",
    "Number of messages held in memory by the most recently updated store"
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_store_operation(operation: str, result: str, latency_seconds: float) -> None:
    """
    Record a store operation in metrics.

    Args:
        operation: Operation name (load, save)
        result: Outcome - one of:
            - "ok": Operation succeeded
            - "first_run": Load found no messages file
            - "io_error": File could not be read or written
            - "parse_error": File content was not a valid record array
            - "error": The operation raised unexpectedly
        latency_seconds: Operation time in seconds
    """
    store_operations_total.labels(operation=operation, result=result).inc()
    store_operation_latency_seconds.labels(operation=operation).observe(latency_seconds)


def record_collection_size(size: int) -> None:
    """Record how many messages the store currently holds."""
    stored_messages.set(size)


def get_metrics() -> bytes:
    """
    Generate Prometheus exposition format metrics.

    Returns:
        Metrics in Prometheus text format as bytes
    """
    return generate_latest()
