"""
Shared metrics for the Casbin Redis adapter.
"""

import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from .errors import AdapterException


OPERATIONS_TOTAL = Counter(
    "casbin_adapter_operations_total",
    "Total adapter operations",
    ["operation", "status"],
)

OPERATION_DURATION_SECONDS = Histogram(
    "casbin_adapter_operation_duration_seconds",
    "Adapter operation duration in seconds",
    ["operation"],
)

ERRORS_TOTAL = Counter(
    "casbin_adapter_errors_total",
    "Total adapter errors",
    ["error_type"],
)


def record_error(error_type: str) -> None:
    """Record error metrics."""
    ERRORS_TOTAL.labels(error_type=error_type).inc()


@contextmanager
def time_operation(operation: str):
    """Context manager to time and count an adapter operation."""
    start_time = time.time()
    status = "success"
    try:
        yield
    except AdapterException as e:
        status = "error"
        record_error(e.code)
        raise
    except Exception:
        status = "error"
        record_error("UNEXPECTED_ERROR")
        raise
    finally:
        OPERATIONS_TOTAL.labels(operation=operation, status=status).inc()
        OPERATION_DURATION_SECONDS.labels(operation=operation).observe(time.time() - start_time)
