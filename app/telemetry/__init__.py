"""Telemetry helpers and metrics."""

from .metrics import (
    BACKEND_QUERIES,
    ERROR_COUNTER,
    POLLERS_OUTSTANDING,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TASKS_CREATED,
    TASKS_SETTLED,
    increment_backend_query,
    increment_task_created,
    increment_task_settled,
    observe_request,
    set_outstanding_pollers,
)

__all__ = [
    "BACKEND_QUERIES",
    "ERROR_COUNTER",
    "POLLERS_OUTSTANDING",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TASKS_CREATED",
    "TASKS_SETTLED",
    "increment_backend_query",
    "increment_task_created",
    "increment_task_settled",
    "observe_request",
    "set_outstanding_pollers",
]
