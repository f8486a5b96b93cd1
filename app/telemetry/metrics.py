"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

TASKS_CREATED = Counter(
    "recognition_tasks_created_total",
    "Recognition tasks accepted and handed to a background poller",
)

TASKS_SETTLED = Counter(
    "recognition_tasks_settled_total",
    "Recognition tasks that reached a terminal status",
    ("status",),
)

BACKEND_QUERIES = Counter(
    "recognition_backend_queries_total",
    "Status queries issued against the recognition backend",
    ("outcome",),
)

POLLERS_OUTSTANDING = Gauge(
    "recognition_pollers_outstanding",
    "Background pollers that have not finished yet",
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def increment_task_created() -> None:
    TASKS_CREATED.inc()


def increment_task_settled(status: str) -> None:
    TASKS_SETTLED.labels(status=status).inc()


def increment_backend_query(outcome: str) -> None:
    """Count one backend query by outcome (a backend status or ``error``)."""

    BACKEND_QUERIES.labels(outcome=outcome).inc()


def set_outstanding_pollers(count: int) -> None:
    POLLERS_OUTSTANDING.set(max(count, 0))
