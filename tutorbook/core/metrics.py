"""Prometheus metrics helpers for HTTP and reconciliation observability."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from time import perf_counter

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

HTTP_REQUESTS_TOTAL = Counter(
    "tutorbook_http_requests_total",
    "Total number of HTTP requests handled by the API.",
    ["method", "path", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "tutorbook_http_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

APPOINTMENTS_RECONCILED_TOTAL = Counter(
    "tutorbook_appointments_reconciled_total",
    "Appointments moved to a terminal status by time-based reconciliation.",
    ["transition"],
)

RECONCILIATION_FAILURES_TOTAL = Counter(
    "tutorbook_reconciliation_failures_total",
    "Reconciliation passes that failed and were skipped.",
)


def _request_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path", None)
    if route_path:
        return str(route_path)
    return request.url.path


async def instrument_http_request(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Track request count and latency for each endpoint."""
    started_at = perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        path_label = _request_path_label(request)
        method_label = request.method.upper()

        HTTP_REQUESTS_TOTAL.labels(
            method=method_label,
            path=path_label,
            status_code=str(status_code),
        ).inc()
        HTTP_REQUEST_DURATION_SECONDS.labels(
            method=method_label,
            path=path_label,
        ).observe(perf_counter() - started_at)


def record_reconciliation(canceled: int, completed: int) -> None:
    """Count appointments transitioned by one reconciliation pass."""
    if canceled:
        APPOINTMENTS_RECONCILED_TOTAL.labels(transition="pending_to_canceled").inc(canceled)
    if completed:
        APPOINTMENTS_RECONCILED_TOTAL.labels(transition="approved_to_completed").inc(completed)


def build_metrics_response() -> Response:
    """Return metrics payload in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
