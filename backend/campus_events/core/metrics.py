"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Application lifecycle metrics
application_attempts = Counter(
    'application_attempts_total',
    'Total event application attempts',
    ['result']  # created, duplicate, capacity_exceeded, blocked, not_found
)

status_transitions = Counter(
    'application_transitions_total',
    'Application status and payment status changes',
    ['field', 'target']  # field: status, payment_status
)

bulk_items = Counter(
    'bulk_status_items_total',
    'Items processed by bulk status actions',
    ['action', 'outcome']  # outcome: succeeded, failed
)

refunds_initiated = Counter(
    'refunds_initiated_total',
    'Refund intents recorded on applications'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_application_attempt(result: str):
    """Result: created, duplicate, capacity_exceeded, blocked, not_found"""
    application_attempts.labels(result=result).inc()


def record_transition(field: str, target: str):
    status_transitions.labels(field=field, target=target).inc()


def record_bulk_item(action: str, succeeded: bool):
    outcome = "succeeded" if succeeded else "failed"
    bulk_items.labels(action=action, outcome=outcome).inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
