"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registration_attempts = Counter(
    'registration_attempts_total',
    'Total registration attempts',
    ['result']  # admitted, invalid, duplicate, full, error
)

admission_latency = Histogram(
    'admission_latency_seconds',
    'Time spent deciding and persisting a registration',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Storage metrics
storage_errors = Counter(
    'storage_errors_total',
    'Key-value store failures',
    ['operation']  # scan, write
)

admission_checks_skipped = Counter(
    'admission_checks_skipped_total',
    'Admissions that bypassed duplicate/capacity checks because the scan failed'
)

admission_lock_unavailable = Counter(
    'admission_lock_unavailable_total',
    'Admissions that ran without the guard lock'
)

# Newsletter metrics
newsletter_results = Counter(
    'newsletter_results_total',
    'Newsletter forwarding outcomes',
    ['outcome']  # subscribed, already_subscribed, skipped, failed
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_registration(result: str):
    """Record registration attempt. Result: admitted, invalid, duplicate, full, error"""
    registration_attempts.labels(result=result).inc()


def record_storage_error(operation: str):
    storage_errors.labels(operation=operation).inc()


def record_newsletter(outcome: str):
    newsletter_results.labels(outcome=outcome).inc()
