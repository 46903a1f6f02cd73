"""Prometheus metrics for boleto lifecycle operations and bank gateway performance"""

from prometheus_client import Counter, Histogram

# Lifecycle metrics
lifecycle_counter = Counter(
    "boleto_lifecycle_total",
    "Boleto lifecycle operations by outcome",
    ["operation", "outcome"],  # issue|inquire|amend|write_off|settle x success|failure kind
)

# Bank gateway metrics
gateway_latency_histogram = Histogram(
    "bank_gateway_latency_seconds",
    "Bradesco API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

gateway_failure_counter = Counter(
    "bank_gateway_failures_total",
    "Failed Bradesco API calls",
    ["operation", "kind"],  # unavailable | rejected | invalid_response
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_lifecycle(operation: str, outcome: str) -> None:
    """Count a lifecycle operation outcome"""
    lifecycle_counter.labels(operation=operation, outcome=outcome).inc()


def record_gateway_failure(operation: str, kind: str) -> None:
    gateway_failure_counter.labels(operation=operation, kind=kind).inc()
