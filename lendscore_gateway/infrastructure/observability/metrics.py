"""Prometheus metrics for credit score outcomes and AI gateway health"""

from prometheus_client import Counter, Histogram

# Scoring flow metrics
credit_score_request_counter = Counter(
    "lendscore_credit_score_requests_total",
    "Credit score requests by outcome",
    ["outcome"],  # success | rate_limited | quota_exhausted | upstream_error | ...
)

credit_score_value_histogram = Histogram(
    "lendscore_credit_score_value",
    "Distribution of issued credit scores",
    buckets=[300, 500, 600, 650, 700, 750, 800, 900, 1000],
)

# AI gateway metrics
ai_gateway_latency_histogram = Histogram(
    "ai_gateway_latency_seconds",
    "AI gateway response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

ai_gateway_failure_counter = Counter(
    "ai_gateway_failures_total",
    "Failed AI gateway calls",
    ["reason"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_credit_score(score: int) -> None:
    """Record a successfully issued score"""
    credit_score_request_counter.labels(outcome="success").inc()
    credit_score_value_histogram.observe(score)


def record_scoring_failure(outcome: str) -> None:
    credit_score_request_counter.labels(outcome=outcome).inc()
