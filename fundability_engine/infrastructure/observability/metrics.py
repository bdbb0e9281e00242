"""Prometheus metrics for monitoring score distribution, validation and webhook performance"""

from prometheus_client import Counter, Histogram

# Assessment metrics
assessment_counter = Counter(
    "fundability_assessment_total",
    "Total fundability assessments computed",
    ["tier"],  # 1 | 2 | 3 | 4
)

score_histogram = Histogram(
    "fundability_score",
    "Distribution of fundability scores",
    buckets=[25, 40, 55, 70, 85, 100],
)

validation_failure_counter = Counter(
    "fundability_validation_failures_total",
    "Assessment requests rejected by input validation",
)

high_risk_counter = Counter(
    "fundability_high_risk_total",
    "Assessments flagged as high-risk profiles",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Webhook delivery response time",
    ["platform"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
    ["platform"],
)

# Batch metrics
batch_item_counter = Counter(
    "fundability_batch_items_total",
    "Batch records processed",
    ["status"],  # success | failed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(score: int, tier: int, high_risk: bool) -> None:
    """Record assessment metrics for monitoring tier and score distribution"""
    assessment_counter.labels(tier=str(tier)).inc()
    score_histogram.observe(score)

    if high_risk:
        high_risk_counter.inc()
