"""Prometheus metrics for monitoring score outcomes, verifications, and upstream health"""

from prometheus_client import Counter, Histogram

# Score metrics
score_calculation_counter = Counter(
    "microcredit_score_calculations_total",
    "Total credit scores calculated",
    ["strategy", "category"],
)

score_value_histogram = Histogram(
    "microcredit_score_value",
    "Distribution of calculated credit scores",
    ["strategy"],
    buckets=[350, 400, 450, 500, 550, 600, 650, 700, 750, 800, 850, 900],
)

# Document verification metrics
verification_counter = Counter(
    "microcredit_verifications_total",
    "Document verifications applied to held scores",
    ["document"],  # utility_bill | bank_statement
)

# Loan wizard metrics
loan_application_counter = Counter(
    "microcredit_loan_applications_total",
    "Loan applications by lifecycle event",
    ["status"],  # started | submitted
)

# Upstream metrics
upstream_failure_counter = Counter(
    "upstream_failures_total",
    "Failed calls to external services",
    ["service"],  # score_service | classifier | utility_bill_service
)

classifier_latency_histogram = Histogram(
    "classifier_latency_seconds",
    "ML classifier response time",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(strategy: str, category: str, score: int) -> None:
    """Record a calculated score for distribution analysis"""
    score_calculation_counter.labels(strategy=strategy, category=category).inc()
    score_value_histogram.labels(strategy=strategy).observe(score)
