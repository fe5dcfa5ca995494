"""Prometheus metrics for analytics requests, advice generation and store reads"""

from prometheus_client import Counter, Histogram

# Analytics metrics
analytics_counter = Counter(
    "finance_analytics_requests_total",
    "Total analytics computations",
    ["operation"],  # forecast | comparison | health | trends | seasonality
)

forecast_confidence_histogram = Histogram(
    "finance_forecast_confidence",
    "Aggregate confidence of issued forecasts",
    buckets=[0, 40, 50, 60, 70, 80, 90, 100],
)

health_grade_counter = Counter(
    "finance_health_grade_total",
    "Health scores issued by grade",
    ["grade"],  # Excellent | Good | Fair | Poor | Critical
)

# Advice collaborator metrics
advice_counter = Counter(
    "advice_generation_total",
    "Advice requests by outcome",
    ["outcome", "reason"],  # generated | fallback; disabled | timeout | error | empty
)

advice_latency_histogram = Histogram(
    "advice_latency_seconds",
    "Advice collaborator response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

# Transaction store metrics
store_fetch_failures_counter = Counter(
    "transaction_store_failures_total",
    "Failed transaction store reads",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analytics(operation: str) -> None:
    analytics_counter.labels(operation=operation).inc()


def record_forecast(confidence: int) -> None:
    """Record one forecast and its aggregate confidence"""
    record_analytics("forecast")
    forecast_confidence_histogram.observe(confidence)


def record_health(grade: str) -> None:
    """Record one health score by grade"""
    record_analytics("health")
    health_grade_counter.labels(grade=grade).inc()


def record_advice(outcome: str, reason: str = "") -> None:
    advice_counter.labels(outcome=outcome, reason=reason or "none").inc()
