"""Prometheus metrics for goal transfers, reports and upstream dependencies"""

from prometheus_client import Counter, Histogram

# Goal ledger metrics
transfer_counter = Counter(
    "moneywise_goal_transfer_total",
    "Savings Goal funding transfers",
    ["outcome"],  # funded | insufficient_funds | rejected | replayed | failed
)

goal_completed_counter = Counter(
    "moneywise_goal_completed_total",
    "Goals that reached their target amount",
)

# Report metrics
report_counter = Counter(
    "moneywise_report_generated_total",
    "Reports generated",
    ["report_type", "format"],
)

# Notification webhook metrics
notification_latency_histogram = Histogram(
    "notification_webhook_latency_seconds",
    "Email webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

notification_failure_counter = Counter(
    "notification_webhook_failures_total",
    "Failed email webhook deliveries",
)

# Exchange rate API metrics
currency_latency_histogram = Histogram(
    "currency_rates_latency_seconds",
    "Exchange rate API response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

currency_failures_counter = Counter(
    "currency_conversion_failures_total",
    "Failed exchange rate API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_goal_completed() -> None:
    goal_completed_counter.inc()


def record_transfer(outcome: str, target_completed: bool = False) -> None:
    """Record transfer outcome and goal completions"""
    transfer_counter.labels(outcome=outcome).inc()
    if target_completed:
        record_goal_completed()


def record_report(report_type: str, format: str) -> None:
    report_counter.labels(report_type=report_type, format=format).inc()
