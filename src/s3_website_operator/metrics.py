"""Prometheus metrics for the S3 Website Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "s3_website_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "s3_website_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Website configuration operation metrics
website_operations_total = Counter(
    "s3_website_operator_website_operations_total",
    "Total number of website configuration operations",
    ["operation", "result"],
)

plan_actions_total = Counter(
    "s3_website_operator_plan_actions_total",
    "Total number of reconciliation plans by action",
    ["action"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "s3_website_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "attribute"],
)

# API call metrics
api_call_total = Counter(
    "s3_website_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "s3_website_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "s3_website_operator_rate_limit_hits_total",
    "Total number of rate limit or transient failure hits",
    ["api_type"],
)

# Error metrics
error_total = Counter(
    "s3_website_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "s3_website_operator_resource_status_total",
    "Resource status updates",
    ["kind", "status"],
)
