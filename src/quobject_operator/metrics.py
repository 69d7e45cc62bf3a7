"""Prometheus metrics for the QuObject Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "quobject_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "quobject_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# S3 operation metrics
bucket_operations_total = Counter(
    "quobject_operator_bucket_operations_total",
    "Total number of S3 bucket operations",
    ["operation", "result"],
)

# Secret / ConfigMap writes
artifact_operations_total = Counter(
    "quobject_operator_artifact_operations_total",
    "Total number of credentials and configuration artifact writes",
    ["artifact", "operation", "result"],
)

# Error metrics
error_total = Counter(
    "quobject_operator_error_total",
    "Total number of reconcile errors",
    ["kind", "error_type"],
)

# API call metrics
api_call_total = Counter(
    "quobject_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "quobject_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Resource status metrics
resource_status_total = Counter(
    "quobject_operator_resource_status_total",
    "Total number of resource status transitions by phase",
    ["kind", "status"],
)
