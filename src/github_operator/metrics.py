"""Prometheus metrics for the GitHub Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "github_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "github_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "github_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "github_operator_resource_status_total",
    "Observed resource phases after reconciliation",
    ["kind", "status"],
)

# Forge operation metrics
forge_operations_total = Counter(
    "github_operator_forge_operations_total",
    "Total number of forge repository and key operations",
    ["operation", "result"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "github_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "resource_type"],
)

# Optimistic concurrency
status_update_conflicts_total = Counter(
    "github_operator_status_update_conflicts_total",
    "Total number of status writes rejected with a version conflict",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "github_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "github_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "github_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)
