"""Prometheus metrics for the Hub agent."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "hub_agent_reconcile_total",
    "Total number of reconciliation passes",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "hub_agent_reconcile_duration_seconds",
    "Duration of reconciliation passes in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

# Cluster object writes
object_operations_total = Counter(
    "hub_agent_object_operations_total",
    "Total number of cluster object writes",
    ["kind", "operation", "result"],
)

# Platform API calls
platform_call_total = Counter(
    "hub_agent_platform_call_total",
    "Total number of Hub platform API calls",
    ["operation", "result"],
)

platform_call_duration_seconds = Histogram(
    "hub_agent_platform_call_duration_seconds",
    "Duration of Hub platform API calls in seconds",
    ["operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Certificate synchronization
certificate_sync_total = Counter(
    "hub_agent_certificate_sync_total",
    "Total number of certificate synchronizations",
    ["result"],
)

# Errors by kind and type
error_total = Counter(
    "hub_agent_error_total",
    "Total number of errors",
    ["kind", "error_type"],
)

rate_limit_hits_total = Counter(
    "hub_agent_rate_limit_hits_total",
    "Total number of client side rate limit waits",
    ["api_type"],
)
