"""Prometheus metrics for the site link controller."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "sitelink_controller_reconcile_total",
    "Total number of resource reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "sitelink_controller_reconcile_duration_seconds",
    "Duration of resource reconciliations in seconds",
    ["kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

# Condition wait metrics
wait_total = Counter(
    "sitelink_controller_wait_total",
    "Total number of condition waits by outcome",
    ["kind", "milestone", "result"],
)

wait_duration_seconds = Histogram(
    "sitelink_controller_wait_duration_seconds",
    "Duration of condition waits in seconds",
    ["kind", "milestone"],
    buckets=[0.1, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
)

# API call metrics
api_call_total = Counter(
    "sitelink_controller_api_call_total",
    "Total number of Kubernetes API calls",
    ["operation", "kind", "result"],
)

api_call_duration_seconds = Histogram(
    "sitelink_controller_api_call_duration_seconds",
    "Duration of Kubernetes API calls in seconds",
    ["operation", "kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "sitelink_controller_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

# Watch metrics
watch_events_total = Counter(
    "sitelink_controller_watch_events_total",
    "Total number of watch events delivered to handlers",
    ["kind", "event_type"],
)

watch_restarts_total = Counter(
    "sitelink_controller_watch_restarts_total",
    "Total number of watch stream restarts",
    ["kind", "reason"],
)

# Grant server metrics
grant_autoconfigure_total = Counter(
    "sitelink_controller_grant_autoconfigure_total",
    "Total number of grant server auto-configuration attempts",
    ["result"],
)
