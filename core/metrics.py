"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# License metrics
license_operations_total = Counter(
    "license_operations_total",
    "License operations by outcome",
    ["operation", "status"],
)

licenses_created_total = Counter(
    "licenses_created_total",
    "Total licenses created",
    ["edition"],
)

# Concurrency metrics
license_cas_conflicts_total = Counter(
    "license_cas_conflicts_total",
    "Conditional writes lost to a concurrent writer",
    ["operation"],
)

license_storage_errors_total = Counter(
    "license_storage_errors_total",
    "License store read/write failures",
    ["operation"],
)

# Audit metrics
audit_write_failures_total = Counter(
    "audit_write_failures_total",
    "Audit entries that could not be written",
    ["action"],
)
