"""
Prometheus metrics for the catalog service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram

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

# Catalog metrics
catalog_mutations_total = Counter(
    "catalog_mutations_total",
    "Total catalog mutations",
    ["operation", "outcome"],
)

catalog_loads_total = Counter(
    "catalog_loads_total",
    "Catalog loads by the source that populated the in-memory state",
    ["source"],
)

featured_products = Gauge(
    "featured_products",
    "Number of featured products in the in-memory catalog",
)

catalog_products = Gauge(
    "catalog_products",
    "Number of products in the in-memory catalog",
)

# Collaborator metrics
remote_store_errors_total = Counter(
    "remote_store_errors_total",
    "Remote catalog store failures",
    ["operation"],
)

cache_errors_total = Counter(
    "cache_errors_total",
    "Local cache failures",
    ["operation"],
)

image_uploads_total = Counter(
    "image_uploads_total",
    "Image uploads to the hosting service",
    ["folder", "outcome"],
)

# Event metrics
events_published_total = Counter(
    "events_published_total",
    "Domain events published on the notification bus",
    ["event_type"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
