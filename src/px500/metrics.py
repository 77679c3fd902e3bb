"""
Prometheus metrics definitions for the px500 client.

Naming conventions: snake_case, px500_ prefix.
"""

from prometheus_client import Counter, Gauge, Histogram

__all__ = [
    "active_streams",
    "pages_total",
    "request_duration_seconds",
    "requests_total",
]

# ==============================================================================
# COUNTERS
# ==============================================================================

pages_total = Counter(
    "px500_pages_total",
    "Pages produced by streaming endpoints",
    ["endpoint", "status"],
    # endpoint: list, search, comments
    # status: emitted, empty, error
)

requests_total = Counter(
    "px500_requests_total",
    "HTTP requests sent to the API",
    ["method", "status"],
    # status: HTTP status code, or "error" for network failures
)

# ==============================================================================
# GAUGES
# ==============================================================================

active_streams = Gauge(
    "px500_active_streams",
    "Streaming producers currently running",
    ["endpoint"],
)

# ==============================================================================
# HISTOGRAMS
# ==============================================================================

request_duration_seconds = Histogram(
    "px500_request_duration_seconds",
    "API request latency in seconds",
    ["method"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)
