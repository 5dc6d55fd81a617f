"""Prometheus metrics"""
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client import CollectorRegistry

# Create registry
registry = CollectorRegistry()

# Request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

http_request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency',
    ['method', 'endpoint'],
    registry=registry
)

# Store metrics
store_errors_total = Counter(
    'store_errors_total',
    'Total Redis command failures',
    ['operation'],
    registry=registry
)

def get_metrics():
    """Get Prometheus metrics"""
    return generate_latest(registry)

def get_content_type():
    """Get metrics content type"""
    return CONTENT_TYPE_LATEST
