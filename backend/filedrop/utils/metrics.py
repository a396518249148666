"""
Prometheus metrics definitions.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload workflow metrics
upload_urls_issued_total = Counter(
    'upload_urls_issued_total',
    'Total presigned upload URLs issued',
    ['exposure']
)

uploads_confirmed_total = Counter(
    'uploads_confirmed_total',
    'Total upload confirmations',
    ['verified']
)

direct_uploads_total = Counter(
    'direct_uploads_total',
    'Total uploads proxied through the API'
)

read_urls_issued_total = Counter(
    'read_urls_issued_total',
    'Total presigned read URLs issued'
)

uploads_expired_total = Counter(
    'uploads_expired_total',
    'Total pending uploads marked expired'
)

# Backend metrics
backend_failures_total = Counter(
    'backend_failures_total',
    'Total failed database/storage calls',
    ['backend', 'operation']
)

storage_latency_seconds = Histogram(
    'storage_latency_seconds',
    'Object store call latency in seconds',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0]
)
