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

# Credential issuance metrics
upload_credentials_issued_total = Counter(
    'upload_credentials_issued_total',
    'Total presigned upload credentials issued',
    ['content_type']
)

upload_credential_failures_total = Counter(
    'upload_credential_failures_total',
    'Total presigned upload credential failures',
    ['reason']
)

# Content types tracked as their own series; anything else is "other"
TRACKED_CONTENT_TYPES = frozenset({'image/jpeg', 'image/png', 'image/gif', 'image/webp'})


def content_type_label(content_type: str) -> str:
    """Bound the content_type label to a fixed set of values."""
    if content_type in TRACKED_CONTENT_TYPES:
        return content_type
    return 'other'
