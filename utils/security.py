"""
Security Module - Client IP lookup and rate limiting for public forms
"""

import time
from flask import request, current_app

RATE_LIMIT_MAX_REQUESTS = 10  # Max 10 requests
RATE_LIMIT_WINDOW = 60  # Per 60 seconds


def get_client_ip():
    """Get real client IP address"""
    forwarded = request.environ.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.environ.get('REMOTE_ADDR', 'unknown')


def check_rate_limit(endpoint='contact'):
    """Check if IP is within rate limit"""
    # {ip: [(timestamp, endpoint), ...]}, kept per app instance
    requests_log = current_app.extensions.setdefault('rate_limits', {})
    client_ip = get_client_ip()
    current_time = time.time()

    # Clean old requests outside the window
    requests_log[client_ip] = [
        (ts, ep) for ts, ep in requests_log.get(client_ip, [])
        if current_time - ts < RATE_LIMIT_WINDOW
    ]

    endpoint_requests = [ep for ts, ep in requests_log[client_ip] if ep == endpoint]
    if len(endpoint_requests) >= RATE_LIMIT_MAX_REQUESTS:
        current_app.logger.warning(f"Rate limit hit for {client_ip} on {endpoint}")
        return False

    requests_log[client_ip].append((current_time, endpoint))
    return True


__all__ = [
    'get_client_ip',
    'check_rate_limit',
]
