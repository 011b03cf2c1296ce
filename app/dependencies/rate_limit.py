"""Lightweight per-IP per-path rate limiter for sensitive endpoints."""
import time
from collections import defaultdict, deque
from fastapi import Request
from app.utils.errors import TooManyRequestsError
from app.utils.helpers import get_client_ip

# In-memory sliding window buckets: key -> deque[timestamps]
_buckets = defaultdict(deque)


async def rate_limit(request: Request):
    settings = request.app.state.settings
    if not settings.RATE_LIMIT_ENABLED:
        return True

    now = time.time()
    window = settings.RATE_LIMIT_PERIOD_SECONDS
    limit = settings.RATE_LIMIT_REQUESTS

    key = f"{get_client_ip(request, settings.TRUST_FORWARDED_FOR)}:{request.url.path}"

    bucket = _buckets[key]
    window_start = now - window

    # Drop old entries outside the window
    while bucket and bucket[0] <= window_start:
        bucket.popleft()

    if len(bucket) >= limit:
        raise TooManyRequestsError()

    bucket.append(now)
    return True


def reset_rate_limits() -> None:
    _buckets.clear()
