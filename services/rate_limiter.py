# services/rate_limiter.py

import logging
from functools import wraps

import redis
from flask import current_app, request

from db.extensions import get_redis
from .errors import ApiError

logger = logging.getLogger(__name__)

RATE_LIMITS = {
    # 200 requests per 15 minutes per IP
    "global": {"limit": 200, "window": 15 * 60,
               "message": "Too many requests. Please try again later."},
    "auth": {"limit": 10, "window": 15 * 60,
             "message": "Too many authentication attempts. Please try again later."},
    "booking": {"limit": 15, "window": 15 * 60,
                "message": "Too many booking attempts. Please try again later."},
    "review": {"limit": 5, "window": 60 * 60,
               "message": "Too many reviews. Please try again later."},
}


class RateLimitExceeded(ApiError):
    status_code = 429


def _client_ip():
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


def check_limit(client, key, limit, window):
    """Fixed-window counter. Returns (allowed, retry_after)."""
    if limit <= 0:
        return True, None

    try:
        pipe = client.pipeline()
        pipe.incr(key)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl == -1:
            client.expire(key, window)
            ttl = window

        if count > limit:
            return False, ttl
        return True, None
    except redis.exceptions.RedisError as e:
        logger.error(f"Rate limit check failed: {e}")
        return True, None  # fail open


def enforce(name):
    if not current_app.config.get('RATE_LIMIT_ENABLED', True):
        return
    config = RATE_LIMITS[name]
    key = f"rl:{name}:{_client_ip()}"
    allowed, retry_after = check_limit(get_redis(), key, config["limit"], config["window"])
    if not allowed:
        logger.warning(f"⚠️  Rate limit '{name}' exceeded for {key}")
        raise RateLimitExceeded(config["message"], payload={'retry_after': retry_after})


def rate_limit(name):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            enforce(name)
            return view(*args, **kwargs)
        return wrapper
    return decorator
