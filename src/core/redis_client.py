"""Redis connection used by the revoked-token blocklist.

Socket timeouts come from ``REDIS_SOCKET_TIMEOUT``; the blocklist fails
closed, so an unreachable Redis surfaces as a 503.
"""

import redis
from django.conf import settings

_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return the process-wide Redis client, connecting lazily on first use."""

    global _client
    if _client is None:
        timeout = settings.REDIS_SOCKET_TIMEOUT
        _client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
    return _client


__all__ = ["get_redis_client"]
