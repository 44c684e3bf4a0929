from __future__ import annotations

import redis

from glucose_wars.config import create_redis
from glucose_wars.session_store import SessionRegistry, sessions

_REDIS: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Process-wide client.

    Session clocks keep publishing after the request that created them returns,
    so the client is shared instead of opened and closed per request.
    """

    global _REDIS
    if _REDIS is None:
        _REDIS = create_redis()
    return _REDIS


def get_sessions() -> SessionRegistry:
    return sessions
