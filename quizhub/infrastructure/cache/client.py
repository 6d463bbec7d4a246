from __future__ import annotations

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from quizhub.settings import Settings


def make_redis_client(settings: Settings) -> Redis:
    """
    Redis client for REDIS_URL, created without connecting.
    decode_responses=True -> we get/put str, not bytes.
    Built-in command retries are disabled: reconnects are driven by
    ConnectionManager's backoff, and a failed command falls back to the
    local store right away.
    """
    return Redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
        socket_timeout=settings.redis_socket_timeout_seconds,
        retry=Retry(NoBackoff(), 0),
    )
