from __future__ import annotations

import logging
from typing import Optional

from quizhub.infrastructure.cache.connection import ConnectionManager
from quizhub.infrastructure.cache.errors import CacheOperationError
from quizhub.infrastructure.cache.local_store import ExpiringLocalStore

logger = logging.getLogger(__name__)

OK = "OK"


class ResilientCache:
    """
    Single entry point for cache reads/writes (implements CachePort).

    Routes each call to Redis while the ConnectionManager reports ready and
    to the ExpiringLocalStore otherwise. A Redis command that fails while
    "ready" degrades only that call to the local store; readiness itself is
    left to the manager's health probes. No method ever raises.
    """

    def __init__(self, connection: ConnectionManager, local: ExpiringLocalStore) -> None:
        self._connection = connection
        self._local = local

    @property
    def local(self) -> ExpiringLocalStore:
        return self._local

    def is_ready(self) -> bool:
        return self._connection.is_ready()

    async def get(self, key: str) -> Optional[str]:
        client = self._remote()
        if client is None:
            return self._local.get(key)
        try:
            value = await client.get(key)
        except Exception as e:  # noqa: BLE001
            self._log_failure(CacheOperationError("GET", key, e))
            return self._local.get(key)
        if value is None:
            # written during an outage and still within its TTL
            return self._local.get(key)
        return value

    async def set_with_expiry(self, key: str, ttl_seconds: int, value: str) -> str:
        client = self._remote()
        if client is None:
            self._local.set(key, value, ttl_seconds)
            return OK
        try:
            await client.set(key, value, ex=ttl_seconds)
        except Exception as e:  # noqa: BLE001
            self._log_failure(CacheOperationError("SETEX", key, e))
            self._local.set(key, value, ttl_seconds)
            return OK
        # an older fallback copy must not shadow the remote value
        self._local.delete(key)
        return OK

    async def delete(self, key: str) -> int:
        # local copy goes regardless of the remote outcome
        removed_locally = self._local.delete(key)
        client = self._remote()
        if client is None:
            return removed_locally
        try:
            removed = int(await client.delete(key))
        except Exception as e:  # noqa: BLE001
            self._log_failure(CacheOperationError("DEL", key, e))
            return removed_locally
        return 1 if (removed or removed_locally) else 0

    async def incr_with_expiry(self, key: str, ttl_seconds: int, amount: int = 1) -> int:
        client = self._remote()
        if client is None:
            return self._local.incr(key, ttl_seconds, amount)

        # a count kept locally during an outage moves into the remote counter
        carried = self._local_count(key)
        if carried:
            self._local.delete(key)
        try:
            pipe = client.pipeline(transaction=True)
            pipe.incrby(key, carried + amount)
            pipe.expire(key, ttl_seconds)
            count, _ = await pipe.execute()
        except Exception as e:  # noqa: BLE001
            self._log_failure(CacheOperationError("INCRBY", key, e))
            return self._local.incr(key, ttl_seconds, carried + amount)
        return int(count)

    def _local_count(self, key: str) -> int:
        raw = self._local.get(key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError:
            return 0

    def _remote(self):
        if not self._connection.is_ready():
            return None
        return self._connection.client

    @staticmethod
    def _log_failure(error: CacheOperationError) -> None:
        logger.warning(
            "redis operation failed; using local cache",
            extra={"operation": error.operation, "key": error.key, "error": repr(error.cause)},
        )
