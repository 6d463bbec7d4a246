from __future__ import annotations

import asyncio
import enum
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from redis.asyncio import Redis

from quizhub.infrastructure.cache.client import make_redis_client
from quizhub.infrastructure.cache.errors import (
    CacheConnectionError,
    ConnectionExhausted,
)
from quizhub.settings import Settings

logger = logging.getLogger(__name__)

StateListener = Callable[["ConnectionState", "ConnectionState"], None]


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    PERMANENTLY_DEGRADED = "permanently_degraded"


@dataclass
class RetryCounter:
    attempts: int = 0

    def increment(self) -> int:
        self.attempts += 1
        return self.attempts

    def reset(self) -> None:
        self.attempts = 0


@dataclass(frozen=True)
class BackoffPolicy:
    base_delay_ms: int = 500
    max_delay_ms: int = 5000
    max_attempts: int = 20

    def compute_delay(self, attempts: int) -> float:
        # attempts is the number of failed attempts so far
        # next delay = min(max_delay, attempts * base), in seconds
        delay_ms = attempts * self.base_delay_ms
        return min(delay_ms, self.max_delay_ms) / 1000

    def exhausted(self, attempts: int) -> bool:
        return attempts >= self.max_attempts


class ConnectionManager:
    """
    Owns the Redis connection lifecycle.

    A background supervisor pings until Redis answers, backing off between
    failed attempts, then keeps probing it every `health_check_interval`
    seconds. A failed probe starts a new reconnect cycle with the attempt
    counter back at zero. Running out of attempts within one cycle, or of
    reconnect cycles for the process (`max_reconnect_cycles`, 0 means no
    cap), moves the manager to PERMANENTLY_DEGRADED for good.

    Failures only ever change `is_ready()`; nothing is raised to callers.
    """

    def __init__(
        self,
        client_factory: Callable[[], Redis],
        *,
        backoff: Optional[BackoffPolicy] = None,
        health_check_interval: float = 5.0,
        max_reconnect_cycles: int = 0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client_factory = client_factory
        self._client: Optional[Redis] = None
        self.backoff = backoff or BackoffPolicy()
        self.health_check_interval = health_check_interval
        self.max_reconnect_cycles = max_reconnect_cycles
        self._sleep = sleep

        self._state = ConnectionState.DISCONNECTED
        self._retries = RetryCounter()
        self._reconnect_cycles = 0
        self._listeners: list[StateListener] = []
        self._task: Optional[asyncio.Task[None]] = None
        self._settled = asyncio.Event()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionManager":
        return cls(
            lambda: make_redis_client(settings),
            backoff=BackoffPolicy(
                base_delay_ms=settings.redis_backoff_base_ms,
                max_delay_ms=settings.redis_backoff_max_ms,
                max_attempts=settings.redis_max_reconnect_attempts,
            ),
            health_check_interval=settings.redis_health_check_interval_seconds,
            max_reconnect_cycles=settings.redis_max_reconnect_cycles,
        )

    # ---- public surface -------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._retries.attempts

    @property
    def reconnect_cycles(self) -> int:
        return self._reconnect_cycles

    @property
    def client(self) -> Optional[Redis]:
        return self._client

    def is_ready(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def on_state_change(self, callback: StateListener) -> None:
        self._listeners.append(callback)

    def start(self) -> None:
        """Spawn the supervisor on the running loop. Returns immediately."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(
            self._supervise(), name="redis-connection-manager"
        )

    async def wait_until_settled(self, timeout: Optional[float] = None) -> None:
        """Wait until connected, permanently degraded, or the supervisor stopped."""
        await asyncio.wait_for(self._settled.wait(), timeout)

    async def close(self) -> None:
        """Cancel any pending retry/probe and close the client. Idempotent."""
        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None

        if self._client is not None:
            client, self._client = self._client, None
            try:
                await client.aclose()
            except Exception:  # noqa: BLE001
                logger.warning("redis client close failed", exc_info=True)

        if self._state is not ConnectionState.PERMANENTLY_DEGRADED:
            self._set_state(ConnectionState.DISCONNECTED)
        self._settled.set()

    # ---- supervisor -----------------------------------------------------

    async def _supervise(self) -> None:
        try:
            while True:
                if not await self._connect_with_retry():
                    return
                await self._monitor()

                self._reconnect_cycles += 1
                if 0 < self.max_reconnect_cycles < self._reconnect_cycles:
                    self._give_up(
                        ConnectionExhausted(
                            f"reconnect cycles exceeded ({self.max_reconnect_cycles})"
                        )
                    )
                    return
                logger.info(
                    "redis connection lost; reconnecting",
                    extra={"cycle": self._reconnect_cycles},
                )
        finally:
            self._settled.set()

    async def _connect_with_retry(self) -> bool:
        self._retries.reset()
        while True:
            self._set_state(ConnectionState.CONNECTING)
            try:
                await self._ping()
            except Exception as e:  # noqa: BLE001
                attempt = self._retries.increment()
                error = CacheConnectionError(attempt, e)
                if self.backoff.exhausted(attempt):
                    self._give_up(
                        ConnectionExhausted(f"{attempt} connect attempts failed")
                    )
                    return False
                delay = self.backoff.compute_delay(attempt)
                self._set_state(ConnectionState.DISCONNECTED)
                logger.warning(
                    "redis connect failed; scheduling retry",
                    extra={
                        "attempt": attempt,
                        "max_attempts": self.backoff.max_attempts,
                        "retry_in_s": delay,
                        "error": str(error),
                    },
                )
                await self._sleep(delay)
            else:
                self._retries.reset()
                self._set_state(ConnectionState.CONNECTED)
                logger.info("redis connected")
                return True

    async def _monitor(self) -> None:
        while True:
            await self._sleep(self.health_check_interval)
            try:
                await self._ping()
            except Exception as e:  # noqa: BLE001
                self._set_state(ConnectionState.DISCONNECTED)
                logger.warning("redis health probe failed", extra={"error": repr(e)})
                return

    async def _ping(self) -> None:
        if self._client is None:
            self._client = self._client_factory()
        await self._client.ping()

    def _give_up(self, reason: ConnectionExhausted) -> None:
        self._set_state(ConnectionState.PERMANENTLY_DEGRADED)
        logger.error(
            "redis unavailable; serving from local cache only",
            extra={"reason": str(reason)},
        )

    def _set_state(self, new: ConnectionState) -> None:
        old = self._state
        if old is new:
            return
        self._state = new
        if new in (ConnectionState.CONNECTED, ConnectionState.PERMANENTLY_DEGRADED):
            self._settled.set()
        else:
            self._settled.clear()
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception:  # noqa: BLE001
                logger.exception("connection state listener failed")
