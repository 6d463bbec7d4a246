from __future__ import annotations

import logging
from dataclasses import dataclass

from quizhub.application import cache_keys
from quizhub.domain.errors import RateLimitExceeded
from quizhub.domain.ports.cache import CachePort
from quizhub.settings import Settings, get_settings

logger = logging.getLogger(__name__)

OTP_LIMIT = "otp_limit"
LOGIN_LIMIT = "login_limit"
MSG_LIMIT = "msg_limit"


@dataclass(frozen=True)
class CounterPolicy:
    name: str
    threshold: int
    window_seconds: int

    def key(self, subject: str) -> str:
        return cache_keys.counter(self.name, subject)


def policies_from_settings(settings: Settings | None = None) -> dict[str, CounterPolicy]:
    settings = settings or get_settings()
    return {
        OTP_LIMIT: CounterPolicy(
            OTP_LIMIT,
            settings.otp_request_limit,
            settings.otp_request_window_seconds,
        ),
        LOGIN_LIMIT: CounterPolicy(
            LOGIN_LIMIT,
            settings.login_attempt_limit,
            settings.login_attempt_window_seconds,
        ),
        MSG_LIMIT: CounterPolicy(
            MSG_LIMIT,
            settings.message_daily_limit,
            settings.message_window_seconds,
        ),
    }


async def current_count(cache: CachePort, policy: CounterPolicy, subject: str) -> int:
    raw = await cache.get(policy.key(subject))
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        logger.warning(
            "non-numeric rate limit counter; treating as 0",
            extra={"policy": policy.name, "subject": subject},
        )
        return 0


async def hit(cache: CachePort, policy: CounterPolicy, subject: str) -> int:
    """
    Count one more request for subject under policy and return the new count.

    Raises RateLimitExceeded once the window already holds `threshold`
    requests. Every accepted hit restarts the window from now (sliding
    window), so the counter only disappears after a quiet full window.
    """
    if await current_count(cache, policy, subject) >= policy.threshold:
        raise RateLimitExceeded(policy.name, subject, policy.threshold)

    count = await cache.incr_with_expiry(policy.key(subject), policy.window_seconds)
    if count > policy.threshold:
        # a concurrent request got the last slot between our read and incr;
        # hand ours back so the count stays at the threshold
        await cache.incr_with_expiry(
            policy.key(subject), policy.window_seconds, amount=-1
        )
        raise RateLimitExceeded(policy.name, subject, policy.threshold)
    return count


async def remaining(cache: CachePort, policy: CounterPolicy, subject: str) -> int:
    return max(policy.threshold - await current_count(cache, policy, subject), 0)


async def reset(cache: CachePort, policy: CounterPolicy, subject: str) -> None:
    await cache.delete(policy.key(subject))
