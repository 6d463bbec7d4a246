from __future__ import annotations

import logging

import quizhub.domain.services as domain_services
from quizhub.application import cache_keys
from quizhub.application.rate_limit import OTP_LIMIT, CounterPolicy, hit, policies_from_settings
from quizhub.domain.errors import OneTimeTokenExpired, OneTimeTokenMismatch
from quizhub.domain.ports.cache import CachePort
from quizhub.settings import get_settings

logger = logging.getLogger(__name__)


async def issue_one_time_token(
    cache: CachePort,
    email: str,
    validity_seconds: int | None = None,
    code_width: int | None = None,
) -> str:
    """
    Generate a fresh code for email, replacing any outstanding one.
    Unset validity/width come from settings (OTP_TTL_SECONDS, OTP_CODE_WIDTH).
    """
    settings = get_settings()
    if validity_seconds is None:
        validity_seconds = settings.otp_ttl_seconds
    if code_width is None:
        code_width = settings.otp_code_width
    code = domain_services.generate_numeric_code(code_width)
    await cache.set_with_expiry(cache_keys.otp(email), validity_seconds, code)
    return code


async def request_one_time_token(
    cache: CachePort,
    email: str,
    request_policy: CounterPolicy | None = None,
    validity_seconds: int | None = None,
    code_width: int | None = None,
) -> str:
    """Throttled issue: counts the request against request_policy first (otp_limit by default)."""
    if request_policy is None:
        request_policy = policies_from_settings()[OTP_LIMIT]
    normalized_email = domain_services.normalize_email(email)
    await hit(cache, request_policy, normalized_email)
    return await issue_one_time_token(
        cache, normalized_email, validity_seconds, code_width
    )


async def consume_one_time_token(cache: CachePort, email: str, code: str) -> None:
    """
    Accept code exactly once.

    Raises OneTimeTokenExpired when nothing is outstanding and
    OneTimeTokenMismatch on a wrong code (the token stays valid).
    On success the token is deleted before returning.
    """
    key = cache_keys.otp(email)
    expected = await cache.get(key)
    if expected is None:
        raise OneTimeTokenExpired()
    if not domain_services.secure_compare(expected, code.strip()):
        raise OneTimeTokenMismatch()
    await cache.delete(key)
    logger.info("one-time token consumed", extra={"key": key})
