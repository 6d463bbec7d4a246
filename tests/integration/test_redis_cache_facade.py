import asyncio

import pytest

from quizhub.application.one_time_token import (
    consume_one_time_token,
    issue_one_time_token,
)
from quizhub.application.rate_limit import CounterPolicy, hit
from quizhub.domain.errors import OneTimeTokenExpired, RateLimitExceeded


@pytest.mark.asyncio
async def test_set_get_delete_against_redis(redis_cache, key_prefix):
    cache, r = redis_cache
    key = f"{key_prefix}k"

    await cache.set_with_expiry(key, 30, "v")
    assert await cache.get(key) == "v"
    assert await r.ttl(key) in (29, 30)

    assert await cache.delete(key) == 1
    assert await r.exists(key) == 0


@pytest.mark.asyncio
async def test_ttl_expiry_in_redis(redis_cache, key_prefix):
    cache, _ = redis_cache
    key = f"{key_prefix}short"

    await cache.set_with_expiry(key, 1, "v")
    await asyncio.sleep(1.2)

    assert await cache.get(key) is None


@pytest.mark.asyncio
async def test_counter_uses_atomic_increment(redis_cache, key_prefix):
    cache, r = redis_cache
    policy = CounterPolicy(f"{key_prefix}msg_limit", threshold=3, window_seconds=60)

    counts = await asyncio.gather(*(hit(cache, policy, "42") for _ in range(3)))
    assert sorted(counts) == [1, 2, 3]
    assert await r.ttl(policy.key("42")) in (59, 60)

    with pytest.raises(RateLimitExceeded):
        await hit(cache, policy, "42")
    await r.delete(policy.key("42"))


@pytest.mark.asyncio
async def test_one_time_token_single_use_against_redis(redis_cache, key_prefix):
    cache, _ = redis_cache
    email = f"{key_prefix.strip(':')}@test.com"

    await issue_one_time_token(cache, email, validity_seconds=60)
    await consume_one_time_token(cache, email, "482913")

    with pytest.raises(OneTimeTokenExpired):
        await consume_one_time_token(cache, email, "482913")
