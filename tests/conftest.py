import pytest

from quizhub.application.rate_limit import CounterPolicy
from quizhub.infrastructure.cache.facade import ResilientCache
from quizhub.infrastructure.cache.local_store import ExpiringLocalStore
from tests.fakes import FakeClock, FakeConnection, FakeRedis


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def local_store(clock):
    return ExpiringLocalStore(clock=clock)


@pytest.fixture()
def redis():
    return FakeRedis()


@pytest.fixture()
def cache(redis, local_store):
    """Facade with Redis up."""
    return ResilientCache(FakeConnection(redis, ready=True), local_store)


@pytest.fixture()
def cache_down(redis, local_store):
    """Facade with Redis not ready: everything lands in the local store."""
    return ResilientCache(FakeConnection(redis, ready=False), local_store)


@pytest.fixture()
def otp_request_policy():
    return CounterPolicy("otp_limit", threshold=5, window_seconds=86400)


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the one-time code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from quizhub.domain import services as domain_services

    monkeypatch.setattr(
        domain_services, "generate_numeric_code", lambda width=6: "482913"
    )
    yield


@pytest.fixture()
def fresh_settings():
    """Drop the cached Settings before and after, so env overrides apply."""
    from quizhub.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
