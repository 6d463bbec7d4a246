from fastapi import Request

from quizhub.domain.ports.cache import CachePort
from quizhub.infrastructure.cache.connection import ConnectionManager


def get_cache(request: Request) -> CachePort:
    # This is set in quizhub.main lifespan()
    return request.app.state.cache


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.cache_connection
