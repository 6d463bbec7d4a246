from typing import Annotated

from fastapi import APIRouter, Depends

from quizhub.domain.ports.cache import CachePort
from quizhub.infrastructure.cache.connection import ConnectionManager
from quizhub.presentation.dependencies import get_cache, get_connection_manager
from quizhub.schemas.responses import CacheHealthOut, HealthOut

router = APIRouter()


@router.get("/healthz", response_model=HealthOut)
async def healthz(
    cache: Annotated[CachePort, Depends(get_cache)],
    connection: Annotated[ConnectionManager, Depends(get_connection_manager)],
) -> HealthOut:
    # the service stays healthy on the local fallback; report which one serves
    return HealthOut(
        cache=CacheHealthOut(
            backend="redis" if cache.is_ready() else "local",
            state=connection.state.value,
            attempts=connection.attempts,
        )
    )
