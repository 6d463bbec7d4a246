from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from quizhub.infrastructure.cache.connection import ConnectionManager
from quizhub.infrastructure.cache.facade import ResilientCache
from quizhub.infrastructure.cache.local_store import ExpiringLocalStore
from quizhub.logging import setup_logging
from quizhub.presentation.api import api
from quizhub.settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    connection_factory: Optional[Callable[[Settings], ConnectionManager]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    connection_factory = connection_factory or ConnectionManager.from_settings
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # startup: ONE connection manager + local store for the process
        connection = connection_factory(settings)
        local = ExpiringLocalStore()
        app.state.cache_connection = connection
        app.state.cache = ResilientCache(connection, local)
        connection.start()  # connects in the background, never blocks startup

        try:
            yield
        finally:
            # shutdown
            await connection.close()
            local.clear()

    app = FastAPI(title="Quiz Platform API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(api)
    return app


app = create_app()
