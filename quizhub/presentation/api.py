from fastapi import APIRouter

from quizhub.presentation.routes.health import router as health_router

api = APIRouter()

routers = (health_router,)
for router in routers:
    api.include_router(router)
