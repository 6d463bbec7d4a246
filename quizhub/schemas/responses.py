from typing import Literal

from pydantic import BaseModel, Field


class CacheHealthOut(BaseModel):
    backend: Literal["redis", "local"] = Field(
        ..., description="Backend currently serving cache calls"
    )
    state: str = Field(..., description="Connection manager state")
    attempts: int = Field(..., description="Failed connect attempts in this cycle")


class HealthOut(BaseModel):
    status: Literal["ok"] = "ok"
    cache: CacheHealthOut
