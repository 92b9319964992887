"""
Backend health endpoints.
"""

from typing import Literal

from saaspe.api.base import ApiModel, BaseEndpoint


class BasicHealth(ApiModel):
    status: str
    timestamp: str


class DatabaseHealth(ApiModel):
    connected: bool
    response_time: float
    active_connections: int
    error: str | None = None


class DetailedHealth(ApiModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: str
    uptime: float
    version: str
    environment: str
    response_time: float
    database: DatabaseHealth


class Readiness(ApiModel):
    status: str
    ready: bool


class Liveness(ApiModel):
    status: str
    alive: bool


class HealthApi(BaseEndpoint):
    async def get_basic_health(self) -> BasicHealth:
        result = await self.client.get("/health")
        return BasicHealth.model_validate(result.data)

    async def get_detailed_health(self) -> DetailedHealth:
        """Health of the backend and its database."""
        result = await self.client.get("/health/detailed")
        return DetailedHealth.model_validate(result.data)

    async def get_readiness(self) -> Readiness:
        result = await self.client.get("/health/ready")
        return Readiness.model_validate(result.data)

    async def get_liveness(self) -> Liveness:
        result = await self.client.get("/health/live")
        return Liveness.model_validate(result.data)
