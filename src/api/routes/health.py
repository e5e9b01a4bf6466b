"""Health check endpoints."""
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text

from src.api.deps import SettingsDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness check response with component status."""

    ready: bool
    checks: dict[str, bool]
    timestamp: datetime


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Basic health check - always returns OK if the service is running."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment.value,
        timestamp=datetime.utcnow(),
    )


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request, settings: SettingsDep) -> ReadinessResponse:
    """Kubernetes readiness probe - checks all dependencies."""
    checks: dict[str, bool] = {}

    # Check app state
    checks["app"] = getattr(request.app.state, "ready", False)

    # Check database connectivity
    store = getattr(request.app.state, "metadata_store", None)
    try:
        async with store.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        checks["database"] = False

    # Check staging path exists
    checks["staging"] = settings.staging_path.exists()

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
        timestamp=datetime.utcnow(),
    )
