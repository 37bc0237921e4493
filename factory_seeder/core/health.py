"""Health check endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from factory_seeder.core.database import get_db
from factory_seeder.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

HealthStatus = Literal["ok", "degraded", "unhealthy"]


class HealthResponse(BaseModel):
    """Health check response schema.

    ``factories`` and ``custom_seeds`` stay None until startup has loaded
    them. Factory files that failed to import mark the service degraded.
    """

    status: HealthStatus
    app_name: str
    app_env: str
    factories: int | None = None
    custom_seeds: int | None = None
    factory_load_errors: list[str] = []
    database: Literal["connected", "disconnected"] | None = None


def _inventory(request: Request) -> HealthResponse:
    state = request.app.state
    catalog = getattr(state, "catalog", None)
    registry = getattr(state, "seed_registry", None)
    load_errors = sorted(catalog.load_errors) if catalog is not None else []

    return HealthResponse(
        status="degraded" if load_errors else "ok",
        app_name=state.settings.app_name,
        app_env=state.settings.app_env,
        factories=len(catalog) if catalog is not None else None,
        custom_seeds=len(registry) if registry is not None else None,
        factory_load_errors=load_errors,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness plus what was discovered at startup."""
    logger.debug("health.check_started")
    return _inventory(request)


@router.get("/health/ready", response_model=HealthResponse)
def readiness_check(
    request: Request,
    db: Session = Depends(get_db),
) -> HealthResponse:
    """Readiness check including database connectivity.

    Args:
        request: Incoming request, used to reach the app state.
        db: Database session dependency.

    Returns:
        Inventory with database state; unhealthy when the database is down.
    """
    logger.debug("health.readiness_check_started")
    health = _inventory(request)

    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(
            "health.database_disconnected",
            error=str(e),
            error_type=type(e).__name__,
            exc_info=True,
        )
        return health.model_copy(update={"status": "unhealthy", "database": "disconnected"})

    logger.info("health.database_connected", factories=health.factories)
    return health.model_copy(update={"database": "connected"})
