"""FastAPI dependencies that hand out the objects ``create_app`` stored on ``app.state``."""

from fastapi import Depends, Request

from factory_seeder.core.config import Settings
from factory_seeder.core.exceptions import ForbiddenError
from factory_seeder.shared.execution_log import ExecutionLogStore
from factory_seeder.shared.factories import FactoryCatalog
from factory_seeder.shared.seeds import SeedRegistry


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_catalog(request: Request) -> FactoryCatalog:
    catalog: FactoryCatalog = request.app.state.catalog
    return catalog


def get_seed_registry(request: Request) -> SeedRegistry:
    registry: SeedRegistry = request.app.state.seed_registry
    return registry


def get_log_store(request: Request) -> ExecutionLogStore:
    store: ExecutionLogStore = request.app.state.log_store
    return store


def require_generation_allowed(settings: Settings = Depends(get_app_settings)) -> None:
    """Refuse data generation in production unless explicitly allowed.

    Raises:
        ForbiddenError: If running in production without ``allow_production``.
    """
    if settings.is_production and not settings.allow_production:
        raise ForbiddenError(
            "Seed generation is not allowed in the production environment. "
            "Set ALLOW_PRODUCTION=true to enable (not recommended).",
            details={"app_env": settings.app_env},
        )
