"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from factory_seeder.core.config import Settings, get_settings
from factory_seeder.core.database import get_session_maker
from factory_seeder.core.exceptions import register_exception_handlers
from factory_seeder.core.health import router as health_router
from factory_seeder.core.logging import configure_logging, get_logger
from factory_seeder.core.middleware import RequestIdMiddleware
from factory_seeder.features.api.routes import router as api_router
from factory_seeder.features.custom_seeds.routes import router as custom_seeds_router
from factory_seeder.features.dashboard.routes import router as dashboard_router
from factory_seeder.shared.execution_log import ExecutionLogStore
from factory_seeder.shared.factories import FactoryCatalog
from factory_seeder.shared.seeds import CustomSeedLoader, SeedRegistry

logger = get_logger(__name__)


def load_catalog(settings: Settings) -> FactoryCatalog:
    """Discover factories from the configured paths and modules."""
    catalog = FactoryCatalog()
    catalog.load_modules(settings.factory_modules)
    catalog.load_paths(settings.factory_paths)
    return catalog


def load_seed_registry(settings: Settings) -> SeedRegistry:
    """Load custom seed files into a fresh registry."""
    registry = SeedRegistry()
    CustomSeedLoader(registry, settings.custom_seeds_dir).load_all()
    return registry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown.

    Factories and seeds already placed on ``app.state`` (tests do this)
    are kept; anything missing is loaded from the configured locations.

    Args:
        app: FastAPI application instance.

    Yields:
        None after startup, cleans up on shutdown.
    """
    settings: Settings = app.state.settings

    # Startup
    configure_logging(settings)
    logger.info(
        "app.startup_started",
        app_name=settings.app_name,
        app_env=settings.app_env,
        debug=settings.debug,
    )

    if getattr(app.state, "catalog", None) is None:
        app.state.catalog = load_catalog(settings)
    if getattr(app.state, "seed_registry", None) is None:
        app.state.seed_registry = load_seed_registry(settings)

    logger.info(
        "app.startup_completed",
        factories=len(app.state.catalog),
        custom_seeds=len(app.state.seed_registry),
    )

    yield

    # Shutdown
    app.state.log_store.clear()
    logger.info("app.shutdown_completed")


def create_app(
    settings: Settings | None = None,
    catalog: FactoryCatalog | None = None,
    seed_registry: SeedRegistry | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        settings: Settings to use (cached settings if omitted).
        catalog: Pre-built factory catalog; discovered at startup if omitted.
        seed_registry: Pre-built seed registry; loaded at startup if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Generate, preview and validate seed data from factory_boy factories",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.state.settings = settings
    app.state.catalog = catalog
    app.state.seed_registry = seed_registry
    app.state.log_store = ExecutionLogStore(ttl_seconds=settings.execution_log_ttl_seconds)
    app.state.session_maker = get_session_maker(settings.database_url)

    # Middleware
    app.add_middleware(RequestIdMiddleware)

    # Exception handlers
    register_exception_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(dashboard_router)
    app.include_router(custom_seeds_router)
    app.include_router(api_router)

    return app


app = create_app()
