"""Shared pytest fixtures for FactorySeeder tests."""

import pytest
import structlog
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from factory_seeder.core.config import Settings, get_settings
from factory_seeder.core.database import get_engine
from factory_seeder.main import create_app
from factory_seeder.shared.execution_log import ExecutionLogStore
from factory_seeder.shared.factories import FactoryCatalog
from factory_seeder.shared.seeds import SeedRegistry
from tests.sample_app import seeds as sample_seeds
from tests.sample_app.models import Base

TEST_DATABASE_URL = "sqlite://"
SAMPLE_FACTORIES_MODULE = "tests.sample_app.factories"


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def uncached_loggers():
    """Keep loggers from holding on to a capture stream closed after the test."""
    structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for an isolated test run (in-memory database, no seed files)."""
    return Settings(
        app_env="testing",
        database_url=TEST_DATABASE_URL,
        factory_paths=[],
        custom_seeds_dir=str(tmp_path / "factory_seeds"),
    )


@pytest.fixture
def engine():
    """Shared in-memory SQLite engine with the sample schema created."""
    engine = get_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine):
    """Session on the in-memory database; uncommitted work is rolled back."""
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def catalog() -> FactoryCatalog:
    """Catalog holding the sample application's factories."""
    catalog = FactoryCatalog()
    catalog.load_modules([SAMPLE_FACTORIES_MODULE])
    return catalog


@pytest.fixture
def seed_registry() -> SeedRegistry:
    """Registry holding the sample application's custom seeds."""
    registry = SeedRegistry()
    sample_seeds.register(registry)
    return registry


@pytest.fixture
def app(test_settings, catalog, seed_registry, engine):
    """App wired to the sample factories, seeds and in-memory database."""
    return create_app(test_settings, catalog=catalog, seed_registry=seed_registry)


@pytest.fixture
def log_store(app) -> ExecutionLogStore:
    store: ExecutionLogStore = app.state.log_store
    return store


@pytest.fixture
async def client(app):
    """Create async HTTP client for testing FastAPI endpoints."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def sync_client(app):
    """Create sync test client."""
    return TestClient(app)


@pytest.fixture
async def production_client(test_settings, catalog, seed_registry, engine):
    """Client for an app running in production without allow_production."""
    settings = test_settings.model_copy(update={"app_env": "production"})
    app = create_app(settings, catalog=catalog, seed_registry=seed_registry)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
