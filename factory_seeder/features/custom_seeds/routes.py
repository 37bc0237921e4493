"""Custom seed pages and the run endpoint."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from factory_seeder.core.config import Settings
from factory_seeder.core.logging import get_logger
from factory_seeder.core.templating import render
from factory_seeder.features.custom_seeds import schemas, service
from factory_seeder.shared.dependencies import (
    get_app_settings,
    get_log_store,
    get_seed_registry,
    require_generation_allowed,
)
from factory_seeder.shared.execution_log import ExecutionLogStore
from factory_seeder.shared.seeds import SeedRegistry

router = APIRouter(prefix="/custom_seeds", tags=["custom_seeds"])
logger = get_logger(__name__)


@router.get("", response_class=HTMLResponse, summary="List custom seeds")
def list_seeds(
    q: str | None = Query(default=None, description="Search name, description and parameters"),
    registry: SeedRegistry = Depends(get_seed_registry),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    seeds = registry.search(q) if q else registry.list()
    return render("custom_seeds.html", settings=settings, seeds=seeds, query=q or "")


@router.get("/{name}", response_class=HTMLResponse, summary="Custom seed detail")
def show_seed(
    name: str,
    log_id: str | None = Query(default=None, description="Execution log to display"),
    registry: SeedRegistry = Depends(get_seed_registry),
    settings: Settings = Depends(get_app_settings),
    log_store: ExecutionLogStore = Depends(get_log_store),
) -> HTMLResponse:
    """Seed detail page with a form for its parameters."""
    context = service.seed_context(registry, name, log_store.retrieve(log_id))
    return render("custom_seed.html", settings=settings, **context)


@router.post(
    "/{name}/generate",
    response_model=schemas.RunSeedResponse,
    summary="Run a custom seed",
    description="Coerce, validate and run a seed. Validation and seed failures are "
    "reported with success=false.",
    dependencies=[Depends(require_generation_allowed)],
)
def run_seed(
    name: str,
    params: schemas.RunSeedRequest,
    registry: SeedRegistry = Depends(get_seed_registry),
    log_store: ExecutionLogStore = Depends(get_log_store),
) -> schemas.RunSeedResponse:
    """Run a seed with the submitted arguments.

    Raises:
        SeedNotFoundError: 404 if the seed is unknown.
    """
    logger.info("custom_seeds.run.requested", seed=name, arguments=sorted(params.arguments))
    return service.run_seed(name, params, registry, log_store)
