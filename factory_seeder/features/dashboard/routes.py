"""Dashboard routes: factory overview, detail, generation and preview.

HTML pages are rendered server side. Generation answers JSON so the page
script can follow ``redirect_url`` to the detail page, which then shows the
execution log parked under ``log_id`` (redirect-after-post).
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from factory_seeder.core.config import Settings
from factory_seeder.core.database import get_db
from factory_seeder.core.logging import get_logger
from factory_seeder.core.templating import render
from factory_seeder.features.dashboard import schemas, service
from factory_seeder.shared.dependencies import (
    get_app_settings,
    get_catalog,
    get_log_store,
    get_seed_registry,
    require_generation_allowed,
)
from factory_seeder.shared.execution_log import ExecutionLogStore
from factory_seeder.shared.factories import FactoryCatalog
from factory_seeder.shared.seeds import SeedRegistry

router = APIRouter(tags=["dashboard"])
logger = get_logger(__name__)


@router.get("/", response_class=HTMLResponse, summary="Dashboard")
def index(
    catalog: FactoryCatalog = Depends(get_catalog),
    registry: SeedRegistry = Depends(get_seed_registry),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    """List every factory with its traits and associations."""
    return render("dashboard.html", **service.dashboard_context(catalog, registry, settings))


@router.get("/factory/{name}", response_class=HTMLResponse, summary="Factory detail")
def show_factory(
    name: str,
    log_id: str | None = Query(default=None, description="Execution log to display"),
    catalog: FactoryCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
    log_store: ExecutionLogStore = Depends(get_log_store),
) -> HTMLResponse:
    """Factory detail page with the generation form.

    A ``log_id`` from a previous generation pulls its logs and flash message
    out of the log store (once).
    """
    context = service.factory_context(catalog, settings, name, log_store.retrieve(log_id))
    return render("factory.html", **context)


@router.post(
    "/factory/{name}/generate",
    response_model=schemas.GenerateResponse,
    status_code=status.HTTP_200_OK,
    summary="Generate records",
    description="Generate records with a factory. Per-record failures are reported, not raised.",
    dependencies=[Depends(require_generation_allowed)],
)
def generate(
    name: str,
    params: schemas.GenerateRequest,
    catalog: FactoryCatalog = Depends(get_catalog),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    log_store: ExecutionLogStore = Depends(get_log_store),
) -> schemas.GenerateResponse:
    """Generate records and return where to read the execution log.

    Raises:
        FactoryNotFoundError: 404 if the factory is unknown.
        BadRequestError: 400 on an unknown trait.
        AssociationAttributeConflictError: 409 under the ``raise`` policy.
    """
    logger.info(
        "dashboard.generate.requested",
        factory=name,
        count=params.count,
        traits=params.traits,
        strategy=params.strategy,
    )
    return service.generate_records(name, params, catalog, db, settings, log_store)


@router.get("/factory/{name}/preview", response_class=HTMLResponse, summary="Preview records")
def preview(
    name: str,
    count: int = Query(default=1, ge=1, le=50),
    traits: str | None = Query(default=None, description="Comma-separated trait names"),
    attributes: str | None = Query(default=None, description="JSON object of overrides"),
    catalog: FactoryCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    """Build records without saving them and show their attributes."""
    preview_data = service.preview_records(
        name,
        catalog,
        settings,
        count=count,
        traits=service.parse_traits(traits),
        attributes=service.parse_attributes(attributes),
    )
    return render("preview.html", settings=settings, factory_name=name, preview=preview_data)
