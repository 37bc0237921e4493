"""JSON API for tooling: factory listing, previews and custom seeds."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from factory_seeder.core.config import Settings
from factory_seeder.core.exceptions import FactorySeederError
from factory_seeder.core.logging import get_logger
from factory_seeder.features.api import schemas, service
from factory_seeder.features.custom_seeds.schemas import SeedSummary
from factory_seeder.features.dashboard.service import parse_attributes, parse_traits
from factory_seeder.shared.dependencies import get_app_settings, get_catalog, get_seed_registry
from factory_seeder.shared.factories import FactoryCatalog
from factory_seeder.shared.seeds import SeedRegistry

router = APIRouter(prefix="/api", tags=["api"])
logger = get_logger(__name__)


@router.get(
    "/factories",
    response_model=dict[str, schemas.FactorySchema],
    summary="List factories",
    description="Every discovered factory with its traits, associations and attributes.",
)
def list_factories(
    catalog: FactoryCatalog = Depends(get_catalog),
) -> dict[str, schemas.FactorySchema]:
    return service.list_factories(catalog)


@router.get(
    "/factory/{name}/preview",
    response_model=schemas.PreviewResponse,
    responses={status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": schemas.ApiErrorResponse}},
    summary="Preview a factory",
    description="Build records without saving. Database-assigned columns are omitted.",
)
def preview_factory(
    name: str,
    count: int = Query(default=1, ge=1, le=50),
    traits: str | None = Query(default=None, description="Comma-separated trait names"),
    attributes: str | None = Query(default=None, description="JSON object of overrides"),
    catalog: FactoryCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
) -> schemas.PreviewResponse | JSONResponse:
    """Preview records, answering ``{success: false, error}`` on any failure."""
    try:
        return service.preview_factory(
            name,
            catalog,
            settings,
            count=count,
            traits=parse_traits(traits),
            attributes=parse_attributes(attributes),
        )
    except FactorySeederError as e:
        logger.warning("api.preview.failed", factory=name, error=e.message, error_code=e.code)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=schemas.ApiErrorResponse(error=e.message).model_dump(),
        )


@router.get(
    "/custom_seeds",
    response_model=list[SeedSummary],
    summary="List custom seeds",
)
def list_custom_seeds(
    registry: SeedRegistry = Depends(get_seed_registry),
) -> list[dict]:
    return service.list_custom_seeds(registry)
