"""Service layer for the factory dashboard."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.orm import Session

from factory_seeder.core.config import Settings
from factory_seeder.core.exceptions import BadRequestError
from factory_seeder.core.logging import get_logger
from factory_seeder.features.dashboard import schemas
from factory_seeder.shared.execution_log import ExecutionLogStore, StoredExecution
from factory_seeder.shared.factories import FactoryCatalog, FactoryInfo, FactoryIntrospector, RecordGenerator
from factory_seeder.shared.seeds import SeedRegistry

logger = get_logger(__name__)


def parse_traits(raw: str | list[str] | None) -> list[str]:
    """Split a comma-separated trait string; blanks are ignored."""
    if not raw:
        return []
    if isinstance(raw, str):
        raw = raw.split(",")
    return [t.strip() for t in raw if t and t.strip()]


def parse_attributes(raw: str | None) -> dict[str, Any]:
    """Decode a JSON object of attribute overrides.

    Raises:
        BadRequestError: If ``raw`` is not a JSON object.
    """
    if not raw or not raw.strip():
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BadRequestError(f"attributes must be a JSON object: {e.msg}") from e
    if not isinstance(value, dict):
        raise BadRequestError("attributes must be a JSON object")
    return value


def dashboard_context(
    catalog: FactoryCatalog,
    registry: SeedRegistry,
    settings: Settings,
) -> dict[str, Any]:
    introspector = FactoryIntrospector(catalog)
    factories = introspector.scan()
    return {
        "settings": settings,
        "factories": list(factories.values()),
        "introspection_errors": introspector.errors,
        "load_errors": catalog.load_errors,
        "custom_seed_count": len(registry),
        "generation_allowed": not settings.is_production or settings.allow_production,
    }


def factory_context(
    catalog: FactoryCatalog,
    settings: Settings,
    name: str,
    stored: StoredExecution | None,
) -> dict[str, Any]:
    """Template context of the factory detail page.

    Raises:
        FactoryNotFoundError: If the factory is unknown.
    """
    info: FactoryInfo = FactoryIntrospector(catalog).info(name)
    return {
        "settings": settings,
        "factory": info,
        "default_count": settings.default_count_for_environment(),
        "default_strategy": settings.default_strategy_for_environment(),
        "execution_logs": stored.logs if stored else [],
        "flash_type": stored.flash_type if stored else None,
        "flash_message": stored.flash_message if stored else None,
        "generation_allowed": not settings.is_production or settings.allow_production,
    }


def generate_records(
    name: str,
    params: schemas.GenerateRequest,
    catalog: FactoryCatalog,
    db: Session,
    settings: Settings,
    log_store: ExecutionLogStore,
) -> schemas.GenerateResponse:
    """Run a generation request and park its logs for the detail page.

    Raises:
        FactoryNotFoundError: If the factory is unknown.
        BadRequestError: On an unknown trait.
        AssociationAttributeConflictError: Under the ``raise`` conflict policy.
    """
    generator = RecordGenerator(
        catalog,
        session=db,
        conflict_policy=settings.association_conflict_policy,
    )
    result = generator.generate(
        name,
        count=params.count or settings.default_count_for_environment(),
        traits=params.traits,
        attributes=params.attributes,
        strategy=params.strategy or settings.default_strategy_for_environment(),
    )

    log_id = log_store.store(
        result.logs,
        flash_type="success" if result.success else "error",
        flash_message=result.message,
    )

    logger.info(
        "dashboard.generate.completed",
        factory=name,
        count=result.count,
        requested=result.requested_count,
        errors=len(result.errors),
        log_id=log_id,
    )

    return schemas.GenerateResponse(
        success=result.success,
        message=result.message,
        result=schemas.GenerateResult(**result.to_dict()),
        log_id=log_id,
        redirect_url=f"/factory/{name}?log_id={log_id}",
    )


def preview_records(
    name: str,
    catalog: FactoryCatalog,
    settings: Settings,
    count: int,
    traits: list[str],
    attributes: dict[str, Any],
) -> dict[str, Any]:
    generator = RecordGenerator(catalog, conflict_policy=settings.association_conflict_policy)
    return generator.preview(name, count=count, traits=traits, attributes=attributes)
