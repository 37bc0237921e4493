"""Service layer for the JSON API."""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder

from factory_seeder.core.config import Settings
from factory_seeder.core.logging import get_logger
from factory_seeder.features.api import schemas
from factory_seeder.shared.factories import FactoryCatalog, FactoryIntrospector, RecordGenerator
from factory_seeder.shared.seeds import SeedRegistry

logger = get_logger(__name__)

# Columns the database assigns; a preview of unsaved records has nothing useful in them
PREVIEW_HIDDEN_ATTRIBUTES = frozenset({"id", "created_at", "updated_at"})


def list_factories(catalog: FactoryCatalog) -> dict[str, schemas.FactorySchema]:
    infos = FactoryIntrospector(catalog).scan()
    return {name: schemas.FactorySchema(**info.to_dict()) for name, info in infos.items()}


def _strip_hidden(record: dict[str, Any]) -> dict[str, Any]:
    attributes = record.get("attributes")
    if attributes is None:
        return record
    visible = {k: v for k, v in attributes.items() if k not in PREVIEW_HIDDEN_ATTRIBUTES}
    return {**record, "attributes": visible}


def preview_factory(
    name: str,
    catalog: FactoryCatalog,
    settings: Settings,
    count: int,
    traits: list[str],
    attributes: dict[str, Any],
) -> schemas.PreviewResponse:
    generator = RecordGenerator(catalog, conflict_policy=settings.association_conflict_policy)
    data = generator.preview(name, count=count, traits=traits, attributes=attributes)
    data["preview"] = [_strip_hidden(record) for record in data["preview"]]
    logger.debug("api.preview.completed", factory=name, count=count)
    return schemas.PreviewResponse(preview=schemas.PreviewData(**jsonable_encoder(data)))


def list_custom_seeds(registry: SeedRegistry) -> list[dict[str, Any]]:
    return [seed.to_dict() for seed in registry.list()]
