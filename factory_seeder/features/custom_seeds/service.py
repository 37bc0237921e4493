"""Service layer for custom seeds."""

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder

from factory_seeder.core.logging import get_logger
from factory_seeder.features.custom_seeds import schemas
from factory_seeder.shared.execution_log import ExecutionLogStore, StoredExecution
from factory_seeder.shared.seeds import SeedRegistry, coerce_arguments

logger = get_logger(__name__)


def to_json_safe(value: Any) -> Any:
    """JSON-encode a seed result, falling back to its repr."""
    try:
        return jsonable_encoder(value)
    except (TypeError, ValueError, RecursionError):
        return repr(value)


def seed_context(
    registry: SeedRegistry,
    name: str,
    stored: StoredExecution | None,
) -> dict[str, Any]:
    """Template context of the seed detail page.

    Raises:
        SeedNotFoundError: If the seed is unknown.
    """
    return {
        "seed": registry.get(name),
        "execution_logs": stored.logs if stored else [],
        "flash_type": stored.flash_type if stored else None,
        "flash_message": stored.flash_message if stored else None,
    }


def run_seed(
    name: str,
    params: schemas.RunSeedRequest,
    registry: SeedRegistry,
    log_store: ExecutionLogStore,
) -> schemas.RunSeedResponse:
    """Coerce the raw arguments, run the seed and park its logs.

    Raises:
        SeedNotFoundError: If the seed is unknown.
    """
    seed = registry.get(name)
    arguments = coerce_arguments(seed.parameters, params.arguments)
    outcome = registry.run(name, **arguments)

    log_id = log_store.store(
        outcome.logs,
        flash_type="success" if outcome.success else "error",
        flash_message=outcome.message,
    )
    logger.info(
        "custom_seeds.run.completed",
        seed=name,
        success=outcome.success,
        duration_seconds=outcome.duration_seconds,
        log_id=log_id,
    )

    return schemas.RunSeedResponse(
        success=outcome.success,
        message=outcome.message,
        result=to_json_safe(outcome.result) if outcome.success else None,
        error=outcome.error,
        log_id=log_id,
        redirect_url=f"/custom_seeds/{name}?log_id={log_id}",
    )
