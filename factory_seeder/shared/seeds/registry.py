"""In-memory registry of custom seeds.

A registry is an ordinary object owned by whoever builds it (the web app
keeps one on ``app.state``, the CLI builds its own). Seed files register
into the instance they are handed.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from factory_seeder.core.exceptions import SeedNotFoundError
from factory_seeder.core.logging import get_logger
from factory_seeder.shared.execution_log import ExecutionLog, LogEntry
from factory_seeder.shared.seeds.definition import SeedBody, SeedBuilder, SeedDefinition
from factory_seeder.shared.seeds.validator import ParameterValidationError

logger = get_logger(__name__)

Configure = Callable[[SeedBuilder], Any]


@dataclass
class SeedRunResult:
    """Outcome of running one seed.

    Attributes:
        seed_name: Seed that ran.
        success: False when validation or the body failed.
        message: One-line summary for the dashboard flash.
        result: Whatever the body returned.
        error: Failure message, None on success.
        arguments: Arguments the seed was called with.
        logs: Structured log entries for the run.
        duration_seconds: Wall time of the run.
    """

    seed_name: str
    success: bool
    message: str
    result: Any = None
    error: str | None = None
    arguments: dict[str, Any] = field(default_factory=dict)
    logs: list[LogEntry] = field(default_factory=list)
    duration_seconds: float = 0.0


@dataclass
class SeedBatchResult:
    """Totals of :meth:`SeedRegistry.run_all`."""

    total_seeds: int
    successful: int
    failed: int
    results: list[SeedRunResult]


class SeedRegistry:
    """Maps seed names to :class:`SeedDefinition` objects."""

    def __init__(self) -> None:
        self._seeds: dict[str, SeedDefinition] = {}

    def register(self, seed: SeedDefinition) -> SeedDefinition:
        """Add ``seed``, replacing any seed registered under the same name."""
        if not isinstance(seed, SeedDefinition):
            raise TypeError("seed must be a SeedDefinition instance")
        if seed.name in self._seeds:
            logger.info("seeds.registry.replaced", seed=seed.name)
        self._seeds[seed.name] = seed
        return seed

    def define(
        self,
        name: str,
        body: SeedBody,
        configure: Configure | None = None,
    ) -> SeedDefinition:
        """Build a seed with a :class:`SeedBuilder` and register it.

        Args:
            name: Seed name.
            body: Callable run with the validated arguments.
            configure: Receives the builder to declare description/parameters.
        """
        builder = SeedBuilder(name)
        if configure is not None:
            configure(builder)
        return self.register(builder.build(body))

    def seed(self, name: str, configure: Configure | None = None) -> Callable[[SeedBody], SeedBody]:
        """Decorator form of :meth:`define`; returns the body unchanged."""

        def decorator(body: SeedBody) -> SeedBody:
            self.define(name, body, configure)
            return body

        return decorator

    def find(self, name: str) -> SeedDefinition | None:
        return self._seeds.get(str(name))

    def get(self, name: str) -> SeedDefinition:
        seed = self.find(name)
        if seed is None:
            raise SeedNotFoundError(str(name), available=self.names())
        return seed

    def exists(self, name: str) -> bool:
        return str(name) in self._seeds

    def list(self) -> list[SeedDefinition]:
        return list(self._seeds.values())

    def names(self) -> list[str]:
        return list(self._seeds)

    def search(self, query: str) -> list[SeedDefinition]:
        """Seeds whose name, description or parameter names contain ``query``."""
        needle = query.lower()
        return [
            seed
            for seed in self._seeds.values()
            if needle in seed.name.lower()
            or needle in seed.description.lower()
            or any(needle in param.lower() for param in seed.parameter_names)
        ]

    def info(self, name: str) -> dict[str, Any] | None:
        seed = self.find(name)
        return seed.to_dict() if seed else None

    def validate_seed(self, name: str, **arguments: Any) -> bool:
        """True when ``arguments`` satisfy the seed's schema.

        Raises:
            SeedNotFoundError: If no seed has that name.
        """
        try:
            self.get(name).validate_arguments(arguments)
        except ParameterValidationError:
            return False
        return True

    def run(self, name: str, **arguments: Any) -> SeedRunResult:
        """Validate and run a seed, capturing failures in the result.

        Raises:
            SeedNotFoundError: If no seed has that name. Unlike validation
                and body errors this aborts instead of being captured.
        """
        seed = self.get(name)
        log = ExecutionLog("seeds.run", seed=seed.name)
        log.info(f"Running seed '{seed.name}'", event="started")
        started = time.perf_counter()

        try:
            result = seed.call(**arguments)
        except ParameterValidationError as e:
            log.error(e.message, event="invalid_arguments")
            return SeedRunResult(
                seed_name=seed.name,
                success=False,
                message=f"Seed '{seed.name}' failed: {e.message}",
                error=e.message,
                arguments=dict(arguments),
                logs=log.entries,
                duration_seconds=round(time.perf_counter() - started, 4),
            )
        except Exception as e:
            log.error(f"{type(e).__name__}: {e}", event="failed", error_type=type(e).__name__)
            return SeedRunResult(
                seed_name=seed.name,
                success=False,
                message=f"Seed '{seed.name}' failed: {e}",
                error=str(e),
                arguments=dict(arguments),
                logs=log.entries,
                duration_seconds=round(time.perf_counter() - started, 4),
            )

        duration = round(time.perf_counter() - started, 4)
        log.info(f"Seed '{seed.name}' executed successfully", event="completed", duration_seconds=duration)
        return SeedRunResult(
            seed_name=seed.name,
            success=True,
            message=f"Seed '{seed.name}' executed successfully",
            result=result,
            arguments=dict(arguments),
            logs=log.entries,
            duration_seconds=duration,
        )

    def run_all(self, **arguments: Any) -> SeedBatchResult:
        """Run every registered seed with the same arguments."""
        results = [self.run(name, **arguments) for name in self.names()]
        successful = sum(1 for r in results if r.success)
        logger.info(
            "seeds.run_all.completed",
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
        )
        return SeedBatchResult(
            total_seeds=len(results),
            successful=successful,
            failed=len(results) - successful,
            results=results,
        )

    def clear(self) -> None:
        self._seeds.clear()

    def __len__(self) -> int:
        return len(self._seeds)

    def __contains__(self, name: object) -> bool:
        return name in self._seeds
