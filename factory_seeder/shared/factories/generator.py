"""Builds and persists records through catalog factories.

Each record is produced independently: a failing record is rolled back and
reported as an error string while the rest of the batch carries on.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from factory.alchemy import SQLAlchemyModelFactory
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from factory_seeder.core.config import Strategy
from factory_seeder.core.exceptions import (
    BadRequestError,
    FactorySeederError,
    GenerationFailedError,
)
from factory_seeder.core.logging import get_logger
from factory_seeder.shared.execution_log import ExecutionLog, LogEntry
from factory_seeder.shared.factories.associations import (
    ConflictPolicy,
    filter_association_attributes,
)
from factory_seeder.shared.factories.catalog import FactoryCatalog
from factory_seeder.shared.factories.introspector import FactoryInfo, FactoryIntrospector

logger = get_logger(__name__)

STRATEGIES: tuple[Strategy, ...] = ("create", "build")


@dataclass
class GenerationResult:
    """Outcome of one :meth:`RecordGenerator.generate` call.

    Attributes:
        factory: Factory name.
        requested_count: Records asked for.
        count: Records that were produced.
        strategy: ``create`` or ``build``.
        traits: Traits applied to every record.
        attributes: Attributes after association filtering.
        stripped_attributes: Removed keys mapped to the reason.
        errors: One ``Failed to generate ...`` string per failed record.
        records: Short description of each produced record.
        logs: Execution log entries.
    """

    factory: str
    requested_count: int
    count: int
    strategy: Strategy
    traits: list[str] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)
    stripped_attributes: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    records: list[str] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        if self.errors:
            return f"Error generating seeds: {', '.join(self.errors)}"
        return f"Successfully generated {self.count} {self.factory} records"

    def to_dict(self) -> dict[str, Any]:
        return {
            "factory": self.factory,
            "requested_count": self.requested_count,
            "count": self.count,
            "strategy": self.strategy,
            "traits": list(self.traits),
            "attributes": dict(self.attributes),
            "stripped_attributes": dict(self.stripped_attributes),
            "errors": list(self.errors),
            "records": list(self.records),
        }


@dataclass
class _GeneratedRecord:
    factory: str
    description: str
    strategy: Strategy
    traits: list[str]
    attributes: dict[str, Any]


def record_attributes(record: Any) -> dict[str, Any]:
    """Column values of a mapped object, the dict itself, or public attributes."""
    state = sa_inspect(record, raiseerr=False)
    if state is not None and hasattr(state, "mapper"):
        return {attr.key: getattr(record, attr.key) for attr in state.mapper.column_attrs}
    if isinstance(record, dict):
        return dict(record)
    if hasattr(record, "__dict__"):
        return {k: v for k, v in vars(record).items() if not k.startswith("_")}
    return {"value": record}


def record_associations(record: Any) -> dict[str, Any]:
    """Related ids of a mapped object: one id for to-one, a list for to-many."""
    state = sa_inspect(record, raiseerr=False)
    if state is None or not hasattr(state, "mapper"):
        return {}

    associations: dict[str, Any] = {}
    for rel in state.mapper.relationships:
        try:
            related = getattr(record, rel.key)
            if rel.uselist:
                ids = [getattr(item, "id", None) for item in related]
                if ids:
                    associations[rel.key] = ids
            elif related is not None:
                associations[rel.key] = getattr(related, "id", None)
        except Exception as e:
            associations[rel.key] = f"Error: {e}"
    return associations


def describe_record(record: Any) -> str:
    record_id = getattr(record, "id", None)
    if record_id is not None:
        return f"{type(record).__name__}(id={record_id})"
    return type(record).__name__


def uses_caller_session(factory_cls: type) -> bool:
    """True for SQLAlchemy factories with neither a session nor a session factory."""
    if not issubclass(factory_cls, SQLAlchemyModelFactory):
        return False
    meta = factory_cls._meta
    return meta.sqlalchemy_session is None and meta.sqlalchemy_session_factory is None


class RecordGenerator:
    """Generates records for catalog factories.

    Factory class metadata is never modified. A session-less SQLAlchemy
    factory is built and the record, with its cascaded associations, is
    added to this generator's session. Factories with their own session
    keep using it.

    Args:
        catalog: Factories to generate from.
        session: Session that receives records of session-less SQLAlchemy
            factories, committed after each created record.
        conflict_policy: What to do with attributes naming collections.
    """

    def __init__(
        self,
        catalog: FactoryCatalog,
        session: Session | None = None,
        conflict_policy: ConflictPolicy = "strip",
    ) -> None:
        self.catalog = catalog
        self.session = session
        self.conflict_policy = conflict_policy
        self.introspector = FactoryIntrospector(catalog)
        self._generated: list[_GeneratedRecord] = []

    def _info(self, factory_name: str) -> FactoryInfo:
        try:
            return self.introspector.info(factory_name)
        except FactorySeederError:
            raise
        except Exception as e:
            raise GenerationFailedError(
                f"Could not analyze factory '{factory_name}': {e}",
                details={"factory": factory_name},
            ) from e

    @staticmethod
    def _check_request(info: FactoryInfo, count: int, traits: Sequence[str]) -> None:
        if count < 0:
            raise BadRequestError(f"count must be zero or greater, got {count}")
        unknown = [t for t in traits if not info.has_trait(t)]
        if unknown:
            available = ", ".join(info.traits) or "none"
            raise BadRequestError(
                f"Unknown traits for factory '{info.name}': {', '.join(unknown)}. "
                f"Available traits: {available}",
                details={"factory": info.name, "unknown_traits": unknown},
            )

    def generate(
        self,
        factory_name: str,
        count: int = 1,
        traits: Sequence[str] = (),
        attributes: dict[str, Any] | None = None,
        strategy: Strategy = "create",
    ) -> GenerationResult:
        """Generate ``count`` records.

        Raises:
            FactoryNotFoundError: If the factory is unknown.
            BadRequestError: On an unknown trait or strategy.
            AssociationAttributeConflictError: If attributes name collections
                and the conflict policy is ``raise``.
        """
        if strategy not in STRATEGIES:
            raise BadRequestError(f"strategy must be one of {', '.join(STRATEGIES)}, got '{strategy}'")
        traits = list(traits)
        info = self._info(factory_name)
        self._check_request(info, count, traits)
        factory_cls = self.catalog.get(factory_name)

        log = ExecutionLog("factory.generate", factory=factory_name, strategy=strategy)
        filtered = filter_association_attributes(attributes or {}, info, self.conflict_policy, log=log)
        kwargs = {**{trait: True for trait in traits}, **filtered.kept}

        result = GenerationResult(
            factory=factory_name,
            requested_count=count,
            count=0,
            strategy=strategy,
            traits=traits,
            attributes=filtered.kept,
            stripped_attributes=filtered.stripped,
        )
        log.info(f"Generating {count} {factory_name} record(s) with strategy '{strategy}'", event="started")

        for index in range(1, count + 1):
            try:
                record = self._produce(factory_cls, strategy, kwargs)
            except Exception as e:
                self._rollback(factory_cls)
                message = f"Failed to generate {factory_name} #{index}: {e}"
                result.errors.append(message)
                log.error(message, event="record_failed", index=index, error_type=type(e).__name__)
                continue

            description = describe_record(record)
            result.count += 1
            result.records.append(description)
            self._generated.append(
                _GeneratedRecord(
                    factory=factory_name,
                    description=description,
                    strategy=strategy,
                    traits=traits,
                    attributes=filtered.kept,
                )
            )
            log.debug(f"Generated {factory_name} #{index}", event="record_generated", index=index)

        log.info(
            f"Generated {result.count}/{count} {factory_name} record(s)",
            event="completed",
            count=result.count,
            errors=len(result.errors),
        )
        result.logs = log.entries
        return result

    def _session_for(self, factory_cls: type) -> Session | None:
        """The factory's own session when it has one, else the generator's."""
        if issubclass(factory_cls, SQLAlchemyModelFactory):
            own = factory_cls._meta.sqlalchemy_session
            if own is not None:
                return own
        return self.session

    def _produce(self, factory_cls: type, strategy: Strategy, kwargs: dict[str, Any]) -> Any:
        if strategy == "create" and uses_caller_session(factory_cls):
            if self.session is None:
                raise RuntimeError("No session provided.")
            # Building cascades to SubFactory and RelatedFactory records
            record = factory_cls.build(**kwargs)
            self.session.add(record)
            self.session.commit()
            return record

        if strategy == "create":
            record = factory_cls.create(**kwargs)
            session = self._session_for(factory_cls)
            if session is not None:
                session.commit()
            return record

        record = factory_cls.build(**kwargs)
        save = getattr(record, "save", None)
        if callable(save):
            save()
        return record

    def _rollback(self, factory_cls: type) -> None:
        session = self._session_for(factory_cls)
        if session is not None:
            session.rollback()

    def preview(
        self,
        factory_name: str,
        count: int = 1,
        traits: Sequence[str] = (),
        attributes: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build records without saving and describe them.

        Raises:
            FactoryNotFoundError: If the factory is unknown.
            BadRequestError: On an unknown trait.
        """
        traits = list(traits)
        info = self._info(factory_name)
        self._check_request(info, count, traits)
        factory_cls = self.catalog.get(factory_name)
        filtered = filter_association_attributes(attributes or {}, info, self.conflict_policy)
        kwargs = {**{trait: True for trait in traits}, **filtered.kept}

        preview: list[dict[str, Any]] = []
        for index in range(1, count + 1):
            try:
                record = factory_cls.build(**kwargs)
            except Exception as e:
                preview.append({"index": index, "error": str(e)})
                continue
            preview.append(
                {
                    "index": index,
                    "attributes": record_attributes(record),
                    "associations": record_associations(record),
                }
            )

        logger.debug("factory.preview.completed", factory=factory_name, count=count)
        return {
            "factory": factory_name,
            "count": count,
            "traits": traits,
            "attributes": filtered.kept,
            "preview": preview,
        }

    def summary(self) -> str:
        """Text summary of every record this generator produced, by factory."""
        if not self._generated:
            return "No records generated"

        by_factory: dict[str, list[_GeneratedRecord]] = {}
        for record in self._generated:
            by_factory.setdefault(record.factory, []).append(record)

        lines = ["Generation Summary:", "=" * 50]
        for factory_name, records in by_factory.items():
            lines.append("")
            lines.append(f"{factory_name}: {len(records)} records")
            for index, record in enumerate(records, start=1):
                line = f"   {index}. {record.description}, Strategy: {record.strategy}"
                if record.traits:
                    line += f", Traits: {', '.join(record.traits)}"
                if record.attributes:
                    line += f", Attributes: {record.attributes}"
                lines.append(line)
        return "\n".join(lines)
