"""Read-only analysis of factory classes: traits, associations, attributes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import factory
from factory.declarations import BaseDeclaration
from sqlalchemy import inspect as sa_inspect

from factory_seeder.core.logging import get_logger
from factory_seeder.shared.factories.catalog import FactoryCatalog

logger = get_logger(__name__)

AssociationKind = Literal["sub_factory", "related"]


@dataclass(frozen=True)
class AssociationInfo:
    """A declaration that produces other factory objects.

    ``sub_factory`` objects are built with the parent's strategy before the
    parent exists; ``related`` objects are generated after it.
    """

    name: str
    factory: str
    strategy: str
    kind: AssociationKind

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "factory": self.factory, "strategy": self.strategy, "kind": self.kind}


@dataclass(frozen=True)
class AttributeInfo:
    name: str
    type: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "type": self.type}


@dataclass
class FactoryInfo:
    """What the dashboard, API and association filter know about one factory.

    Attributes:
        name: Catalog name.
        class_name: Factory class name.
        model_name: Name of the model class, if any.
        traits: Names of ``factory.Trait`` parameters.
        associations: SubFactory and RelatedFactory declarations.
        attributes: Every other declaration.
        collection_associations: Keys that name to-many relations.
        reflected: Whether the model's relationships could be reflected.
    """

    name: str
    class_name: str
    model_name: str | None = None
    traits: list[str] = field(default_factory=list)
    associations: list[AssociationInfo] = field(default_factory=list)
    attributes: list[AttributeInfo] = field(default_factory=list)
    collection_associations: frozenset[str] = frozenset()
    reflected: bool = False

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "class_name": self.class_name,
            "model": self.model_name,
            "traits": list(self.traits),
            "associations": [a.to_dict() for a in self.associations],
            "attributes": [a.to_dict() for a in self.attributes],
        }


def reflect_collections(model: Any) -> frozenset[str] | None:
    """Names of to-many relationships of a SQLAlchemy mapped class.

    Returns None when ``model`` is not mapped, meaning nothing is known.
    """
    if not isinstance(model, type):
        return None
    mapper = sa_inspect(model, raiseerr=False)
    relationships = getattr(mapper, "relationships", None)
    if relationships is None:
        return None
    return frozenset(rel.key for rel in relationships if rel.uselist)


def declaration_type(value: Any) -> str:
    if isinstance(value, BaseDeclaration):
        return type(value).__name__.lower()
    return "static"


class FactoryIntrospector:
    """Analyzes every factory of a catalog without touching the classes."""

    def __init__(self, catalog: FactoryCatalog) -> None:
        self.catalog = catalog
        self.errors: dict[str, str] = {}

    def list_names(self) -> list[str]:
        return self.catalog.names()

    def scan(self) -> dict[str, FactoryInfo]:
        """Analyze all factories; failures are recorded in ``errors`` and skipped."""
        self.errors = {}
        infos: dict[str, FactoryInfo] = {}
        for name, factory_cls in self.catalog.items():
            try:
                infos[name] = self.analyze(name, factory_cls)
            except Exception as e:
                self.errors[name] = f"{type(e).__name__}: {e}"
                logger.warning(
                    "factory.introspect.failed",
                    factory=name,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        logger.debug("factory.introspect.completed", factories=len(infos), failed=len(self.errors))
        return infos

    def info(self, name: str) -> FactoryInfo:
        """Analyze one factory.

        Raises:
            FactoryNotFoundError: If the catalog has no such factory.
        """
        return self.analyze(name, self.catalog.get(name))

    def analyze(self, name: str, factory_cls: type[factory.Factory]) -> FactoryInfo:
        meta = factory_cls._meta
        traits = [key for key, param in meta.parameters.items() if isinstance(param, factory.Trait)]

        associations: list[AssociationInfo] = []
        attributes: list[AttributeInfo] = []
        for key, value in meta.base_declarations.items():
            association = self._association(key, value)
            if association is not None:
                associations.append(association)
            else:
                attributes.append(AttributeInfo(name=key, type=declaration_type(value)))

        model = meta.model
        reflected = reflect_collections(model)
        related = {a.name for a in associations if a.kind == "related"}

        return FactoryInfo(
            name=name,
            class_name=factory_cls.__name__,
            model_name=getattr(model, "__name__", None),
            traits=traits,
            associations=associations,
            attributes=attributes,
            collection_associations=frozenset(related | (reflected or set())),
            reflected=reflected is not None,
        )

    def _association(self, key: str, value: Any) -> AssociationInfo | None:
        if isinstance(value, (factory.Dict, factory.List)):
            return None
        if isinstance(value, factory.SubFactory):
            kind: AssociationKind = "sub_factory"
            strategy = "inherit"
        elif isinstance(value, factory.RelatedFactory):
            kind = "related"
            strategy = "post_generation"
        else:
            return None
        return AssociationInfo(
            name=key,
            factory=self.catalog.name_of(value.get_factory()),
            strategy=strategy,
            kind=kind,
        )
