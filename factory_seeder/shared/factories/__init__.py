"""Factory discovery, introspection and record generation."""

from factory_seeder.shared.factories.associations import (
    FilterOutcome,
    filter_association_attributes,
)
from factory_seeder.shared.factories.catalog import FactoryCatalog, factory_name_for
from factory_seeder.shared.factories.generator import GenerationResult, RecordGenerator
from factory_seeder.shared.factories.introspector import (
    AssociationInfo,
    AttributeInfo,
    FactoryInfo,
    FactoryIntrospector,
)

__all__ = [
    "AssociationInfo",
    "AttributeInfo",
    "FactoryCatalog",
    "FactoryInfo",
    "FactoryIntrospector",
    "FilterOutcome",
    "GenerationResult",
    "RecordGenerator",
    "factory_name_for",
    "filter_association_attributes",
]
