"""Custom seeds: parameter schemas, validation and the seed registry."""

from factory_seeder.shared.seeds.coercion import coerce_arguments, coerce_value
from factory_seeder.shared.seeds.definition import SeedBuilder, SeedDefinition
from factory_seeder.shared.seeds.loader import CustomSeedLoader
from factory_seeder.shared.seeds.registry import SeedBatchResult, SeedRegistry, SeedRunResult
from factory_seeder.shared.seeds.schema import (
    InvalidParameterDefinition,
    ParameterSchema,
    ParameterSpec,
    ParameterType,
)
from factory_seeder.shared.seeds.validator import (
    MissingParameter,
    NotAllowedValue,
    OutOfRange,
    ParameterIssue,
    ParameterValidationError,
    TypeMismatch,
    check,
    validate,
)

__all__ = [
    "CustomSeedLoader",
    "InvalidParameterDefinition",
    "MissingParameter",
    "NotAllowedValue",
    "OutOfRange",
    "ParameterIssue",
    "ParameterSchema",
    "ParameterSpec",
    "ParameterType",
    "ParameterValidationError",
    "SeedBatchResult",
    "SeedBuilder",
    "SeedDefinition",
    "SeedRegistry",
    "SeedRunResult",
    "TypeMismatch",
    "check",
    "coerce_arguments",
    "coerce_value",
    "validate",
]
