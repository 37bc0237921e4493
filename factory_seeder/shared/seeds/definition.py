"""Seed definitions and the fluent builder used to declare them."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from factory_seeder.shared.seeds.schema import ParameterSchema, ParameterSpec, ParameterType
from factory_seeder.shared.seeds.validator import validate

SeedBody = Callable[..., Any]


@dataclass(frozen=True)
class SeedDefinition:
    """A named, parameterized seed procedure.

    Attributes:
        name: Unique registry key.
        body: Callable invoked with the validated arguments as keywords.
        description: Human-readable summary.
        parameters: Schema the arguments are validated against.
        metadata: Free-form tags (author, category, ...).
        created_at: When the definition was built.
    """

    name: str
    body: SeedBody
    description: str = ""
    parameters: ParameterSchema = field(default_factory=ParameterSchema)
    metadata: Mapping[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.description:
            object.__setattr__(self, "description", f"Seed for {self.name}")

    @property
    def parameter_names(self) -> list[str]:
        return self.parameters.names

    @property
    def has_parameters(self) -> bool:
        return bool(self.parameters)

    def parameter_info(self, name: str) -> ParameterSpec | None:
        return self.parameters.get(name)

    def validate_arguments(self, arguments: Mapping[str, Any]) -> None:
        validate(self.parameters, arguments, seed=self.name)

    def call(self, **arguments: Any) -> Any:
        """Validate ``arguments``, fill defaults, and run the body."""
        self.validate_arguments(arguments)
        resolved = self.parameters.defaults()
        resolved.update({k: v for k, v in arguments.items() if v is not None or k not in resolved})
        return self.body(**resolved)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.to_dict(),
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
            "has_parameters": self.has_parameters,
        }


class SeedBuilder:
    """Fluent builder for :class:`SeedDefinition`.

    Example::

        seed = (
            SeedBuilder("hello_world")
            .description("Say hello")
            .string_param("name", required=True)
            .integer_param("count", default=1, min=1, max=5)
            .build(lambda name, count: ...)
        )

    Parameter options are checked as they are declared, so a bad schema
    fails at definition time rather than when the seed is run.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._description: str | None = None
        self._parameters: list[ParameterSpec] = []
        self._metadata: dict[str, Any] = {}

    def description(self, text: str) -> SeedBuilder:
        self._description = text
        return self

    def parameter(
        self,
        name: str,
        type: ParameterType | str = ParameterType.STRING,  # noqa: A002
        required: bool = False,
        default: Any = None,
        allowed_values: list[Any] | tuple[Any, ...] | None = None,
        min: int | None = None,  # noqa: A002
        max: int | None = None,  # noqa: A002
        description: str | None = None,
    ) -> SeedBuilder:
        spec = ParameterSpec(
            name=name,
            type=ParameterType(type),
            required=required,
            default=default,
            allowed_values=tuple(allowed_values) if allowed_values is not None else None,
            min=min,
            max=max,
            description=description,
        )
        # Re-declaring a name replaces the earlier spec
        self._parameters = [p for p in self._parameters if p.name != name]
        self._parameters.append(spec)
        return self

    def string_param(self, name: str, **options: Any) -> SeedBuilder:
        return self.parameter(name, type=ParameterType.STRING, **options)

    def integer_param(self, name: str, **options: Any) -> SeedBuilder:
        return self.parameter(name, type=ParameterType.INTEGER, **options)

    def boolean_param(self, name: str, **options: Any) -> SeedBuilder:
        return self.parameter(name, type=ParameterType.BOOLEAN, **options)

    def symbol_param(self, name: str, **options: Any) -> SeedBuilder:
        return self.parameter(name, type=ParameterType.SYMBOL, **options)

    def array_param(self, name: str, **options: Any) -> SeedBuilder:
        return self.parameter(name, type=ParameterType.ARRAY, **options)

    def metadata(self, key: str, value: Any) -> SeedBuilder:
        self._metadata[key] = value
        return self

    def build(self, body: SeedBody) -> SeedDefinition:
        return SeedDefinition(
            name=self._name,
            body=body,
            description=self._description or "",
            parameters=ParameterSchema(self._parameters),
            metadata=dict(self._metadata),
        )
