"""Declarative parameter schemas for custom seeds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParameterType(str, Enum):
    """Types a seed parameter can declare."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    SYMBOL = "symbol"
    ARRAY = "array"

    @property
    def is_numeric(self) -> bool:
        return self is ParameterType.INTEGER

    @property
    def is_discrete(self) -> bool:
        """Types whose values can be restricted to an allowed set."""
        return self in (ParameterType.STRING, ParameterType.SYMBOL)


class InvalidParameterDefinition(ValueError):
    """A parameter declares constraints that make no sense for its type."""


@dataclass(frozen=True)
class ParameterSpec:
    """Description of one seed argument.

    Attributes:
        name: Argument name, passed to the seed body as a keyword.
        type: Expected value type.
        required: Whether the caller must supply it.
        default: Value used when an optional argument is omitted.
        allowed_values: Closed set of accepted values (string/symbol only).
        min: Inclusive lower bound (integer only).
        max: Inclusive upper bound (integer only).
        description: Help text shown in the dashboard.
    """

    name: str
    type: ParameterType = ParameterType.STRING
    required: bool = False
    default: Any = None
    allowed_values: tuple[Any, ...] | None = None
    min: int | None = None
    max: int | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        # Accept plain strings ("integer") and lists for convenience
        object.__setattr__(self, "type", ParameterType(self.type))
        if self.allowed_values is not None:
            object.__setattr__(self, "allowed_values", tuple(self.allowed_values))
        self._check_options()

    def _check_options(self) -> None:
        has_bounds = self.min is not None or self.max is not None
        if has_bounds and not self.type.is_numeric:
            raise InvalidParameterDefinition(
                f"Parameter '{self.name}': min and max are not valid for {self.type.value} type"
            )
        if self.allowed_values is not None and not self.type.is_discrete:
            raise InvalidParameterDefinition(
                f"Parameter '{self.name}': allowed_values is not valid for {self.type.value} type"
            )
        if self.allowed_values is not None and not self.allowed_values:
            raise InvalidParameterDefinition(f"Parameter '{self.name}': allowed_values is empty")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise InvalidParameterDefinition(
                f"Parameter '{self.name}': min ({self.min}) is greater than max ({self.max})"
            )
        if self.default is not None:
            # validator imports this module
            from factory_seeder.shared.seeds.validator import check_argument

            issue = check_argument(self, self.default)
            if issue is not None:
                raise InvalidParameterDefinition(
                    f"Parameter '{self.name}': default {self.default!r} is invalid. {issue.message}"
                )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
            "default": self.default,
            "allowed_values": list(self.allowed_values) if self.allowed_values is not None else None,
            "min": self.min,
            "max": self.max,
            "description": self.description,
        }


class ParameterSchema:
    """Ordered mapping of parameter name to :class:`ParameterSpec`."""

    def __init__(self, specs: list[ParameterSpec] | None = None) -> None:
        self._specs: dict[str, ParameterSpec] = {}
        for spec in specs or []:
            self._specs[spec.name] = spec

    @classmethod
    def from_dict(cls, data: dict[str, dict[str, Any]]) -> ParameterSchema:
        """Build a schema from ``{name: {type: ..., required: ...}}``."""
        return cls([ParameterSpec(name=name, **options) for name, options in data.items()])

    def get(self, name: str) -> ParameterSpec | None:
        return self._specs.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._specs)

    @property
    def required_names(self) -> list[str]:
        return [name for name, spec in self._specs.items() if spec.required]

    def defaults(self) -> dict[str, Any]:
        """Defaults of optional parameters that declare one."""
        return {
            name: spec.default
            for name, spec in self._specs.items()
            if not spec.required and spec.default is not None
        }

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: spec.to_dict() for name, spec in self._specs.items()}

    def __iter__(self):
        return iter(self._specs.values())

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __bool__(self) -> bool:
        return bool(self._specs)
