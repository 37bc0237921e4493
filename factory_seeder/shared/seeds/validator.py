"""Argument validation against a :class:`ParameterSchema`.

Missing required parameters are reported together. Every supplied argument
is then checked for type, allowed values and bounds, in that order, and only
its first failing check is reported. Arguments the schema does not know are
passed through untouched.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

from factory_seeder.core.exceptions import ValidationError
from factory_seeder.shared.seeds.schema import ParameterSchema, ParameterSpec, ParameterType


@dataclass(frozen=True)
class ParameterIssue:
    """Base class for a single validation finding."""

    code: ClassVar[str] = "PARAMETER_ISSUE"

    @property
    def message(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class MissingParameter(ParameterIssue):
    names: tuple[str, ...]

    code: ClassVar[str] = "MISSING_PARAMETER"

    @property
    def message(self) -> str:
        return f"Missing required parameters: {', '.join(self.names)}"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "parameters": list(self.names)}


@dataclass(frozen=True)
class TypeMismatch(ParameterIssue):
    name: str
    expected: ParameterType
    value: Any

    code: ClassVar[str] = "TYPE_MISMATCH"

    @property
    def message(self) -> str:
        article = "an" if self.expected.value[0] in "aeiou" else "a"
        return f"Parameter '{self.name}' must be {article} {self.expected.value}"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "parameter": self.name, "expected": self.expected.value}


@dataclass(frozen=True)
class NotAllowedValue(ParameterIssue):
    name: str
    value: Any
    allowed: tuple[Any, ...]

    code: ClassVar[str] = "NOT_ALLOWED_VALUE"

    @property
    def message(self) -> str:
        choices = ", ".join(str(_token(v)) for v in self.allowed)
        return f"Parameter '{self.name}' must be one of: {choices}"

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "parameter": self.name,
            "allowed_values": [_token(v) for v in self.allowed],
        }


@dataclass(frozen=True)
class OutOfRange(ParameterIssue):
    name: str
    value: Any
    minimum: int | None
    maximum: int | None

    code: ClassVar[str] = "OUT_OF_RANGE"

    @property
    def message(self) -> str:
        if self.minimum is not None and self.value < self.minimum:
            return f"Parameter '{self.name}' must be >= {self.minimum}"
        return f"Parameter '{self.name}' must be <= {self.maximum}"

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "parameter": self.name,
            "min": self.minimum,
            "max": self.maximum,
        }


class ParameterValidationError(ValidationError):
    """Arguments do not satisfy a seed's parameter schema.

    Attributes:
        issues: Every finding, in report order.
    """

    def __init__(self, issues: list[ParameterIssue], seed: str | None = None) -> None:
        message = "; ".join(issue.message for issue in issues)
        super().__init__(
            message=message,
            code="PARAMETER_VALIDATION_ERROR",
            details={"seed": seed} if seed else None,
        )
        self.issues = issues

    def problem_errors(self) -> list[dict[str, Any]]:
        return [issue.to_dict() for issue in self.issues]


def _token(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def matches_type(value: Any, expected: ParameterType) -> bool:
    """Check ``value`` against a declared parameter type."""
    if expected is ParameterType.STRING:
        return isinstance(value, str)
    if expected is ParameterType.INTEGER:
        # bool is an int subclass, but True is not a count
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is ParameterType.BOOLEAN:
        return isinstance(value, bool)
    if expected is ParameterType.SYMBOL:
        return isinstance(value, Enum) or (isinstance(value, str) and value.isidentifier())
    if expected is ParameterType.ARRAY:
        return isinstance(value, (list, tuple))
    return False


def _is_allowed(value: Any, allowed: tuple[Any, ...]) -> bool:
    if value in allowed:
        return True
    # Symbols compare by token so "admin" matches Role.ADMIN and back
    return _token(value) in {_token(v) for v in allowed}


def check_argument(spec: ParameterSpec, value: Any) -> ParameterIssue | None:
    """First failing check of one non-None value, or None when it is valid."""
    if not matches_type(value, spec.type):
        return TypeMismatch(name=spec.name, expected=spec.type, value=value)

    if spec.allowed_values is not None and not _is_allowed(value, spec.allowed_values):
        return NotAllowedValue(name=spec.name, value=value, allowed=spec.allowed_values)

    if spec.type.is_numeric:
        too_low = spec.min is not None and value < spec.min
        too_high = spec.max is not None and value > spec.max
        if too_low or too_high:
            return OutOfRange(name=spec.name, value=value, minimum=spec.min, maximum=spec.max)

    return None


def check(schema: ParameterSchema, arguments: Mapping[str, Any]) -> list[ParameterIssue]:
    """Return every issue found in ``arguments``; empty when they are valid."""
    issues: list[ParameterIssue] = []

    missing = tuple(
        name for name in schema.required_names if arguments.get(name) is None
    )
    if missing:
        issues.append(MissingParameter(names=missing))

    for name, value in arguments.items():
        spec = schema.get(name)
        if spec is None or value is None:
            continue
        issue = check_argument(spec, value)
        if issue is not None:
            issues.append(issue)

    return issues


def validate(
    schema: ParameterSchema,
    arguments: Mapping[str, Any],
    seed: str | None = None,
) -> None:
    """Raise :class:`ParameterValidationError` unless ``arguments`` fit ``schema``."""
    issues = check(schema, arguments)
    if issues:
        raise ParameterValidationError(issues, seed=seed)
