"""Convert raw form/CLI strings to the types a seed schema declares."""

from collections.abc import Mapping
from typing import Any

from factory_seeder.shared.seeds.schema import ParameterSchema, ParameterSpec, ParameterType

TRUE_TOKENS = frozenset({"true", "1", "yes", "on"})
FALSE_TOKENS = frozenset({"false", "0", "no", "off"})


def coerce_value(value: Any, spec: ParameterSpec | None) -> Any:
    """Coerce one raw value.

    Values that cannot be converted are returned unchanged so the validator
    reports them as a type mismatch instead of silently guessing.
    """
    if spec is None or not isinstance(value, str):
        return value

    text = value.strip()

    if spec.type is ParameterType.INTEGER:
        try:
            return int(text)
        except ValueError:
            return value

    if spec.type is ParameterType.BOOLEAN:
        lowered = text.lower()
        if lowered in TRUE_TOKENS:
            return True
        if lowered in FALSE_TOKENS:
            return False
        return value

    if spec.type is ParameterType.SYMBOL:
        return text

    if spec.type is ParameterType.ARRAY:
        return [item.strip() for item in text.split(",") if item.strip()]

    return value


def coerce_arguments(schema: ParameterSchema, raw: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce every raw argument; blank strings count as not supplied."""
    coerced: dict[str, Any] = {}
    for name, value in raw.items():
        if isinstance(value, str) and not value.strip():
            continue
        coerced[name] = coerce_value(value, schema.get(name))
    return coerced
