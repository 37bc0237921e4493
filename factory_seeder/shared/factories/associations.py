"""Keeps collection associations out of the attributes handed to a factory.

Passing ``comments="spam"`` to a model whose ``comments`` is a to-many
relationship fails deep inside the ORM. Such keys are removed (or rejected)
before generation.

Keys are matched in a fixed order:

1. Known collections: reflected to-many relationships of the model plus the
   factory's RelatedFactory declarations.
2. Only when the model could not be reflected: a key that looks like a
   plural association name whose value is a symbolic token (an Enum member
   or a lower-case identifier string).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from factory_seeder.core.exceptions import AssociationAttributeConflictError
from factory_seeder.core.logging import get_logger
from factory_seeder.shared.execution_log import ExecutionLog
from factory_seeder.shared.factories.introspector import FactoryInfo

logger = get_logger(__name__)

ConflictPolicy = Literal["strip", "raise"]

NON_PLURAL_ENDINGS = ("ss", "us", "is")


@dataclass
class FilterOutcome:
    """Attributes that survived the filter and what was removed, with reasons."""

    kept: dict[str, Any]
    stripped: dict[str, str] = field(default_factory=dict)


def looks_plural(key: str) -> bool:
    return key.endswith("s") and not key.endswith(NON_PLURAL_ENDINGS)


def is_symbolic(value: Any) -> bool:
    if isinstance(value, Enum):
        return True
    return isinstance(value, str) and value.isidentifier() and value == value.lower()


def _reason(key: str, value: Any, info: FactoryInfo) -> str | None:
    if key in info.collection_associations:
        return "collection association"
    if not info.reflected and looks_plural(key) and is_symbolic(value):
        return "looks like a collection association"
    return None


def filter_association_attributes(
    attributes: Mapping[str, Any],
    info: FactoryInfo,
    policy: ConflictPolicy = "strip",
    log: ExecutionLog | None = None,
) -> FilterOutcome:
    """Split ``attributes`` into kept values and stripped association keys.

    Raises:
        AssociationAttributeConflictError: If anything would be stripped and
            ``policy`` is ``"raise"``.
    """
    outcome = FilterOutcome(kept={})
    for key, value in attributes.items():
        reason = _reason(key, value, info)
        if reason is None:
            outcome.kept[key] = value
        else:
            outcome.stripped[key] = reason

    if outcome.stripped and policy == "raise":
        raise AssociationAttributeConflictError(info.name, sorted(outcome.stripped))

    for key, reason in outcome.stripped.items():
        if log is not None:
            log.warning(
                f"Ignoring attribute '{key}' for factory '{info.name}': {reason}",
                event="attribute_stripped",
                key=key,
            )
        else:
            logger.warning("factory.attribute_stripped", factory=info.name, key=key, reason=reason)

    return outcome
