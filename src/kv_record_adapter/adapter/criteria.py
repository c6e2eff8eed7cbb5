"""Resolution of ORM criteria into primary key lookups.

The adapter has no query planner: a criteria object is usable only when it names a single record by its
primary key, or, for destroy, when it matches everything. Criteria are resolved once into one of the
variants below and every operation branches on the variant.
"""

from collections.abc import Mapping, Set
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True)
class PrimaryKeyEquality:
    """The criteria selects the single record whose primary key equals `value`."""

    value: Any


@dataclass(frozen=True)
class MatchAll:
    """The criteria has no conditions and matches every record of the collection."""


@dataclass(frozen=True)
class Unsupported:
    """The criteria cannot be answered without evaluating predicates."""

    reason: str


ResolvedCriteria: TypeAlias = PrimaryKeyEquality | MatchAll | Unsupported


def present(value: Any) -> bool:  # pyright: ignore[reportAny]
    """Whether a value counts as given: not None and not an empty string."""
    return value is not None and value != ""


def is_scalar(value: Any) -> bool:  # pyright: ignore[reportAny]
    return not isinstance(value, Mapping | list | tuple | Set)


def where_clause(criteria: Mapping[str, Any] | None) -> Any:  # pyright: ignore[reportAny]
    """Return the `where` clause of a criteria object as given, or None if it has none."""
    if criteria is None:
        return None

    return criteria.get("where")  # pyright: ignore[reportAny]


def resolve_criteria(criteria: Mapping[str, Any] | None, primary_key: str) -> ResolvedCriteria:
    """Resolve a criteria object against the primary key of its collection."""
    where: Any = where_clause(criteria)  # pyright: ignore[reportAny]

    if where is None:
        return MatchAll()

    if not isinstance(where, Mapping):
        return Unsupported(reason="the where clause must be a mapping")

    if not where:
        return MatchAll()

    if len(where) != 1:
        return Unsupported(reason=f"expected exactly one condition, got {len(where)}")

    if primary_key not in where:
        return Unsupported(reason=f"the condition is not on the primary key {primary_key!r}")

    value: Any = where[primary_key]  # pyright: ignore[reportAny]

    if not present(value):
        return Unsupported(reason="the primary key value is missing")

    if not is_scalar(value):
        return Unsupported(reason="the primary key value must be a single scalar")

    return PrimaryKeyEquality(value=value)
