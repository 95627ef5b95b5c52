# This project was developed with assistance from AI tools.
"""Filter builder: QueryDescriptor -> Predicate.

A ``Predicate`` is a conjunction of simple field conditions. It renders to
SQLAlchemy WHERE clauses for a mapped read model and can also be evaluated
against an in-memory record. An empty predicate matches everything.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from .params import DateRange, QueryDescriptor

# Query parameter name -> record field
EQUALITY_FIELDS: dict[str, str] = {
    "user": "username",
    "date": "date",
    "status": "status",
    "organization": "organization",
}


def field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


@dataclass(frozen=True)
class Condition:
    field: str
    op: Literal["eq", "gte", "lte"]
    value: Any

    def clause(self, model: type):
        column = getattr(model, self.field)
        if self.op == "eq":
            return column == self.value
        if self.op == "gte":
            return column >= self.value
        return column <= self.value

    def matches(self, record: Any) -> bool:
        actual = field_value(record, self.field)
        if self.op == "eq":
            return actual == self.value
        # NULL never satisfies a range comparison
        if actual is None:
            return False
        if self.op == "gte":
            return actual >= self.value
        return actual <= self.value


@dataclass(frozen=True)
class Predicate:
    conditions: tuple[Condition, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.conditions

    @classmethod
    def eq(cls, field: str, value: Any) -> "Predicate":
        return cls((Condition(field, "eq", value),))

    def and_(self, other: "Predicate") -> "Predicate":
        return Predicate(self.conditions + other.conditions)

    def clauses(self, model: type) -> list:
        return [condition.clause(model) for condition in self.conditions]

    def matches(self, record: Any) -> bool:
        return all(condition.matches(record) for condition in self.conditions)


MATCH_ALL = Predicate()


def build_filter(query: QueryDescriptor, params: Iterable[str]) -> Predicate:
    """Equality predicate for the given parameter names.

    Only parameters that the resolver kept (present and non-empty) constrain
    the result; anything else is an open filter.
    """
    conditions = []
    for name in params:
        value = query.filters.get(name)
        if value is None:
            continue
        conditions.append(Condition(EQUALITY_FIELDS[name], "eq", value))
    return Predicate(tuple(conditions))


def threshold_filter(field: str, minimum: float) -> Predicate:
    """Inclusive ``field >= minimum``, applied only for a positive minimum."""
    if minimum > 0:
        return Predicate((Condition(field, "gte", minimum),))
    return MATCH_ALL


def date_range_filter(date_range: DateRange, field: str = "date") -> Predicate:
    """ISO-string date bounds; inclusive at both ends, ``end=None`` is open."""
    conditions = [Condition(field, "gte", date_range.start)]
    if date_range.end is not None:
        conditions.append(Condition(field, "lte", date_range.end))
    return Predicate(tuple(conditions))
