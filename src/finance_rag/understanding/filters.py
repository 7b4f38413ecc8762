"""Typed pre-filter construction for the vector store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from finance_rag.types import CATEGORIES, Category, DateRange, Intent
from finance_rag.understanding.temporal import resolve

FieldName = Literal["category", "date"]
Operator = Literal["=", ">=", "<="]

_FIELDS: tuple[str, ...] = ("category", "date")
_OPERATORS: tuple[str, ...] = ("=", ">=", "<=")


@dataclass(slots=True, frozen=True)
class Condition:
    """A single comparison of a named field against a literal."""

    field: FieldName
    op: Operator
    value: str | date

    def __post_init__(self) -> None:
        if self.field not in _FIELDS:
            raise ValueError(f"Unsupported filter field: {self.field!r}")
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")
        if self.field == "category" and self.value not in CATEGORIES:
            raise ValueError(f"Unknown category literal: {self.value!r}")
        if self.field == "date" and not isinstance(self.value, date):
            raise ValueError("date conditions require a datetime.date value")

    @property
    def literal(self) -> str:
        return self.value.isoformat() if isinstance(self.value, date) else str(self.value)

    def render(self) -> str:
        escaped = self.literal.replace("'", "''")
        return f"{self.field} {self.op} '{escaped}'"

    def matches(self, record: Mapping[str, Any]) -> bool:
        actual = record.get(self.field)
        if actual is None:
            return False
        actual = actual.isoformat() if isinstance(actual, date) else str(actual)
        expected = self.literal
        if self.op == "=":
            return actual == expected
        if self.op == ">=":
            return actual >= expected
        return actual <= expected


@dataclass(slots=True, frozen=True)
class And:
    """Conjunction of conditions, rendered in insertion order."""

    conditions: tuple[Condition, ...]

    def render(self) -> str:
        return " AND ".join(condition.render() for condition in self.conditions)

    def matches(self, record: Mapping[str, Any]) -> bool:
        return all(condition.matches(record) for condition in self.conditions)

    def on_field(self, field: FieldName) -> tuple[Condition, ...]:
        return tuple(c for c in self.conditions if c.field == field)


Predicate = And


@dataclass(slots=True, frozen=True)
class RetrievalFilter:
    """Pre-filter and keyword list handed to the search step."""

    category: Category
    predicate: Predicate
    keywords: tuple[str, ...]
    date_range: DateRange

    @property
    def where_clause(self) -> str:
        return self.predicate.render()


def build_filter(intent: Intent, reference_date: date) -> RetrievalFilter:
    """Combine an intent and its resolved date range into a `RetrievalFilter`.

    The category condition is always present. Date bounds are added as a
    pair only when the temporal phrase resolves; an unresolved phrase leaves
    a category-only filter.
    """

    conditions = [Condition("category", "=", intent.category)]
    date_range = DateRange.unresolved()
    if intent.has_temporal_reference and intent.temporal_phrase:
        date_range = resolve(intent.temporal_phrase.lower(), reference_date)
        if date_range.start is not None and date_range.end is not None:
            conditions.append(Condition("date", ">=", date_range.start))
            conditions.append(Condition("date", "<=", date_range.end))

    return RetrievalFilter(
        category=intent.category,
        predicate=And(tuple(conditions)),
        keywords=tuple(intent.keywords),
        date_range=date_range,
    )
