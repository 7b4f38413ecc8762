"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

Category = Literal["transactional", "insight", "educational"]
CATEGORIES: tuple[Category, ...] = ("transactional", "insight", "educational")


@dataclass(slots=True, frozen=True)
class Intent:
    """Classification of a user question.

    A `temporal_phrase` may only be present when `has_temporal_reference` is
    true. The reverse does not hold: a temporal cue can be detected without a
    phrase that the resolver understands.
    """

    category: Category
    has_temporal_reference: bool = False
    temporal_phrase: str | None = None
    keywords: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")
        if self.temporal_phrase is not None and not self.has_temporal_reference:
            raise ValueError("temporal_phrase requires has_temporal_reference")


@dataclass(slots=True, frozen=True)
class DateRange:
    """Inclusive calendar range; both bounds absent means unresolved."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must both be set or both be absent")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")

    @classmethod
    def unresolved(cls) -> "DateRange":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.start is None

    @property
    def days(self) -> int:
        if self.start is None or self.end is None:
            return 0
        return (self.end - self.start).days + 1

    def iso(self) -> tuple[str | None, str | None]:
        if self.start is None or self.end is None:
            return None, None
        return self.start.isoformat(), self.end.isoformat()


@dataclass(slots=True, frozen=True)
class FinancialChunk:
    """A unit of financial text submitted for ingestion."""

    id: str
    text: str
    category: str
    date: str
    source: str
    amount: float | None = None


@dataclass(slots=True, frozen=True)
class RetrievedChunk:
    """A search hit returned by a vector store (lower distance = closer)."""

    id: str
    text: str
    category: str
    date: str
    source: str
    amount: float | None = None
    distance: float | None = None


@dataclass(slots=True, frozen=True)
class ReplyTarget:
    """Character range the generated reply is trimmed towards."""

    kind: Category
    min_chars: int
    max_chars: int


@dataclass(slots=True)
class PipelineResult:
    """Outcome of one `answer()` call."""

    answer_text: str
    chunks_used: tuple[RetrievedChunk, ...]
    resolved_category: Category
    chunk_count: int
    intent: Intent
    where_clause: str
    reply_target: ReplyTarget
    stage_latency_ms: dict[str, float] = field(default_factory=dict)
