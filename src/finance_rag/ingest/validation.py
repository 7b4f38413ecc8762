"""Pre-insertion validation of financial chunks."""

from __future__ import annotations

import re
from datetime import date

from finance_rag.errors import ChunkValidationError
from finance_rag.types import CATEGORIES, FinancialChunk

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_iso_date(value: str) -> bool:
    """True for `YYYY-MM-DD` strings naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_chunk(chunk: FinancialChunk) -> None:
    if not chunk.id:
        raise ChunkValidationError(chunk.id, "chunk must have an id")
    if not chunk.text or not chunk.text.strip():
        raise ChunkValidationError(chunk.id, "chunk must have text")
    if chunk.category not in CATEGORIES:
        raise ChunkValidationError(
            chunk.id, f"category must be one of {', '.join(CATEGORIES)}"
        )
    if not chunk.date:
        raise ChunkValidationError(chunk.id, "date is required")
    if not is_valid_iso_date(chunk.date):
        raise ChunkValidationError(chunk.id, f"invalid date {chunk.date!r}, expected YYYY-MM-DD")
    if not chunk.source:
        raise ChunkValidationError(chunk.id, "chunk must have a source")


def validate_embeddings(chunks: list[FinancialChunk], embeddings: list[list[float]]) -> None:
    if len(chunks) != len(embeddings):
        raise ValueError("chunks and embeddings must have the same length")
    for chunk, embedding in zip(chunks, embeddings, strict=True):
        if not embedding:
            raise ChunkValidationError(chunk.id, "chunk must have an embedding")
