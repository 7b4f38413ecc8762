"""Exception hierarchy for the finance RAG pipeline."""

from __future__ import annotations


class FinanceRagError(Exception):
    """Base class for errors raised by this package."""


class PipelineError(FinanceRagError):
    """A fatal failure in one stage of `answer()`."""

    stage = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(f"[{self.stage}] {message}")
        self.detail = message


class EmbeddingError(PipelineError):
    stage = "embedding"


class SearchError(PipelineError):
    stage = "search"


class GenerationError(PipelineError):
    stage = "generation"


class ChunkValidationError(FinanceRagError, ValueError):
    """A chunk was rejected before insertion."""

    def __init__(self, chunk_id: str, reason: str) -> None:
        super().__init__(f"Invalid chunk {chunk_id or '<missing id>'}: {reason}")
        self.chunk_id = chunk_id
        self.reason = reason
