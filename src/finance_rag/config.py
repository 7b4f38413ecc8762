"""Configuration models for the finance RAG pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class ClassifierConfig(BaseModel):
    """Configures the LLM-backed intent classifier."""

    temperature: float = Field(default=0.1, ge=0.0, le=2.0)


class RetrievalConfig(BaseModel):
    """Configures pre-filtered similarity search."""

    top_k: int = Field(default=5, ge=1)


class GenerationConfig(BaseModel):
    """Configures answer generation and its prompt-level length rule."""

    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=400, ge=1)
    max_answer_chars: int = Field(default=400, ge=1)


class ReplyBudget(BaseModel):
    """Inclusive character range a reply is trimmed towards."""

    min_chars: int = Field(default=0, ge=0)
    max_chars: int = Field(default=500, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "ReplyBudget":
        if self.min_chars > self.max_chars:
            raise ValueError("min_chars must not exceed max_chars")
        return self


class ReplyBudgetConfig(BaseModel):
    """Per-category reply budgets applied after generation."""

    transactional: ReplyBudget = Field(
        default_factory=lambda: ReplyBudget(min_chars=0, max_chars=140)
    )
    insight: ReplyBudget = Field(
        default_factory=lambda: ReplyBudget(min_chars=250, max_chars=500)
    )
    educational: ReplyBudget = Field(
        default_factory=lambda: ReplyBudget(min_chars=200, max_chars=500)
    )

    def for_category(self, category: str) -> ReplyBudget:
        return getattr(self, category)


class IngestConfig(BaseModel):
    """Configures bulk ingestion."""

    embedding_concurrency: int = Field(default=4, ge=1, le=32)


class PipelineConfig(BaseModel):
    """Top-level configuration handed to the orchestrator."""

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    reply: ReplyBudgetConfig = Field(default_factory=ReplyBudgetConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
