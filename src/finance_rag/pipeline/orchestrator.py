"""End-to-end question answering: classify -> filter -> embed -> search -> generate -> trim."""

from __future__ import annotations

import logging
from datetime import date

from finance_rag.config import PipelineConfig
from finance_rag.errors import EmbeddingError, GenerationError, SearchError
from finance_rag.generation.llm import Generator
from finance_rag.ingest.embedder import Embedder
from finance_rag.obs.tracing import StageTimings
from finance_rag.pipeline.prompts import build_contextual_query, build_system_instruction
from finance_rag.pipeline.reply import reply_target, trim_to_range
from finance_rag.retrieval.vector_store import VectorStore
from finance_rag.types import PipelineResult, RetrievedChunk
from finance_rag.understanding.classifier import IntentClassifier
from finance_rag.understanding.filters import RetrievalFilter, build_filter

logger = logging.getLogger(__name__)


class RetrievalOrchestrator:
    """Runs the retrieval-augmented answering pipeline for one question.

    Collaborators are injected and the orchestrator keeps no per-request state,
    so one instance can serve concurrent callers. Stages run strictly in
    order. Classification never fails (it degrades to the offline heuristic);
    embedding, search and generation failures abort the request with a
    stage-labeled `PipelineError` and are not retried here.
    """

    def __init__(
        self,
        *,
        classifier: IntentClassifier,
        embedder: Embedder,
        vector_store: VectorStore,
        generator: Generator,
        config: PipelineConfig | None = None,
    ) -> None:
        self.classifier = classifier
        self.embedder = embedder
        self.vector_store = vector_store
        self.generator = generator
        self.config = config or PipelineConfig()

    def answer(self, query: str, reference_date: date | None = None) -> PipelineResult:
        """Answer `query`, anchoring relative dates to `reference_date` (default today)."""

        ref = reference_date or date.today()
        timings = StageTimings()

        with timings.stage("understanding"):
            intent = self.classifier.classify(query, ref)
            retrieval_filter = build_filter(intent, ref)
        logger.debug(
            "category=%s where=%r keywords=%s",
            retrieval_filter.category,
            retrieval_filter.where_clause,
            list(retrieval_filter.keywords),
        )

        with timings.stage("embedding"):
            vector = self._embed(query)

        with timings.stage("search"):
            chunks = self._search(vector, retrieval_filter)
        logger.debug("Retrieved %d chunks", len(chunks))

        system_instruction = build_system_instruction(
            ref, max_chars=self.config.generation.max_answer_chars
        )
        contextual_query = build_contextual_query(query, chunks)

        with timings.stage("generation"):
            raw_answer = self._generate(system_instruction, contextual_query)

        target = reply_target(query, self.config.reply)
        answer_text = trim_to_range(raw_answer, target.min_chars, target.max_chars)

        return PipelineResult(
            answer_text=answer_text,
            chunks_used=tuple(chunks),
            resolved_category=retrieval_filter.category,
            chunk_count=len(chunks),
            intent=intent,
            where_clause=retrieval_filter.where_clause,
            reply_target=target,
            stage_latency_ms=timings.as_dict(),
        )

    def _embed(self, query: str) -> list[float]:
        try:
            return self.embedder.embed_query(query)
        except Exception as exc:
            logger.exception("Query embedding failed")
            raise EmbeddingError(f"failed to embed query: {exc}") from exc

    def _search(self, vector: list[float], retrieval_filter: RetrievalFilter) -> list[RetrievedChunk]:
        try:
            return list(
                self.vector_store.search(
                    vector,
                    predicate=retrieval_filter.predicate,
                    limit=self.config.retrieval.top_k,
                )
            )
        except Exception as exc:
            logger.exception("Filtered search failed for %r", retrieval_filter.where_clause)
            raise SearchError(f"failed to search chunks: {exc}") from exc

    def _generate(self, system_instruction: str, contextual_query: str) -> str:
        generation = self.config.generation
        try:
            return self.generator.generate(
                system_instruction,
                contextual_query,
                temperature=generation.temperature,
                max_output_tokens=generation.max_output_tokens,
            )
        except Exception as exc:
            logger.exception("Answer generation failed")
            raise GenerationError(f"failed to generate answer: {exc}") from exc
