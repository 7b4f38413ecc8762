"""FastAPI entrypoint for question answering and chunk ingestion."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from finance_rag.config import PipelineConfig
from finance_rag.errors import ChunkValidationError, PipelineError
from finance_rag.generation.llm import ChatModelGenerator, ExtractiveGenerator, create_chat_model
from finance_rag.ingest.embedder import create_embedder
from finance_rag.ingest.pipeline import IngestPipeline
from finance_rag.ingest.seed import sample_chunks
from finance_rag.pipeline.orchestrator import RetrievalOrchestrator
from finance_rag.retrieval.vector_store import InMemoryVectorStore
from finance_rag.types import FinancialChunk
from finance_rag.understanding.classifier import IntentClassifier

_log_level = os.getenv("FINANCE_RAG_LOG_LEVEL")
if _log_level:
    logging.basicConfig(level=_log_level.upper())


class AskRequest(BaseModel):
    question: str = Field(min_length=1)
    reference_date: date | None = None


class ChunkPayload(BaseModel):
    id: str
    text: str
    category: str
    date: str
    source: str
    amount: float | None = None


class ChunksRequest(BaseModel):
    chunks: list[ChunkPayload] = Field(min_length=1)


class SeedRequest(BaseModel):
    reference_date: date | None = None


def create_app(
    orchestrator: RetrievalOrchestrator | None = None,
    ingest_pipeline: IngestPipeline | None = None,
) -> FastAPI:
    """Build the HTTP app; collaborators default to environment-driven factories."""

    if orchestrator is None:
        config = PipelineConfig()
        llm = create_chat_model()
        # Queries search the store that ingestion writes to.
        if ingest_pipeline is not None:
            embedder, vector_store = ingest_pipeline.embedder, ingest_pipeline.vector_store
        else:
            embedder, vector_store = create_embedder(), InMemoryVectorStore()
        orchestrator = RetrievalOrchestrator(
            classifier=IntentClassifier(llm, config.classifier),
            embedder=embedder,
            vector_store=vector_store,
            generator=ChatModelGenerator(llm) if llm is not None else ExtractiveGenerator(),
            config=config,
        )
    if ingest_pipeline is None:
        ingest_pipeline = IngestPipeline(
            orchestrator.embedder, orchestrator.vector_store, orchestrator.config.ingest
        )

    app = FastAPI(title="Finance RAG", version="0.1.0")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "llm_configured": orchestrator.classifier.llm is not None,
            "classifier_mode": orchestrator.classifier.mode,
            "store_has_table": orchestrator.vector_store.has_table,
        }

    @app.post("/ask")
    def ask(request: AskRequest) -> dict[str, Any]:
        try:
            result = orchestrator.answer(request.question, request.reference_date)
        except PipelineError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

        return {
            "answer": result.answer_text,
            "resolved_category": result.resolved_category,
            "where_clause": result.where_clause,
            "chunk_count": result.chunk_count,
            "chunks": [asdict(chunk) for chunk in result.chunks_used],
            "character_range": {
                "min": result.reply_target.min_chars,
                "max": result.reply_target.max_chars,
            },
            "stage_latency_ms": result.stage_latency_ms,
        }

    @app.post("/chunks")
    def add_chunks(request: ChunksRequest) -> dict[str, Any]:
        chunks = [FinancialChunk(**item.model_dump()) for item in request.chunks]
        try:
            inserted = ingest_pipeline.ingest(chunks)
        except ChunkValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except Exception as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"inserted": inserted}

    @app.post("/seed")
    def seed(request: SeedRequest) -> dict[str, Any]:
        chunks = sample_chunks(request.reference_date or date.today())
        return {"inserted": ingest_pipeline.ingest(chunks)}

    return app


app = create_app()
