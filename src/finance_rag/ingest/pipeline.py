"""Bulk ingestion: validate -> embed (bounded parallel) -> insert."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from finance_rag.config import IngestConfig
from finance_rag.ingest.embedder import Embedder
from finance_rag.ingest.validation import validate_chunk, validate_embeddings
from finance_rag.retrieval.vector_store import VectorStore
from finance_rag.types import FinancialChunk

logger = logging.getLogger(__name__)


class IngestPipeline:
    """Coordinates validation, embedding and insertion of financial chunks.

    Ingestion is kept apart from query-time retrieval so stores can be
    populated offline or in batch jobs.
    """

    def __init__(
        self,
        embedder: Embedder,
        vector_store: VectorStore,
        config: IngestConfig | None = None,
    ) -> None:
        self.embedder = embedder
        self.vector_store = vector_store
        self.config = config or IngestConfig()

    def ingest(self, chunks: Sequence[FinancialChunk]) -> int:
        """Insert `chunks` as one batch and return how many were written.

        Every chunk is validated before any embedding call, so a malformed
        item rejects the whole batch and nothing is inserted.
        """

        batch = list(chunks)
        if not batch:
            return 0
        for chunk in batch:
            validate_chunk(chunk)

        embeddings = self.embed_texts([chunk.text for chunk in batch])
        validate_embeddings(batch, embeddings)
        self.vector_store.add(batch, embeddings)
        logger.info("Inserted %d chunks", len(batch))
        return len(batch)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts concurrently, bounded by `embedding_concurrency`.

        Output order matches input order.
        """

        if not texts:
            return []
        workers = min(self.config.embedding_concurrency, len(texts))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.embedder.embed_query, texts))
