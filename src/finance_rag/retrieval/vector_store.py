"""Vector store interfaces and concrete adapters."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from math import sqrt
from typing import Any, Protocol, cast

from finance_rag.ingest.validation import validate_chunk, validate_embeddings
from finance_rag.types import FinancialChunk, RetrievedChunk
from finance_rag.understanding.filters import Predicate

logger = logging.getLogger(__name__)


class VectorStore(Protocol):
    """Minimal vector store contract for filtered similarity search."""

    @property
    def has_table(self) -> bool:
        """Whether any data has been written yet."""

    def add(self, chunks: list[FinancialChunk], embeddings: list[list[float]]) -> None:
        """Insert chunk vectors; the whole batch is rejected on invalid input."""

    def search(
        self,
        vector: list[float],
        predicate: Predicate | None = None,
        limit: int = 5,
    ) -> list[RetrievedChunk]:
        """Return up to `limit` hits ordered by ascending distance.

        An empty list, never an error, when no table exists yet.
        """


@dataclass(slots=True, frozen=True)
class _StoredVector:
    chunk: FinancialChunk
    embedding: list[float]


class InMemoryVectorStore:
    """Deterministic vector store used for tests and local prototyping.

    The table is created on first insert. Inserts are serialized by a lock and
    build a new record tuple that is swapped in with one assignment, so
    lock-free searches see either the old or the new table and never a
    half-applied batch.
    """

    def __init__(self) -> None:
        self._table: tuple[_StoredVector, ...] | None = None
        self._write_lock = threading.Lock()

    @property
    def has_table(self) -> bool:
        return self._table is not None

    def add(self, chunks: list[FinancialChunk], embeddings: list[list[float]]) -> None:
        for chunk in chunks:
            validate_chunk(chunk)
        validate_embeddings(chunks, embeddings)

        with self._write_lock:
            records = {record.chunk.id: record for record in self._table or ()}
            for chunk, embedding in zip(chunks, embeddings, strict=True):
                records[chunk.id] = _StoredVector(chunk=chunk, embedding=list(embedding))
            self._table = tuple(records.values())

    def search(
        self,
        vector: list[float],
        predicate: Predicate | None = None,
        limit: int = 5,
    ) -> list[RetrievedChunk]:
        table = self._table
        if table is None:
            logger.debug("Vector table does not exist yet; returning no results")
            return []

        candidates = [
            record
            for record in table
            if predicate is None or predicate.matches(asdict(record.chunk))
        ]
        ranked = sorted(
            (
                _to_retrieved(record.chunk, 1.0 - _cosine_similarity(vector, record.embedding))
                for record in candidates
            ),
            key=lambda item: cast(float, item.distance),
        )
        return ranked[:limit]


class FaissVectorStoreAdapter:
    """FAISS adapter via LangChain community integration.

    Keeps the same contract as `InMemoryVectorStore`. The predicate is applied
    as a metadata callable over every indexed vector, so filtering happens
    before the top-k cut rather than after it.
    """

    def __init__(self, embedder: Any) -> None:
        try:
            from langchain_community.vectorstores import FAISS
            from langchain_core.embeddings import Embeddings
        except Exception as exc:  # pragma: no cover - import path is environment-dependent
            raise RuntimeError(
                "FAISS dependencies are not available. Install langchain-community/faiss-cpu."
            ) from exc

        class _EmbeddingAdapter(Embeddings):
            def __init__(self, adapter_embedder: Any) -> None:
                self._embedder = adapter_embedder

            def embed_documents(self, texts: list[str]) -> list[list[float]]:
                return cast(list[list[float]], self._embedder.embed_documents(texts))

            def embed_query(self, text: str) -> list[float]:
                return cast(list[float], self._embedder.embed_query(text))

        self._faiss_cls = FAISS
        self._embeddings = _EmbeddingAdapter(embedder)
        self._index: Any | None = None

    @property
    def has_table(self) -> bool:
        return self._index is not None

    def add(self, chunks: list[FinancialChunk], embeddings: list[list[float]]) -> None:
        for chunk in chunks:
            validate_chunk(chunk)
        validate_embeddings(chunks, embeddings)

        text_embeddings = list(zip([chunk.text for chunk in chunks], embeddings, strict=True))
        metadatas = [_metadata(chunk) for chunk in chunks]
        ids = [chunk.id for chunk in chunks]

        if self._index is None:
            self._index = self._faiss_cls.from_embeddings(
                text_embeddings=text_embeddings,
                embedding=self._embeddings,
                metadatas=metadatas,
                ids=ids,
            )
            return

        self._index.add_embeddings(text_embeddings=text_embeddings, metadatas=metadatas, ids=ids)

    def search(
        self,
        vector: list[float],
        predicate: Predicate | None = None,
        limit: int = 5,
    ) -> list[RetrievedChunk]:
        if self._index is None:
            return []
        metadata_filter = predicate.matches if predicate is not None else None
        docs_and_scores = self._index.similarity_search_with_score_by_vector(
            embedding=vector,
            k=limit,
            filter=metadata_filter,
            fetch_k=max(limit, int(self._index.index.ntotal)),
        )
        results: list[RetrievedChunk] = []
        for doc, score in docs_and_scores:
            meta = doc.metadata
            results.append(
                RetrievedChunk(
                    id=str(meta.get("id", "")),
                    text=doc.page_content,
                    category=str(meta.get("category", "")),
                    date=str(meta.get("date", "")),
                    source=str(meta.get("source", "")),
                    amount=meta.get("amount"),
                    distance=float(score),
                )
            )
        return results


def _metadata(chunk: FinancialChunk) -> dict[str, Any]:
    return {
        "id": chunk.id,
        "category": chunk.category,
        "date": chunk.date,
        "source": chunk.source,
        "amount": chunk.amount,
    }


def _to_retrieved(chunk: FinancialChunk, distance: float) -> RetrievedChunk:
    return RetrievedChunk(
        id=chunk.id,
        text=chunk.text,
        category=chunk.category,
        date=chunk.date,
        source=chunk.source,
        amount=chunk.amount,
        distance=distance,
    )


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
