import threading
import time
from datetime import date

import pytest

from finance_rag.config import IngestConfig
from finance_rag.errors import ChunkValidationError
from finance_rag.ingest.embedder import Embedder, HashingEmbedder
from finance_rag.ingest.pipeline import IngestPipeline
from finance_rag.ingest.seed import sample_chunks
from finance_rag.ingest.validation import is_valid_iso_date
from finance_rag.retrieval.vector_store import InMemoryVectorStore
from finance_rag.types import FinancialChunk


class _ConcurrencyProbe(Embedder):
    def __init__(self) -> None:
        self.calls = 0
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def embed_query(self, text: str) -> list[float]:
        with self._lock:
            self.calls += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.01)
        with self._lock:
            self.active -= 1
        return [float(len(text)), 1.0]


def test_ingest_sample_chunks() -> None:
    store = InMemoryVectorStore()
    pipeline = IngestPipeline(HashingEmbedder(), store)

    inserted = pipeline.ingest(sample_chunks(date(2024, 1, 20)))

    assert inserted == 14
    assert store.has_table is True


def test_invalid_item_fails_batch_before_embedding() -> None:
    probe = _ConcurrencyProbe()
    store = InMemoryVectorStore()
    pipeline = IngestPipeline(probe, store)
    chunks = [
        FinancialChunk("tx-1", "Rent", "transactional", "2024-03-01", "bank"),
        FinancialChunk("tx-2", "Rent", "transactional", "", "bank"),
    ]

    with pytest.raises(ChunkValidationError):
        pipeline.ingest(chunks)

    assert probe.calls == 0
    assert store.has_table is False


def test_embedding_is_bounded_and_order_preserving() -> None:
    probe = _ConcurrencyProbe()
    pipeline = IngestPipeline(probe, InMemoryVectorStore(), IngestConfig(embedding_concurrency=3))
    texts = ["x" * n for n in range(1, 13)]

    vectors = pipeline.embed_texts(texts)

    assert [vector[0] for vector in vectors] == [float(n) for n in range(1, 13)]
    assert probe.peak <= 3


def test_empty_batch_is_a_no_op() -> None:
    store = InMemoryVectorStore()

    assert IngestPipeline(HashingEmbedder(), store).ingest([]) == 0
    assert store.has_table is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2024-02-29", True), ("2023-02-29", False), ("2024-3-01", False), ("2024/03/01", False), ("", False)],
)
def test_iso_date_validation(value: str, expected: bool) -> None:
    assert is_valid_iso_date(value) is expected


def test_sample_chunks_cover_each_category() -> None:
    chunks = sample_chunks(date(2024, 4, 15))
    ids = [chunk.id for chunk in chunks]

    assert len(set(ids)) == len(ids)
    assert {"edu-001", "edu-002", "edu-003", "edu-004"} <= set(ids)
    assert {chunk.category for chunk in chunks} == {"transactional", "insight", "educational"}
