import threading
import time
from datetime import date

import pytest

from finance_rag.errors import ChunkValidationError
from finance_rag.ingest.embedder import HashingEmbedder
from finance_rag.retrieval import vector_store
from finance_rag.retrieval.vector_store import InMemoryVectorStore
from finance_rag.types import FinancialChunk, Intent
from finance_rag.understanding.filters import build_filter


def _chunks() -> list[FinancialChunk]:
    return [
        FinancialChunk("tx-1", "Grocery spending of 450 in March", "transactional", "2024-03-05", "bank", 450.0),
        FinancialChunk("tx-2", "Electricity bill of 180 in March", "transactional", "2024-03-10", "bank", 180.5),
        FinancialChunk("tx-3", "Grocery spending of 520 in February", "transactional", "2024-02-07", "bank", 520.0),
        FinancialChunk("in-1", "Grocery spending dropped this month", "insight", "2024-03-28", "analysis"),
    ]


def _store() -> tuple[InMemoryVectorStore, HashingEmbedder]:
    embedder = HashingEmbedder()
    store = InMemoryVectorStore()
    chunks = _chunks()
    store.add(chunks, embedder.embed_documents([c.text for c in chunks]))
    return store, embedder


def test_search_without_table_returns_empty() -> None:
    store = InMemoryVectorStore()

    assert store.has_table is False
    assert store.search([0.1, 0.2], limit=5) == []


def test_search_applies_predicate_before_ranking() -> None:
    store, embedder = _store()
    intent = Intent(category="transactional", has_temporal_reference=True, temporal_phrase="last month")
    predicate = build_filter(intent, date(2024, 4, 15)).predicate

    hits = store.search(embedder.embed_query("grocery spending"), predicate=predicate, limit=5)

    assert {hit.id for hit in hits} == {"tx-1", "tx-2"}
    assert hits[0].id == "tx-1"
    assert all(hit.category == "transactional" for hit in hits)


def test_search_orders_by_ascending_distance_and_limits() -> None:
    store, embedder = _store()

    hits = store.search(embedder.embed_query("grocery spending"), limit=2)

    assert len(hits) == 2
    assert hits[0].distance <= hits[1].distance


def test_invalid_batch_is_rejected_atomically() -> None:
    store = InMemoryVectorStore()
    good = FinancialChunk("tx-1", "Rent", "transactional", "2024-03-01", "bank")
    bad = FinancialChunk("tx-2", "Rent", "transactional", "2024-02-30", "bank")

    with pytest.raises(ChunkValidationError) as excinfo:
        store.add([good, bad], [[1.0], [1.0]])

    assert excinfo.value.chunk_id == "tx-2"
    assert store.has_table is False


def test_add_requires_matching_embeddings() -> None:
    store = InMemoryVectorStore()
    chunk = FinancialChunk("tx-1", "Rent", "transactional", "2024-03-01", "bank")

    with pytest.raises(ValueError):
        store.add([chunk], [])


def test_add_upserts_by_id() -> None:
    store = InMemoryVectorStore()
    first = FinancialChunk("tx-1", "Rent", "transactional", "2024-03-01", "bank")
    updated = FinancialChunk("tx-1", "Rent paid", "transactional", "2024-03-02", "bank")

    store.add([first], [[1.0, 0.0]])
    store.add([updated], [[1.0, 0.0]])

    hits = store.search([1.0, 0.0])
    assert [hit.text for hit in hits] == ["Rent paid"]


def test_concurrent_adds_keep_every_batch(monkeypatch) -> None:
    stored_vector = vector_store._StoredVector

    def slow_stored_vector(**kwargs):
        time.sleep(0.05)
        return stored_vector(**kwargs)

    monkeypatch.setattr(vector_store, "_StoredVector", slow_stored_vector)
    store = InMemoryVectorStore()
    barrier = threading.Barrier(2)

    def add(chunk_id: str) -> None:
        barrier.wait()
        store.add(
            [FinancialChunk(chunk_id, "Rent", "transactional", "2024-03-01", "bank")],
            [[1.0, 0.0]],
        )

    threads = [threading.Thread(target=add, args=(chunk_id,)) for chunk_id in ("a", "b")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(hit.id for hit in store.search([1.0, 0.0], limit=10)) == ["a", "b"]

def test_faiss_adapter_filters_before_top_k() -> None:
    pytest.importorskip("faiss")
    from finance_rag.retrieval.vector_store import FaissVectorStoreAdapter

    embedder = HashingEmbedder()
    store = FaissVectorStoreAdapter(embedder)
    assert store.search([0.1, 0.2]) == []

    chunks = _chunks()
    store.add(chunks, embedder.embed_documents([c.text for c in chunks]))
    intent = Intent(category="transactional", has_temporal_reference=True, temporal_phrase="last month")
    predicate = build_filter(intent, date(2024, 4, 15)).predicate

    hits = store.search(embedder.embed_query("grocery spending"), predicate=predicate, limit=1)

    assert store.has_table is True
    assert [hit.id for hit in hits] == ["tx-1"]
    assert hits[0].amount == 450.0
