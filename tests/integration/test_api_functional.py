from fastapi.testclient import TestClient

from finance_rag.api.main import create_app
from finance_rag.generation.llm import ExtractiveGenerator
from finance_rag.ingest.embedder import HashingEmbedder
from finance_rag.ingest.pipeline import IngestPipeline
from finance_rag.pipeline.orchestrator import RetrievalOrchestrator
from finance_rag.retrieval.vector_store import InMemoryVectorStore
from finance_rag.understanding.classifier import IntentClassifier


class _FailingEmbedder(HashingEmbedder):
    def embed_query(self, text: str) -> list[float]:
        raise ConnectionError("embedding service down")


def _client(embedder=None) -> TestClient:
    embedder = embedder or HashingEmbedder()
    store = InMemoryVectorStore()
    orchestrator = RetrievalOrchestrator(
        classifier=IntentClassifier(),
        embedder=embedder,
        vector_store=store,
        generator=ExtractiveGenerator(),
    )
    return TestClient(create_app(orchestrator, IngestPipeline(HashingEmbedder(), store)))


def test_api_seed_ask_health() -> None:
    client = _client()

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["classifier_mode"] == "deterministic"
    assert health.json()["store_has_table"] is False

    seed_resp = client.post("/seed", json={"reference_date": "2024-04-15"})
    assert seed_resp.status_code == 200
    assert seed_resp.json()["inserted"] == 14

    ask_resp = client.post(
        "/ask",
        json={"question": "How much did I spend last month?", "reference_date": "2024-04-15"},
    )
    assert ask_resp.status_code == 200
    payload = ask_resp.json()
    assert payload["resolved_category"] == "transactional"
    assert "date >= '2024-03-01'" in payload["where_clause"]
    assert payload["chunk_count"] == 4
    assert payload["character_range"] == {"min": 0, "max": 140}
    assert len(payload["answer"]) <= 140


def test_api_ask_on_empty_store() -> None:
    client = _client()

    resp = client.post("/ask", json={"question": "What is CDI?", "reference_date": "2024-04-15"})

    assert resp.status_code == 200
    assert resp.json()["chunk_count"] == 0
    assert "enough information" in resp.json()["answer"]


def test_api_rejects_invalid_chunk_batch() -> None:
    client = _client()

    resp = client.post(
        "/chunks",
        json={
            "chunks": [
                {"id": "tx-1", "text": "Rent", "category": "transactional", "date": "2024-03-01", "source": "bank"},
                {"id": "tx-2", "text": "Rent", "category": "transactional", "date": "03/01/2024", "source": "bank"},
            ]
        },
    )

    assert resp.status_code == 422
    assert "tx-2" in resp.json()["detail"]
    assert client.get("/health").json()["store_has_table"] is False


def test_api_labels_fatal_stage_failures() -> None:
    client = _client(embedder=_FailingEmbedder())

    resp = client.post("/ask", json={"question": "What is CDI?"})

    assert resp.status_code == 502
    assert resp.json()["detail"].startswith("[embedding]")


def test_injected_ingest_pipeline_is_shared_with_default_orchestrator(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    store = InMemoryVectorStore()
    client = TestClient(create_app(ingest_pipeline=IngestPipeline(HashingEmbedder(), store)))

    inserted = client.post(
        "/chunks",
        json={
            "chunks": [
                {
                    "id": "edu-1",
                    "text": "What is CDI? The interbank deposit rate.",
                    "category": "educational",
                    "date": "2024-04-01",
                    "source": "handbook",
                }
            ]
        },
    )
    ask_resp = client.post("/ask", json={"question": "What is CDI?", "reference_date": "2024-04-15"})

    assert inserted.json() == {"inserted": 1}
    assert ask_resp.json()["chunk_count"] == 1
    assert ask_resp.json()["chunks"][0]["id"] == "edu-1"


def test_injected_orchestrator_is_shared_with_default_ingest_pipeline() -> None:
    store = InMemoryVectorStore()
    orchestrator = RetrievalOrchestrator(
        classifier=IntentClassifier(),
        embedder=HashingEmbedder(),
        vector_store=store,
        generator=ExtractiveGenerator(),
    )
    client = TestClient(create_app(orchestrator=orchestrator))

    client.post("/seed", json={"reference_date": "2024-04-15"})

    assert store.has_table is True
