import pytest
from httpx import AsyncClient

from insightmate.config import settings

EMAILS = [
    ("e-1", "Invoice overdue", "Your invoice is overdue, please pay"),
    ("e-2", "Invoice reminder", "Reminder: invoice payment due"),
    ("e-3", "Zzz", "zzz zzz zzz"),
]


async def _seed(client: AsyncClient):
    for email_id, subject, body in EMAILS:
        response = await client.post("/api/collect/email", json={
            "email_id": email_id, "subject": subject, "body": body, "sender": "a@example.com",
        })
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_similar_for_unindexed_email(client: AsyncClient):
    await _seed(client)
    response = await client.get("/api/email/similar/e-1")
    assert response.status_code == 200
    assert response.json() == {"similar": []}


@pytest.mark.asyncio
async def test_index_all(client: AsyncClient, inference, vector_index):
    await _seed(client)

    response = await client.post("/api/email/index-all")
    assert response.status_code == 200
    assert response.json() == {"success": True, "indexed": 3, "errors": 0}
    assert set(vector_index.vectors) == {"e-1", "e-2", "e-3"}
    assert "Invoice overdue Your invoice is overdue, please pay" in inference.embedded

    emails = (await client.get("/api/email")).json()
    assert {e["email_id"]: e["vector_id"] for e in emails} == {"e-1": "e-1", "e-2": "e-2", "e-3": "e-3"}

    # already indexed emails are skipped
    again = (await client.post("/api/email/index-all")).json()
    assert again == {"success": True, "indexed": 0, "errors": 0}


@pytest.mark.asyncio
async def test_index_all_counts_failures(client: AsyncClient, inference, vector_index):
    await _seed(client)
    inference.embed_error = RuntimeError("embedding model unavailable")

    data = (await client.post("/api/email/index-all")).json()
    assert data == {"success": False, "indexed": 0, "errors": 3}
    assert vector_index.vectors == {}
    emails = (await client.get("/api/email")).json()
    assert all(e["vector_id"] is None for e in emails)


@pytest.mark.asyncio
async def test_similar_emails(client: AsyncClient):
    await _seed(client)
    await client.post("/api/email/index-all")

    data = (await client.get("/api/email/similar/e-1")).json()
    ids = [s["email_id"] for s in data["similar"]]
    assert "e-1" not in ids
    assert ids[0] == "e-2"
    first = data["similar"][0]
    assert first["subject"] == "Invoice reminder"
    assert first["sender"] == "a@example.com"
    assert first["received_at"] is not None
    scores = [s["similarity"] for s in data["similar"]]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_similar_emails_respects_top_k(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "SIMILAR_TOP_K", 2)
    await _seed(client)
    await client.post("/api/email/index-all")

    data = (await client.get("/api/email/similar/e-1")).json()
    assert [s["email_id"] for s in data["similar"]] == ["e-2"]


@pytest.mark.asyncio
async def test_similar_emails_unknown_neighbour(client: AsyncClient, vector_index):
    await _seed(client)
    await vector_index.upsert("e-1", [1.0, 0.0])
    await vector_index.upsert("ghost", [1.0, 0.1])

    data = (await client.get("/api/email/similar/e-1")).json()
    assert data["similar"][0]["email_id"] == "ghost"
    assert data["similar"][0]["subject"] == ""
    assert data["similar"][0]["received_at"] is None


@pytest.mark.asyncio
async def test_similar_emails_backend_error(client: AsyncClient, vector_index):
    await vector_index.upsert("e-1", [1.0, 0.0])
    vector_index.error = ConnectionError("chroma unreachable")

    response = await client.get("/api/email/similar/e-1")
    assert response.status_code == 200
    assert response.json() == {"similar": []}
