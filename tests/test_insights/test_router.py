import csv
import io
import json

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from insightmate.insights.models import InsightEvent


async def _seed(client: AsyncClient):
    payloads = [
        ("tickets", {"ticket_id": "T-1", "content": "Refund please", "status": "open", "user_id": "u-1",
                     "created_at": "2026-05-01T09:00:00Z"}),
        ("discord", {"message_id": "m-1", "channel_id": "general", "content": "hello", "author_id": "a-1"}),
        ("github", {"issue_id": 7, "repo": "acme/web", "title": "=SUM(A1)", "body": "Crash", "state": "closed"}),
        ("email", {"email_id": "e-1", "subject": "Hi", "body": "Body", "sender": "s@example.com"}),
        ("twitter", {"tweet_id": "tw-1", "content": "nice", "author": "@a"}),
        ("forum", {"post_id": "p-1", "forum": "Help", "title": "Q", "content": "How?", "author": "jo"}),
    ]
    for source, payload in payloads:
        response = await client.post(f"/api/collect/{source}", json=payload)
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_unified_insights(client: AsyncClient, db_session):
    await _seed(client)

    response = await client.get("/api/insights")
    assert response.status_code == 200
    data = response.json()
    assert data["total_events"] == 6
    assert data["persisted"] is True

    events = {e["source"]: e for e in data["events"]}
    assert set(events) == {"tickets", "discord", "github", "email", "twitter", "forum"}

    ticket = events["tickets"]
    assert ticket["id"] == "T-1"
    assert ticket["status"] == "open"
    assert ticket["user_id"] == "u-1"
    assert ticket["created_at"].startswith("2026-05-01T09:00:00")
    assert json.loads(ticket["extras"]) == {"status": "open", "user_id": "u-1"}

    github = events["github"]
    assert github["id"] == "7"
    assert github["content"] == "Crash"
    assert github["status"] == "closed"
    assert github["user_id"] == ""
    assert json.loads(github["extras"]) == {"repo": "acme/web", "title": "=SUM(A1)", "state": "closed"}

    assert events["email"]["user_id"] == "s@example.com"
    assert json.loads(events["forum"]["extras"]) == {"forum": "Help", "title": "Q", "author": "jo"}

    persisted = await db_session.scalar(select(func.count()).select_from(InsightEvent))
    assert persisted == 6

    # each call appends another copy
    await client.get("/api/insights")
    assert await db_session.scalar(select(func.count()).select_from(InsightEvent)) == 12


@pytest.mark.asyncio
async def test_unified_insights_empty(client: AsyncClient):
    data = (await client.get("/api/insights")).json()
    assert data == {"events": [], "total_events": 0, "persisted": True}


@pytest.mark.asyncio
async def test_daily_counts_newest_first(client: AsyncClient):
    for i, at in enumerate(["2026-01-01T10:00:00Z", "2026-01-03T10:00:00Z", "2026-01-02T10:00:00Z"]):
        await client.post("/api/collect/forum", json={
            "post_id": f"p-{i}", "forum": "Help", "title": "t", "content": "c", "author": "jo", "created_at": at,
        })
    rows = (await client.get("/api/insights/daily")).json()
    assert [r["date"] for r in rows] == ["2026-01-03", "2026-01-02", "2026-01-01"]
    assert all(r["total_forum"] == 1 for r in rows)


@pytest.mark.asyncio
async def test_summary_with_model(client: AsyncClient, inference):
    inference.reply = '{"summary": "Quiet week with one refund request."}'
    await _seed(client)

    data = (await client.get("/api/insights/summary")).json()
    assert data["executiveSummary"] == "Quiet week with one refund request."
    assert data["origin"] == "model"
    metrics = data["keyMetrics"]
    assert metrics["totalItems"] == 6
    assert metrics["platformBreakdown"]["customer_support"] == 1
    assert metrics["platformBreakdown"]["forums"] == 1
    assert metrics["statusBreakdown"] == {"open": 1, "closed": 1, "unknown": 4}
    assert data["platformsAnalyzed"] == ["customer_support", "discord", "github", "email", "twitter", "forums"]
    assert "generatedAt" in data


@pytest.mark.asyncio
async def test_summary_fallback(client: AsyncClient, inference):
    inference.error = RuntimeError("no key")
    await client.post("/api/collect/tickets", json={"ticket_id": "T-1", "content": "a", "status": "open", "user_id": "u"})
    await client.post("/api/collect/tickets", json={"ticket_id": "T-2", "content": "b", "status": "open", "user_id": "u"})
    await client.post("/api/collect/twitter", json={"tweet_id": "tw-1", "content": "c", "author": "@a"})

    data = (await client.get("/api/insights/summary")).json()
    assert data["origin"] == "fallback"
    assert data["executiveSummary"] == (
        "3 recent items across 2 platforms; customer_support is the most active with 2 items."
    )


@pytest.mark.asyncio
async def test_summary_empty(client: AsyncClient, inference):
    data = (await client.get("/api/insights/summary")).json()
    assert data["origin"] == "fallback"
    assert data["keyMetrics"]["totalItems"] == 0
    assert inference.prompts == []


@pytest.mark.asyncio
async def test_export_csv(client: AsyncClient):
    await _seed(client)

    response = await client.get("/api/insights/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]

    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["platform", "type", "status", "created_at", "title", "content"]
    body = {row[1]: row for row in rows[1:]}
    assert len(body) == 6
    assert body["support_ticket"][0] == "customer_support"
    assert body["support_ticket"][2] == "open"
    assert body["github_issue"][4] == "'=SUM(A1)"
    assert body["email"][4] == "Hi"
    assert body["forum_post"][0] == "forums"
