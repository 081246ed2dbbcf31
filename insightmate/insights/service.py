"""Unified cross-source view, its audit log, summary and CSV export."""

import csv
import io
import json
from collections import Counter
from typing import Callable, Iterable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import ask_model, truncate
from insightmate.analysis.results import ExecutiveSummaryResult
from insightmate.config import settings
from insightmate.insights.models import InsightEvent
from insightmate.insights.schemas import InsightsSummaryResponse, KeyMetrics, UnifiedEvent
from insightmate.llm.client import InferenceClient
from insightmate.models.base import as_utc, utcnow
from insightmate.records.models import SOURCE_MODELS, SignalRecord, Source
from insightmate.records.service import get_records

logger = structlog.get_logger()

# (content, status, user_id, extras) for one row of each source
EventFields = tuple[str, str, str, dict]

EVENT_FIELDS: dict[Source, Callable[[SignalRecord], EventFields]] = {
    Source.TICKETS: lambda r: (
        r.content, r.status, r.user_id, {"status": r.status, "user_id": r.user_id},
    ),
    Source.DISCORD: lambda r: (
        r.content, "", r.author_id, {"channel_id": r.channel_id, "author_id": r.author_id},
    ),
    Source.GITHUB: lambda r: (
        r.body, r.state, "", {"repo": r.repo, "title": r.title, "state": r.state},
    ),
    Source.EMAIL: lambda r: (
        r.body, "", r.sender, {"subject": r.subject, "sender": r.sender},
    ),
    Source.TWITTER: lambda r: (
        r.content, "", r.author, {"author": r.author},
    ),
    Source.FORUM: lambda r: (
        r.content, "", r.author, {"forum": r.forum, "title": r.title, "author": r.author},
    ),
}

PLATFORM_NAMES = {
    Source.TICKETS: "customer_support",
    Source.DISCORD: "discord",
    Source.GITHUB: "github",
    Source.EMAIL: "email",
    Source.TWITTER: "twitter",
    Source.FORUM: "forums",
}

ITEM_TYPES = {
    Source.TICKETS: "support_ticket",
    Source.DISCORD: "discord_message",
    Source.GITHUB: "github_issue",
    Source.EMAIL: "email",
    Source.TWITTER: "twitter_post",
    Source.FORUM: "forum_post",
}

CSV_HEADERS = ("platform", "type", "status", "created_at", "title", "content")
CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")


def to_event(record: SignalRecord) -> UnifiedEvent:
    content, status, user_id, extras = EVENT_FIELDS[record.source](record)
    return UnifiedEvent(
        source=record.source.value,
        id=record.external_id,
        content=content or "",
        status=status or "",
        user_id=user_id or "",
        created_at=as_utc(record.created_at).isoformat(),
        extras=json.dumps(extras),
    )


async def collect_records(db: AsyncSession, limit: int | None = None) -> list[SignalRecord]:
    records: list[SignalRecord] = []
    for model in SOURCE_MODELS.values():
        records.extend(await get_records(db, model, limit=limit))
    return records


async def build_unified_view(db: AsyncSession) -> list[UnifiedEvent]:
    """Map every stored record onto the common event shape and log a copy of each."""
    records = await collect_records(db)
    events = [to_event(r) for r in records]

    db.add_all(
        InsightEvent(
            source=event.source,
            source_id=event.id,
            content=event.content,
            status=event.status,
            user_id=event.user_id,
            created_at=as_utc(record.created_at),
            extras=json.loads(event.extras),
        )
        for record, event in zip(records, events)
    )
    await db.commit()

    logger.info("insights_events_persisted", events=len(events))
    return events


def _summary_prompt(records: list[SignalRecord], platforms: Counter, statuses: Counter) -> str:
    platform_text = "\n".join(f"- {name}: {count}" for name, count in platforms.most_common())
    status_text = ", ".join(f"{name}: {count}" for name, count in statuses.most_common())
    samples = "\n".join(
        f"[{PLATFORM_NAMES[r.source]}] {EVENT_FIELDS[r.source](r)[0]}" for r in records
    )
    return f"""Write a short executive summary (3-4 sentences) of recent customer and community activity.

## Volume by platform
{platform_text}

## Status breakdown
{status_text}

## Recent items
{truncate(samples, settings.INSIGHTS_PROMPT_CHARS)}

Respond with valid JSON only: {{"summary": "..."}}
"""


def fallback_summary(total: int, platforms: Counter) -> str:
    if total == 0:
        return "No recent activity recorded across the monitored platforms."
    busiest, count = platforms.most_common(1)[0]
    return (
        f"{total} recent items across {len(platforms)} platforms; "
        f"{busiest} is the most active with {count} items."
    )


async def build_summary(db: AsyncSession, inference: InferenceClient) -> InsightsSummaryResponse:
    records = await collect_records(db, limit=settings.INSIGHTS_RECENT_LIMIT)
    platforms = Counter(PLATFORM_NAMES[r.source] for r in records)
    statuses = Counter(EVENT_FIELDS[r.source](r)[1] or "unknown" for r in records)

    if records:
        result = await ask_model(
            inference,
            "You are a customer insights analyst. Respond with valid JSON only.",
            _summary_prompt(records, platforms, statuses),
            ExecutiveSummaryResult,
            lambda: ExecutiveSummaryResult(
                origin="fallback", summary=fallback_summary(len(records), platforms)
            ),
        )
    else:
        result = ExecutiveSummaryResult(origin="fallback", summary=fallback_summary(0, platforms))

    return InsightsSummaryResponse(
        executive_summary=result.summary,
        key_metrics=KeyMetrics(
            total_items=len(records),
            platform_breakdown=dict(platforms),
            status_breakdown=dict(statuses),
        ),
        platforms_analyzed=list(PLATFORM_NAMES.values()),
        generated_at=utcnow().isoformat(),
        origin=result.origin,
    )


def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def _title(record: SignalRecord) -> str:
    if record.source is Source.EMAIL:
        return record.subject
    return getattr(record, "title", "") or ""


def write_csv(records: Iterable[SignalRecord]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADERS)
    for record in records:
        content, status, _, _ = EVENT_FIELDS[record.source](record)
        writer.writerow([
            _csv_safe(value)
            for value in (
                PLATFORM_NAMES[record.source],
                ITEM_TYPES[record.source],
                status or "",
                as_utc(record.created_at).isoformat(),
                _title(record),
                content or "",
            )
        ])
    return output.getvalue()


async def export_csv(db: AsyncSession) -> str:
    return write_csv(await collect_records(db))
