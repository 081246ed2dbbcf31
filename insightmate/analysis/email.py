import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import ask_model, chunked, map_batches, percentage, truncate
from insightmate.analysis.results import EmailClassification, EmailPriorityResult
from insightmate.analysis.schemas import (
    EmailAnalysisResponse,
    EmailCount,
    EmailInsights,
    EmailPriorities,
    PrioritizedEmail,
)
from insightmate.config import settings
from insightmate.llm.client import InferenceClient
from insightmate.records.models import Email
from insightmate.records.service import get_records

logger = structlog.get_logger()

PRIORITIES = ("high", "medium", "low")
DEFAULT_PRIORITY = "low"
UNCLASSIFIED_REASON = "Not classified by the model"
BODY_PREVIEW_CHARS = 500
MAX_URGENT_SENDERS = 5

SYSTEM_PROMPT = "You are an email triage assistant. Respond with valid JSON only, no markdown, no explanation."


def _priority_prompt(batch: list[Email]) -> str:
    texts = "\n---\n".join(
        f"[{e.email_id}]\n[Subject] {e.subject}\n[Body] {(e.body or '')[:BODY_PREVIEW_CHARS]}"
        for e in batch
    )
    return f"""Analyze these emails and classify each by priority level: HIGH, MEDIUM, or LOW.

Priority guidelines:
- HIGH: urgent matters, deadlines, complaints, critical issues, executive communications, security alerts, payment problems
- MEDIUM: regular business updates, meeting requests, informational emails, routine communications
- LOW: newsletters, automated notifications, marketing, general announcements, promotional content

Return JSON with this exact structure, using the id shown in brackets as email_id:
{{
  "classifications": [
    {{"email_id": "email_123", "priority": "HIGH", "confidence": 0.92, "reason": "Brief explanation"}}
  ],
  "summary": "Overall email priority distribution and key observations"
}}

Emails to analyze:
{truncate(texts, settings.EMAIL_PROMPT_CHARS)}
"""


async def _classify_batch(inference: InferenceClient, batch: list[Email]) -> EmailPriorityResult:
    return await ask_model(
        inference,
        SYSTEM_PROMPT,
        _priority_prompt(batch),
        EmailPriorityResult,
        lambda: EmailPriorityResult(origin="fallback"),
    )


def merge_priorities(batch: list[Email], result: EmailPriorityResult) -> list[PrioritizedEmail]:
    by_id = {c.email_id: c for c in result.classifications}
    merged = []
    for email in batch:
        item = by_id.get(email.email_id) or EmailClassification(
            email_id=email.email_id,
            priority=DEFAULT_PRIORITY,
            confidence=0.0,
            reason=UNCLASSIFIED_REASON,
        )
        priority = (item.priority or "").strip().lower()
        merged.append(
            PrioritizedEmail(
                email_id=email.email_id,
                subject=email.subject,
                body=email.body,
                sender=email.sender,
                received_at=email.received_at,
                priority=priority if priority in PRIORITIES else DEFAULT_PRIORITY,
                confidence=item.confidence,
                reason=item.reason,
            )
        )
    return merged


def _empty_response() -> EmailAnalysisResponse:
    return EmailAnalysisResponse(
        date_range=EmailCount(email_count=0),
        priorities=EmailPriorities(high=[], medium=[], low=[]),
        summary="No emails found for the selected time period.",
        insights=EmailInsights(
            high_count=0, medium_count=0, low_count=0, high_percentage=0, urgent_senders=[]
        ),
    )


async def analyze_email_priority(db: AsyncSession, inference: InferenceClient) -> EmailAnalysisResponse:
    emails = await get_records(db, Email, limit=settings.ANALYSIS_ROW_LIMIT)
    if not emails:
        return _empty_response()

    batches = chunked(emails, settings.EMAIL_BATCH_SIZE)
    results = await map_batches(
        batches,
        lambda batch: _classify_batch(inference, batch),
        settings.ANALYSIS_CONCURRENCY,
    )

    grouped: dict[str, list[PrioritizedEmail]] = {p: [] for p in PRIORITIES}
    for batch, result in zip(batches, results):
        for item in merge_priorities(batch, result):
            grouped[item.priority].append(item)

    summaries = [r.summary.strip() for r in results if not r.is_fallback and r.summary.strip()]
    if summaries:
        summary = " ".join(summaries)
    elif all(r.is_fallback for r in results):
        summary = "Analysis completed but no significant classifications detected."
    else:
        summary = "Analysis complete."

    urgent_senders: list[str] = []
    for item in grouped["high"]:
        if item.sender not in urgent_senders:
            urgent_senders.append(item.sender)

    total = len(emails)
    logger.info(
        "email_analysis_complete",
        emails=total,
        high=len(grouped["high"]),
        fallback_batches=sum(1 for r in results if r.is_fallback),
    )
    return EmailAnalysisResponse(
        date_range=EmailCount(email_count=total),
        priorities=EmailPriorities(**grouped),
        summary=summary,
        insights=EmailInsights(
            high_count=len(grouped["high"]),
            medium_count=len(grouped["medium"]),
            low_count=len(grouped["low"]),
            high_percentage=percentage(len(grouped["high"]), total),
            urgent_senders=urgent_senders[:MAX_URGENT_SENDERS],
        ),
    )
