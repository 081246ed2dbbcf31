import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import ask_model, chunked, map_batches, truncate
from insightmate.analysis.results import AnnouncementResult
from insightmate.analysis.schemas import ChannelActivity, DiscordAnalysisResponse, MessageCount
from insightmate.config import settings
from insightmate.llm.client import InferenceClient
from insightmate.records.models import DiscordMessage
from insightmate.records.service import get_records

logger = structlog.get_logger()

MIN_ANNOUNCEMENT_CONFIDENCE = 0.7

SYSTEM_PROMPT = "You are a Discord announcement analyzer. Respond with valid JSON only, no markdown, no explanation."


def _announcement_prompt(batch: list[DiscordMessage]) -> str:
    texts = "\n---\n".join(
        f"[{m.channel_id}] ({m.message_id}) {m.author_id}: {m.content}" for m in batch
    )
    return f"""Analyze these Discord messages and identify important announcements and milestones.

Look for:
- New feature launches, product releases or changes
- Policy changes, events, major community updates
- Bug alerts, maintenance notices and security announcements
- Partnership announcements

Each message is shown as [channel_id] (message_id) author: content.
For each announcement give a short title, a 20-50 word description, the channel,
2-4 key points, the message_id and a confidence between 0 and 1.

Return JSON with this exact structure:
{{
  "announcements": [
    {{
      "title": "Brief title (5-10 words)",
      "description": "What was announced",
      "channel": "channel_id",
      "confidence": 0.95,
      "key_points": ["point1", "point2"],
      "message_id": "message_id"
    }}
  ],
  "summary": "Brief overall summary of announcements detected (10-20 words)"
}}

If no significant announcements are found, return an empty announcements array.

Messages to analyze:
{truncate(texts, settings.DISCORD_PROMPT_CHARS)}
"""


async def _detect_batch(inference: InferenceClient, batch: list[DiscordMessage]) -> AnnouncementResult:
    return await ask_model(
        inference,
        SYSTEM_PROMPT,
        _announcement_prompt(batch),
        AnnouncementResult,
        lambda: AnnouncementResult(origin="fallback"),
    )


def channel_activity(messages: list[DiscordMessage]) -> list[ChannelActivity]:
    """Per-channel message counts; ``messages`` must be newest first."""
    grouped: dict[str, list[DiscordMessage]] = {}
    for message in messages:
        grouped.setdefault(message.channel_id, []).append(message)
    return [
        ChannelActivity(channel_id=channel_id, count=len(msgs), last_activity=msgs[0].created_at)
        for channel_id, msgs in grouped.items()
    ]


async def analyze_discord(db: AsyncSession, inference: InferenceClient) -> DiscordAnalysisResponse:
    messages = await get_records(db, DiscordMessage, limit=settings.ANALYSIS_ROW_LIMIT)
    if not messages:
        return DiscordAnalysisResponse(
            date_range=MessageCount(message_count=0),
            channels=[],
            announcements=[],
            summary="No messages found for the selected time period.",
        )

    batches = chunked(messages, settings.DISCORD_BATCH_SIZE)
    results = await map_batches(
        batches,
        lambda batch: _detect_batch(inference, batch),
        settings.ANALYSIS_CONCURRENCY,
    )

    announcements = [
        a
        for result in results
        for a in result.announcements
        if a.confidence > MIN_ANNOUNCEMENT_CONFIDENCE
    ]

    summaries = [r.summary.strip() for r in results if not r.is_fallback and r.summary.strip()]
    if summaries:
        summary = " ".join(summaries)
    elif all(r.is_fallback for r in results):
        summary = "Analysis completed but no significant announcements detected."
    else:
        summary = "Analysis completed."

    logger.info(
        "discord_analysis_complete",
        messages=len(messages),
        announcements=len(announcements),
        fallback_batches=sum(1 for r in results if r.is_fallback),
    )
    return DiscordAnalysisResponse(
        date_range=MessageCount(message_count=len(messages)),
        channels=channel_activity(messages),
        announcements=announcements,
        summary=summary,
    )
