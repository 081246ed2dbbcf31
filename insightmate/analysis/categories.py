"""Product-area categorization shared by support tickets and GitHub issues."""

from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import ask_model, chunked, map_batches, percentage, truncate
from insightmate.analysis.results import AdviceResult, CategorizationResult
from insightmate.analysis.schemas import CategoryAnalysisResponse, CategorySummary, DateRange
from insightmate.analysis.trends import category_trend
from insightmate.config import settings
from insightmate.llm.client import InferenceClient
from insightmate.models.base import as_utc
from insightmate.records.models import GithubIssue, SignalRecord, SupportTicket
from insightmate.records.service import get_records

logger = structlog.get_logger()

DEFAULT_CATEGORY = "Uncategorized"
MAX_EXAMPLES = 3
# Keys every timeline point already carries
TIMELINE_KEYS = frozenset({"date", "total"})


@dataclass(frozen=True)
class CategorySource:
    """Everything that differs between the ticket and issue analyses."""

    model: type[SignalRecord]
    noun: str
    focus: str
    category_examples: str
    categorizer_role: str
    advisor_role: str
    empty_advice: str
    fallback_advice: str
    render: Callable[[SignalRecord], str]
    example: Callable[[SignalRecord], dict]
    # None means every category goes into the advice prompt
    advice_categories: int | None = None
    advice_trends: int | None = None


TICKETS = CategorySource(
    model=SupportTicket,
    noun="tickets",
    focus="product areas/domains",
    category_examples='"Mobile App", "Billing", "API", "Dashboard", "Authentication", "Notifications"',
    categorizer_role="You are a product analytics assistant.",
    advisor_role="You are a product management advisor.",
    empty_advice="No tickets to analyze for the selected time period.",
    fallback_advice=(
        "Focus on addressing the highest-volume categories first. "
        "Consider user feedback patterns and allocate resources accordingly."
    ),
    render=lambda t: f"[{t.ticket_id}] {t.content}",
    example=lambda t: {"ticket_id": t.ticket_id, "content": t.content},
)

GITHUB = CategorySource(
    model=GithubIssue,
    noun="issues",
    focus="application areas/components",
    category_examples=(
        '"Frontend/UI", "API/Backend", "Database", "Authentication", "Mobile", '
        '"Testing", "Documentation", "Performance", "Security"'
    ),
    categorizer_role="You are a software engineering analyst.",
    advisor_role="You are a software engineering advisor.",
    empty_advice="No GitHub issues found for the selected time period.",
    fallback_advice=(
        "Focus on addressing the highest-volume categories first. "
        "Consider allocating engineering resources accordingly."
    ),
    render=lambda i: f"[{i.issue_id}] {i.title}: {i.body or ''}",
    example=lambda i: {"issue_id": i.issue_id, "title": i.title, "state": i.state},
    advice_categories=5,
    advice_trends=3,
)


def _categorization_prompt(source: CategorySource, batch: list[SignalRecord]) -> str:
    texts = "\n---\n".join(source.render(row) for row in batch)
    return f"""Analyze these {len(batch)} {source.noun} and discover what {source.focus} they relate to.

IMPORTANT:
1. Let the data guide you - discover 4-8 natural categories based on the actual content
2. Categories should be specific (e.g., {source.category_examples})
3. Avoid vague categories like "General" or "Other"
4. Assign every item to exactly one category, using the id shown in brackets

Return a valid JSON object with this structure:
{{
  "categories": ["Category1", "Category2", ...],
  "items": [{{"id": "<id>", "category": "Category1", "confidence": 0.9}}, ...]
}}

{source.noun.capitalize()} to analyze:
{truncate(texts, settings.CATEGORY_PROMPT_CHARS)}
"""


async def _categorize_batch(
    inference: InferenceClient,
    source: CategorySource,
    batch: list[SignalRecord],
) -> CategorizationResult:
    return await ask_model(
        inference,
        f"{source.categorizer_role} Respond with valid JSON only, no markdown, no explanation.",
        _categorization_prompt(source, batch),
        CategorizationResult,
        lambda: CategorizationResult(origin="fallback"),
        max_tokens=2048,
    )


def merge_categories(
    batch: list[SignalRecord],
    result: CategorizationResult,
) -> list[tuple[SignalRecord, str]]:
    """Pair every row of the batch with its category; omitted rows get the default.

    Names that clash with the timeline keys are suffixed so a point never
    loses its date or total.
    """
    by_id = {item.id: item for item in result.items}
    assigned = []
    for row in batch:
        item = by_id.get(row.external_id)
        category = (item.category or "").strip() if item else ""
        if category in TIMELINE_KEYS:
            category = f"{category} (category)"
        assigned.append((row, category or DEFAULT_CATEGORY))
    return assigned


def _advice_prompt(source: CategorySource, total: int, categories: list[CategorySummary]) -> str:
    counted = categories[: source.advice_categories] if source.advice_categories else categories
    trended = categories[: source.advice_trends] if source.advice_trends else categories
    counts_text = "\n".join(
        f"{i}. {c.name}: {c.count} {source.noun} ({c.percentage}%)"
        for i, c in enumerate(counted, start=1)
    )
    trend_text = ", ".join(f"{c.name}: {c.trend}" for c in trended)
    return f"""Analyze this {source.noun} data and provide actionable recommendations.

## Data
Total {source.noun}: {total}
{counts_text}

Trends: {trend_text}

Provide:
1. The top 3 areas needing the most urgent attention (with reasoning)
2. 3-5 specific, actionable recommendations
3. Quick wins vs. long-term investments

Keep it concise and professional. Format as JSON:
{{
  "priorityAreas": ["Area 1", "Area 2", "Area 3"],
  "advice": "Your comprehensive advice paragraph here..."
}}
"""


def _empty_response(source: CategorySource) -> CategoryAnalysisResponse:
    now = datetime.now(timezone.utc)
    return CategoryAnalysisResponse(
        date_range=DateRange(start=(now - timedelta(days=365)).isoformat(), end=now.isoformat()),
        categories=[],
        timeline=[],
        advice=source.empty_advice,
        priority_areas=[],
    )


def _day_start(day: str) -> str:
    return datetime.fromisoformat(day).replace(tzinfo=timezone.utc).isoformat()


async def analyze_categories(
    db: AsyncSession,
    inference: InferenceClient,
    source: CategorySource,
) -> CategoryAnalysisResponse:
    rows = await get_records(db, source.model, limit=settings.ANALYSIS_ROW_LIMIT)
    if not rows:
        return _empty_response(source)

    batches = chunked(rows, settings.CATEGORY_BATCH_SIZE)
    results = await map_batches(
        batches,
        lambda batch: _categorize_batch(inference, source, batch),
        settings.ANALYSIS_CONCURRENCY,
    )

    counts: Counter[str] = Counter()
    examples: dict[str, list[dict]] = defaultdict(list)
    by_day: dict[str, Counter[str]] = defaultdict(Counter)
    for batch, result in zip(batches, results):
        for row, category in merge_categories(batch, result):
            counts[category] += 1
            if len(examples[category]) < MAX_EXAMPLES:
                examples[category].append(source.example(row))
            by_day[as_utc(row.created_at).date().isoformat()][category] += 1

    dates = sorted(by_day)
    total = len(rows)
    categories = sorted(
        (
            CategorySummary(
                name=name,
                count=count,
                percentage=percentage(count, total),
                trend=category_trend(name, by_day, dates),
                examples=examples[name],
            )
            for name, count in counts.items()
        ),
        key=lambda c: c.count,
        reverse=True,
    )

    timeline = []
    for day in dates:
        point: dict[str, str | int] = {"date": day, "total": sum(by_day[day].values())}
        for category in categories:
            point[category.name] = by_day[day].get(category.name, 0)
        timeline.append(point)

    advice = await ask_model(
        inference,
        f"{source.advisor_role} Respond with valid JSON only.",
        _advice_prompt(source, total, categories),
        AdviceResult,
        lambda: AdviceResult(
            origin="fallback",
            priority_areas=[c.name for c in categories[:3]],
            advice=source.fallback_advice,
        ),
    )

    logger.info(
        "category_analysis_complete",
        source=source.model.source.value,
        rows=total,
        categories=len(categories),
        fallback_batches=sum(1 for r in results if r.is_fallback),
    )
    return CategoryAnalysisResponse(
        date_range=DateRange(start=_day_start(dates[0]), end=_day_start(dates[-1])),
        categories=categories,
        timeline=timeline,
        advice=advice.advice,
        priority_areas=advice.priority_areas,
    )
