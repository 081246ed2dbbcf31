import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import ask_model, map_batches, truncate
from insightmate.analysis.results import ForumSummaryResult
from insightmate.analysis.schemas import ForumAnalysisResponse, ForumGroup
from insightmate.config import settings
from insightmate.llm.client import InferenceClient
from insightmate.records.models import ForumPost
from insightmate.records.schemas import ForumPostResponse
from insightmate.records.service import get_records

logger = structlog.get_logger()

DEFAULT_FORUM = "General"
POSTS_PER_FORUM = 10
SUMMARY_UNAVAILABLE = "Unable to generate summary at this time."


def group_by_forum(posts: list[ForumPost]) -> dict[str, list[ForumPost]]:
    groups: dict[str, list[ForumPost]] = {}
    for post in posts:
        groups.setdefault((post.forum or "").strip() or DEFAULT_FORUM, []).append(post)
    return groups


def _summary_prompt(forum: str, posts: list[ForumPost]) -> str:
    texts = "\n---\n".join(
        f"[{i}] {p.title}: {p.content}"
        for i, p in enumerate(posts[: settings.FORUM_SUMMARY_POSTS])
    )
    return f"""You are analyzing forum posts from the "{forum}" forum section.

Summarize what people are discussing in 4-5 lines, covering:
1. Main topics and themes
2. Key concerns, questions, or highlights
3. Overall sentiment and nature of conversations

Also identify the top 5 specific topics (1-2 words each).

Posts to analyze:
{truncate(texts, settings.FORUM_PROMPT_CHARS)}

Respond with valid JSON only (no markdown, no explanation):
{{
  "summary": "A 4-5 line summary of the discussion in this forum section...",
  "topics": ["Topic1", "Topic2", "Topic3", "Topic4", "Topic5"]
}}
"""


async def _summarize(inference: InferenceClient, forum: str, posts: list[ForumPost]) -> ForumGroup:
    result = await ask_model(
        inference,
        "You are a forum analysis assistant. Provide detailed, comprehensive summaries. Respond with valid JSON only.",
        _summary_prompt(forum, posts),
        ForumSummaryResult,
        lambda: ForumSummaryResult(origin="fallback", summary=SUMMARY_UNAVAILABLE),
    )
    return ForumGroup(
        forum=forum,
        post_count=len(posts),
        summary=result.summary.strip() or SUMMARY_UNAVAILABLE,
        top_topics=result.topics,
        posts=[ForumPostResponse.model_validate(p) for p in posts[:POSTS_PER_FORUM]],
    )


async def analyze_forums(db: AsyncSession, inference: InferenceClient) -> ForumAnalysisResponse:
    posts = await get_records(db, ForumPost)
    if not posts:
        return ForumAnalysisResponse(total_posts=0, forums=[])

    groups = group_by_forum(posts)
    forums = await map_batches(
        list(groups.items()),
        lambda item: _summarize(inference, *item),
        settings.ANALYSIS_CONCURRENCY,
    )

    logger.info("forum_analysis_complete", posts=len(posts), forums=len(forums))
    return ForumAnalysisResponse(
        total_posts=len(posts),
        forums=sorted(forums, key=lambda f: f.post_count, reverse=True),
    )
