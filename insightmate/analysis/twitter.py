"""Twitter sentiment scoring and feature extraction."""

import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.pipeline import (
    ask_model,
    chunked,
    map_batches,
    percentage,
    round_half_up,
    truncate,
)
from insightmate.analysis.results import SentimentScoresResult, TweetSentimentResult
from insightmate.analysis.schemas import (
    AuthorAnalysis,
    AuthorStats,
    ContentAnalysis,
    ContentTypes,
    HashtagFrequency,
    OverallSentimentResponse,
    SentimentDistribution,
    SentimentOverview,
    TemporalAnalysis,
    TweetScore,
    TweetWindow,
    TwitterFeatureResponse,
    WordFrequency,
)
from insightmate.analysis.trends import half_split_trend, score_trend
from insightmate.config import settings
from insightmate.llm.client import InferenceClient
from insightmate.models.base import as_utc, utcnow
from insightmate.records.models import TwitterPost
from insightmate.records.service import get_records, get_records_since

logger = structlog.get_logger()

SENTIMENTS = ("positive", "negative", "neutral")
TREND_MIN_TWEETS = 10
TOP_WORDS = 10
TOP_HASHTAGS = 10
TOP_AUTHORS = 5
TOP_PERIODS = 3

STOP_WORDS = frozenset({
    "that", "this", "with", "from", "they", "have", "been", "will", "their",
    "what", "there", "when", "would", "could", "should", "about", "which",
    "after", "before", "while", "where", "here", "then", "than", "them",
    "these", "those", "though",
})
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_NON_WORD = re.compile(r"[^\w\s]")
_HASHTAG = re.compile(r"#\w+")


@dataclass
class ScoredTweet:
    tweet_id: str
    content: str
    author: str
    created_at: datetime
    sentiment: str = "neutral"
    score: float = 0.0


def _clamp(score: float) -> float:
    return max(-1.0, min(1.0, score))


# -- per-tweet sentiment ------------------------------------------------------

def _sentiment_prompt(batch: list[TwitterPost]) -> str:
    texts = "\n\n".join(f"Tweet {i}: {t.content}" for i, t in enumerate(batch, start=1))
    return f"""Analyze the sentiment of these Twitter posts and classify each as POSITIVE, NEGATIVE, or NEUTRAL.
Also provide a sentiment score from -1 (very negative) to +1 (very positive).

Return JSON with this exact structure:
{{
  "analyses": [
    {{"tweet_index": 1, "sentiment": "POSITIVE", "sentiment_score": 0.85, "reason": "Brief explanation"}}
  ]
}}

Tweets to analyze:
{truncate(texts, settings.TWEET_PROMPT_CHARS)}
"""


async def _score_batch(inference: InferenceClient, batch: list[TwitterPost]) -> TweetSentimentResult:
    return await ask_model(
        inference,
        "You are a sentiment analysis expert. Analyze Twitter posts and respond with valid JSON only, no markdown, no explanation.",
        _sentiment_prompt(batch),
        TweetSentimentResult,
        lambda: TweetSentimentResult(origin="fallback"),
        max_tokens=2048,
    )


def merge_sentiments(batch: list[TwitterPost], result: TweetSentimentResult) -> list[ScoredTweet]:
    """Align 1-based ``tweet_index`` answers with the batch; gaps stay neutral."""
    scored = [
        ScoredTweet(
            tweet_id=t.tweet_id,
            content=t.content,
            author=t.author,
            created_at=as_utc(t.created_at),
        )
        for t in batch
    ]
    for analysis in result.analyses:
        position = analysis.tweet_index - 1
        if not 0 <= position < len(scored):
            continue
        sentiment = (analysis.sentiment or "").strip().lower()
        scored[position].sentiment = sentiment if sentiment in SENTIMENTS else "neutral"
        scored[position].score = _clamp(analysis.sentiment_score)
    return scored


# -- feature extraction -------------------------------------------------------

def _content_type(content: str) -> str:
    if "?" in content:
        return "questions"
    if any(word in content for word in ("announcing", "launch", "new")):
        return "announcements"
    if any(word in content for word in ("issue", "problem", "bug")):
        return "complaints"
    if any(word in content for word in ("great", "awesome", "amazing")):
        return "praise"
    return "general"


def _word_sentiment(average: float) -> str:
    if average > 0.1:
        return "positive"
    if average < -0.1:
        return "negative"
    return "neutral"


def _activity_trend(tweets: list[ScoredTweet]) -> str:
    """Compare tweet counts in the first and second half of the covered time span."""
    if len(tweets) <= TREND_MIN_TWEETS:
        return "stable"
    start = min(t.created_at for t in tweets)
    end = max(t.created_at for t in tweets)
    if start == end:
        return "stable"
    midpoint = start + (end - start) / 2
    first = sum(1 for t in tweets if t.created_at < midpoint)
    return half_split_trend(first, len(tweets) - first)


def _top(counter: Counter, n: int) -> list[tuple[str, int]]:
    # Counter.most_common keeps first-seen order for ties
    return counter.most_common(n)


def extract_features(tweets: list[ScoredTweet]) -> dict:
    """Aggregate scored tweets (oldest first) into the feature sections."""
    total = len(tweets)
    distribution = Counter({s: 0 for s in SENTIMENTS})
    for tweet in tweets:
        distribution[tweet.sentiment] += 1
    average = sum(t.score for t in tweets) / total

    sentiment_trend = "stable"
    if total > TREND_MIN_TWEETS:
        mid = total // 2
        first, second = tweets[:mid], tweets[mid:]
        sentiment_trend = score_trend(
            sum(t.score for t in first) / len(first),
            sum(t.score for t in second) / len(second),
        )

    word_counts: Counter[str] = Counter()
    word_scores: dict[str, float] = {}
    hashtags: Counter[str] = Counter()
    content_types = Counter({kind: 0 for kind in ContentTypes.model_fields})
    total_length = links = mentions = 0
    for tweet in tweets:
        content = tweet.content.lower()
        total_length += len(content)
        if "http" in content or "www." in content:
            links += 1
        if "@" in content:
            mentions += 1
        content_types[_content_type(content)] += 1

        for word in _NON_WORD.sub(" ", content).split():
            if len(word) > 3 and word not in STOP_WORDS:
                word_counts[word] += 1
                word_scores[word] = word_scores.get(word, 0.0) + tweet.score
        hashtags.update(_HASHTAG.findall(content))

    authors: dict[str, list[float]] = {}
    hours: Counter[str] = Counter()
    days: Counter[str] = Counter()
    for tweet in tweets:
        authors.setdefault(tweet.author, []).append(tweet.score)
        hours[f"{tweet.created_at.hour}:00"] += 1
        days[WEEKDAYS[tweet.created_at.weekday()]] += 1

    top_authors = sorted(authors.items(), key=lambda item: len(item[1]), reverse=True)[:TOP_AUTHORS]
    diversity = len(authors) / total
    top_hashtags = [HashtagFrequency(hashtag=h, frequency=n) for h, n in _top(hashtags, TOP_HASHTAGS)]
    activity_trend = _activity_trend(tweets)

    insights = []
    if average > 0.2:
        insights.append("Overall positive sentiment in Twitter discussions")
    elif average < -0.2:
        insights.append("Overall negative sentiment detected")
    else:
        insights.append("Neutral sentiment in Twitter conversations")
    if content_types["questions"] > content_types["general"] * 0.5:
        insights.append("High engagement with many questions being asked")
    if diversity < 0.3:
        insights.append("Limited author diversity - mostly from same users")
    if top_hashtags:
        insights.append("Popular hashtags: " + ", ".join(h.hashtag for h in top_hashtags[:3]))
    if activity_trend == "increasing":
        insights.append("Twitter activity is increasing over time")

    return {
        "sentiment": SentimentOverview(
            distribution=SentimentDistribution(**distribution),
            average_score=round_half_up(average, 2),
            trend=sentiment_trend,
        ),
        "content_analysis": ContentAnalysis(
            top_words=[
                WordFrequency(word=w, frequency=n, sentiment=_word_sentiment(word_scores[w] / n))
                for w, n in _top(word_counts, TOP_WORDS)
            ],
            top_hashtags=top_hashtags,
            content_types=ContentTypes(**content_types),
            avg_length=round_half_up(total_length / total),
            contains_links=percentage(links, total),
            contains_mentions=percentage(mentions, total),
        ),
        "author_analysis": AuthorAnalysis(
            total_authors=len(authors),
            top_authors=[
                AuthorStats(author=a, tweet_count=len(s), avg_sentiment=sum(s) / len(s))
                for a, s in top_authors
            ],
            author_diversity=round_half_up(diversity, 2),
        ),
        "temporal_analysis": TemporalAnalysis(
            peak_hours=[h for h, _ in _top(hours, TOP_PERIODS)],
            peak_days=[d for d, _ in _top(days, TOP_PERIODS)],
            activity_trend=activity_trend,
        ),
        "insights": insights,
    }


def _empty_features(days: int) -> TwitterFeatureResponse:
    return TwitterFeatureResponse(
        date_range=TweetWindow(days=days, total_tweets=0),
        sentiment=SentimentOverview(
            distribution=SentimentDistribution(positive=0, negative=0, neutral=0),
            average_score=0,
            trend="insufficient_data",
        ),
        content_analysis=ContentAnalysis(
            top_words=[],
            top_hashtags=[],
            content_types=ContentTypes(questions=0, announcements=0, complaints=0, praise=0, general=0),
            avg_length=0,
            contains_links=0,
            contains_mentions=0,
        ),
        author_analysis=AuthorAnalysis(total_authors=0, top_authors=[], author_diversity=0),
        temporal_analysis=TemporalAnalysis(peak_hours=[], peak_days=[], activity_trend="insufficient_data"),
        insights=["No tweets found for the selected time period"],
    )


async def analyze_twitter_features(
    db: AsyncSession,
    inference: InferenceClient,
    days: int = 90,
) -> TwitterFeatureResponse:
    tweets = await get_records_since(db, TwitterPost, utcnow() - timedelta(days=days))
    if not tweets:
        return _empty_features(days)

    batches = chunked(tweets, settings.TWEET_BATCH_SIZE)
    results = await map_batches(
        batches,
        lambda batch: _score_batch(inference, batch),
        settings.ANALYSIS_CONCURRENCY,
    )
    scored = [
        tweet
        for batch, result in zip(batches, results)
        for tweet in merge_sentiments(batch, result)
    ]

    logger.info(
        "twitter_features_complete",
        days=days,
        tweets=len(scored),
        fallback_batches=sum(1 for r in results if r.is_fallback),
    )
    return TwitterFeatureResponse(
        date_range=TweetWindow(days=days, total_tweets=len(tweets)),
        **extract_features(scored),
    )


# -- overall sentiment --------------------------------------------------------

def _scores_prompt(batch: list[TwitterPost]) -> str:
    texts = "\n---\n".join(f"[{i}] {t.content}" for i, t in enumerate(batch))
    return f"""Analyze the sentiment of these tweets and return scores from -1 (very negative) to +1 (very positive).

Return a valid JSON object with this structure:
{{
  "scores": [-0.5, 0.8, 0.2, ...]
}}

Where each score corresponds to the tweet at that index.

Tweets to analyze:
{truncate(texts, settings.SENTIMENT_PROMPT_CHARS)}
"""


def scale_score(score: float) -> int:
    """Map a sentiment score in [-1, 1] onto the 1-5 scale."""
    return round_half_up((_clamp(score) + 1) / 2 * 4) + 1


async def analyze_overall_sentiment(
    db: AsyncSession,
    inference: InferenceClient,
) -> OverallSentimentResponse:
    tweets = await get_records(db, TwitterPost)
    if not tweets:
        return OverallSentimentResponse(overall_score=0, tweet_scores=[])

    batches = chunked(tweets, settings.SENTIMENT_BATCH_SIZE)
    results = await map_batches(
        batches,
        lambda batch: ask_model(
            inference,
            "You are a sentiment analysis assistant. Respond with valid JSON only.",
            _scores_prompt(batch),
            SentimentScoresResult,
            lambda: SentimentScoresResult(origin="fallback"),
        ),
        settings.ANALYSIS_CONCURRENCY,
    )

    tweet_scores = []
    for batch, result in zip(batches, results):
        for position, tweet in enumerate(batch):
            raw = result.scores[position] if position < len(result.scores) else None
            tweet_scores.append(TweetScore(tweet_id=tweet.tweet_id, score=scale_score(raw or 0.0)))

    overall = sum(s.score for s in tweet_scores) / len(tweet_scores)
    logger.info(
        "twitter_sentiment_complete",
        tweets=len(tweet_scores),
        fallback_batches=sum(1 for r in results if r.is_fallback),
    )
    return OverallSentimentResponse(
        overall_score=round_half_up(overall, 1),
        tweet_scores=tweet_scores,
    )
