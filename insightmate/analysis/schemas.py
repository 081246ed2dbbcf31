from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from insightmate.analysis.results import Announcement
from insightmate.records.schemas import ForumPostResponse


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Category analysis (tickets, github)

class DateRange(CamelModel):
    start: str
    end: str


class CategorySummary(CamelModel):
    name: str
    count: int
    percentage: int
    trend: Literal["increasing", "decreasing", "stable"]
    examples: list[dict[str, str | int]]


class CategoryAnalysisResponse(CamelModel):
    date_range: DateRange
    categories: list[CategorySummary]
    timeline: list[dict[str, str | int]]
    advice: str
    priority_areas: list[str]


# Email priority

class EmailCount(CamelModel):
    email_count: int


class PrioritizedEmail(BaseModel):
    email_id: str
    subject: str
    body: str
    sender: str
    received_at: datetime
    priority: Literal["high", "medium", "low"]
    confidence: float
    reason: str


class EmailPriorities(BaseModel):
    high: list[PrioritizedEmail]
    medium: list[PrioritizedEmail]
    low: list[PrioritizedEmail]


class EmailInsights(CamelModel):
    high_count: int
    medium_count: int
    low_count: int
    high_percentage: int
    urgent_senders: list[str]


class EmailAnalysisResponse(CamelModel):
    date_range: EmailCount
    priorities: EmailPriorities
    summary: str
    insights: EmailInsights


# Discord announcements

class MessageCount(CamelModel):
    message_count: int


class ChannelActivity(CamelModel):
    channel_id: str
    count: int
    last_activity: datetime | None


class DiscordAnalysisResponse(CamelModel):
    date_range: MessageCount
    channels: list[ChannelActivity]
    announcements: list[Announcement]
    summary: str


# Twitter features

class TweetWindow(CamelModel):
    days: int
    total_tweets: int


class SentimentDistribution(BaseModel):
    positive: int
    negative: int
    neutral: int


class SentimentOverview(CamelModel):
    distribution: SentimentDistribution
    average_score: float
    trend: str


class WordFrequency(BaseModel):
    word: str
    frequency: int
    sentiment: Literal["positive", "negative", "neutral"]


class HashtagFrequency(BaseModel):
    hashtag: str
    frequency: int


class ContentTypes(BaseModel):
    questions: int
    announcements: int
    complaints: int
    praise: int
    general: int


class ContentAnalysis(CamelModel):
    top_words: list[WordFrequency]
    top_hashtags: list[HashtagFrequency]
    content_types: ContentTypes
    avg_length: int
    contains_links: int
    contains_mentions: int


class AuthorStats(CamelModel):
    author: str
    tweet_count: int
    avg_sentiment: float


class AuthorAnalysis(CamelModel):
    total_authors: int
    top_authors: list[AuthorStats]
    author_diversity: float


class TemporalAnalysis(CamelModel):
    peak_hours: list[str]
    peak_days: list[str]
    activity_trend: str


class TwitterFeatureResponse(CamelModel):
    date_range: TweetWindow
    sentiment: SentimentOverview
    content_analysis: ContentAnalysis
    author_analysis: AuthorAnalysis
    temporal_analysis: TemporalAnalysis
    insights: list[str]


# Twitter overall sentiment (snake_case on the wire)

class TweetScore(BaseModel):
    tweet_id: str
    score: int


class OverallSentimentResponse(BaseModel):
    overall_score: float
    tweet_scores: list[TweetScore]


# Forum

class ForumGroup(CamelModel):
    forum: str
    post_count: int
    summary: str
    top_topics: list[str]
    posts: list[ForumPostResponse]


class ForumAnalysisResponse(CamelModel):
    total_posts: int
    forums: list[ForumGroup]
