import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UnifiedEvent(BaseModel):
    source: str
    id: str
    content: str
    status: str
    user_id: str
    created_at: str
    # JSON-encoded object of source-specific fields
    extras: str


class InsightsResponse(BaseModel):
    events: list[UnifiedEvent]
    total_events: int
    persisted: bool


class DailyCountResponse(BaseModel):
    date: datetime.date
    total_tickets: int
    total_discord: int
    total_issues: int
    total_emails: int
    total_tweets: int
    total_forum: int


class KeyMetrics(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_items: int
    platform_breakdown: dict[str, int]
    status_breakdown: dict[str, int]


class InsightsSummaryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    executive_summary: str
    key_metrics: KeyMetrics
    platforms_analyzed: list[str]
    generated_at: str
    origin: str
