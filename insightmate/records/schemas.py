from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from insightmate.models.base import as_utc

# github_issues.issue_id is a 32-bit INTEGER column
MAX_ISSUE_ID = 2**31 - 1


class RecordCreate(BaseModel):
    # Optional backfill timestamp; defaults to the time of ingestion
    created_at: datetime | None = None


class TicketCreate(RecordCreate):
    ticket_id: str = Field(min_length=1)
    content: str
    status: str
    user_id: str


class DiscordMessageCreate(RecordCreate):
    message_id: str = Field(min_length=1)
    channel_id: str
    content: str
    author_id: str


class GithubIssueCreate(RecordCreate):
    issue_id: int = Field(ge=0, le=MAX_ISSUE_ID)
    repo: str
    title: str
    body: str
    state: str


class EmailCreate(RecordCreate):
    email_id: str = Field(min_length=1)
    subject: str
    body: str
    sender: str


class TwitterPostCreate(RecordCreate):
    tweet_id: str = Field(min_length=1)
    content: str
    author: str


class ForumPostCreate(RecordCreate):
    post_id: str = Field(min_length=1)
    forum: str
    title: str
    content: str
    author: str


class CollectResponse(BaseModel):
    success: bool


class RecordResponse(BaseModel):
    """Stored row as returned by the listings, timestamps always in UTC."""

    model_config = {"from_attributes": True}

    @field_validator("created_at", "received_at", check_fields=False)
    @classmethod
    def ensure_utc(cls, value):
        return as_utc(value)


class TicketResponse(RecordResponse):
    id: int
    ticket_id: str
    content: str
    status: str
    user_id: str
    created_at: datetime


class DiscordMessageResponse(RecordResponse):
    id: int
    message_id: str
    channel_id: str
    content: str
    author_id: str
    created_at: datetime


class GithubIssueResponse(RecordResponse):
    id: int
    issue_id: int
    repo: str
    title: str
    body: str
    state: str
    created_at: datetime


class EmailResponse(RecordResponse):
    id: int
    email_id: str
    subject: str
    body: str
    sender: str
    vector_id: str | None
    received_at: datetime


class TwitterPostResponse(RecordResponse):
    id: int
    tweet_id: str
    content: str
    author: str
    created_at: datetime


class ForumPostResponse(RecordResponse):
    id: int
    post_id: str
    forum: str
    title: str
    content: str
    author: str
    created_at: datetime
