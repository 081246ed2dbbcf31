import enum
from datetime import date, datetime
from typing import ClassVar

from sqlalchemy import Date, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, synonym

from insightmate.models.base import Base, CreatedAtMixin, utcnow


class Source(str, enum.Enum):
    TICKETS = "tickets"
    DISCORD = "discord"
    GITHUB = "github"
    EMAIL = "email"
    TWITTER = "twitter"
    FORUM = "forum"


class SignalRecordMixin:
    """Shared class-level tags for every ingested record type.

    ``source`` is the explicit source label, ``external_id_field`` names the
    caller-supplied unique identifier and ``counter_column`` the matching
    column of the daily counter table.
    """

    source: ClassVar[Source]
    external_id_field: ClassVar[str]
    counter_column: ClassVar[str]

    @property
    def external_id(self) -> str:
        return str(getattr(self, self.external_id_field))


class SupportTicket(SignalRecordMixin, CreatedAtMixin, Base):
    __tablename__ = "customer_support_tickets"
    source = Source.TICKETS
    external_id_field = "ticket_id"
    counter_column = "total_tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ticket_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)  # open, pending, closed, ...
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)


class DiscordMessage(SignalRecordMixin, CreatedAtMixin, Base):
    __tablename__ = "discord_messages"
    source = Source.DISCORD
    external_id_field = "message_id"
    counter_column = "total_discord"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    channel_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(255), nullable=False)


class GithubIssue(SignalRecordMixin, CreatedAtMixin, Base):
    __tablename__ = "github_issues"
    source = Source.GITHUB
    external_id_field = "issue_id"
    counter_column = "total_issues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    issue_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    repo: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)  # open, closed


class Email(SignalRecordMixin, Base):
    __tablename__ = "emails"
    source = Source.EMAIL
    external_id_field = "email_id"
    counter_column = "total_emails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sender: Mapped[str] = mapped_column(String(255), nullable=False)
    # Similarity-index key, written by the indexing job
    vector_id: Mapped[str | None] = mapped_column(String(255))
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    created_at = synonym("received_at")


class TwitterPost(SignalRecordMixin, CreatedAtMixin, Base):
    __tablename__ = "twitter_posts"
    source = Source.TWITTER
    external_id_field = "tweet_id"
    counter_column = "total_tweets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tweet_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)


class ForumPost(SignalRecordMixin, CreatedAtMixin, Base):
    __tablename__ = "forum_posts"
    source = Source.FORUM
    external_id_field = "post_id"
    counter_column = "total_forum"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    forum: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)


class DailyIngestCount(Base):
    """One row per calendar date; each ingest bumps its source's column."""

    __tablename__ = "insights_aggregated"

    day: Mapped[date] = mapped_column("date", Date, primary_key=True)
    total_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_discord: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_issues: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_emails: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_tweets: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_forum: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


SignalRecord = SupportTicket | DiscordMessage | GithubIssue | Email | TwitterPost | ForumPost

SOURCE_MODELS: dict[Source, type[SignalRecord]] = {
    Source.TICKETS: SupportTicket,
    Source.DISCORD: DiscordMessage,
    Source.GITHUB: GithubIssue,
    Source.EMAIL: Email,
    Source.TWITTER: TwitterPost,
    Source.FORUM: ForumPost,
}
