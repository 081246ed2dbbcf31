"""Typed model outputs for every inference prompt.

Each result type has a fallback variant (``origin="fallback"``) that callers
build when the model call fails or its output does not decode into the
schema.  Decoding never raises.
"""

from typing import Callable, Literal, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from insightmate.llm.parsing import extract_json

logger = structlog.get_logger()


def _number_or(value, default: float) -> float:
    """Numeric model fields fall back to ``default`` when null or not a number."""
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _text_or(value, default: str) -> str:
    if value is None or isinstance(value, (dict, list)):
        return default
    return str(value)


class ModelOutput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    origin: Literal["model", "fallback"] = "model"

    @property
    def is_fallback(self) -> bool:
        return self.origin == "fallback"


# -- categories (tickets / github) ------------------------------------------

class CategorizedItem(BaseModel):
    id: str
    category: str | None = None
    confidence: float = 1.0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return _text_or(value, "") or None

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, value):
        return _number_or(value, 1.0)


class CategorizationResult(ModelOutput):
    categories: list[str] = Field(default_factory=list)
    items: list[CategorizedItem] = Field(default_factory=list)


class AdviceResult(ModelOutput):
    priority_areas: list[str] = Field(default_factory=list, alias="priorityAreas")
    advice: str


# -- email priority -----------------------------------------------------------

class EmailClassification(BaseModel):
    email_id: str
    priority: str = "low"
    confidence: float = 0.0
    reason: str = ""

    @field_validator("email_id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value)

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, value):
        return _text_or(value, "low")

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, value):
        return _number_or(value, 0.0)

    @field_validator("reason", mode="before")
    @classmethod
    def coerce_reason(cls, value):
        return _text_or(value, "")


class EmailPriorityResult(ModelOutput):
    classifications: list[EmailClassification] = Field(default_factory=list)
    summary: str = ""


# -- discord announcements ----------------------------------------------------

class Announcement(BaseModel):
    title: str
    description: str = ""
    channel: str = ""
    confidence: float = 0.0
    key_points: list[str] = Field(default_factory=list)
    message_id: str | None = None

    @field_validator("channel", mode="before")
    @classmethod
    def coerce_channel(cls, value):
        return _text_or(value, "")

    @field_validator("message_id", mode="before")
    @classmethod
    def coerce_message_id(cls, value):
        return value if value is None else str(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, value):
        return _number_or(value, 0.0)


class AnnouncementResult(ModelOutput):
    announcements: list[Announcement] = Field(default_factory=list)
    summary: str = ""


# -- twitter sentiment --------------------------------------------------------

class TweetSentiment(BaseModel):
    tweet_index: int
    sentiment: str = "neutral"
    sentiment_score: float = 0.0
    reason: str = ""

    @field_validator("sentiment", mode="before")
    @classmethod
    def coerce_sentiment(cls, value):
        return _text_or(value, "neutral")

    @field_validator("sentiment_score", mode="before")
    @classmethod
    def coerce_score(cls, value):
        return _number_or(value, 0.0)

    @field_validator("reason", mode="before")
    @classmethod
    def coerce_reason(cls, value):
        return _text_or(value, "")


class TweetSentimentResult(ModelOutput):
    analyses: list[TweetSentiment] = Field(default_factory=list)


class SentimentScoresResult(ModelOutput):
    scores: list[float | None] = Field(default_factory=list)


# -- summaries ----------------------------------------------------------------

class ForumSummaryResult(ModelOutput):
    summary: str
    topics: list[str] = Field(default_factory=list)


class ExecutiveSummaryResult(ModelOutput):
    summary: str


T = TypeVar("T", bound=ModelOutput)


def decode_model_output(raw: str | None, schema: type[T], fallback: Callable[[], T]) -> T:
    """Decode raw model text into ``schema``, or return ``fallback()``."""
    data = extract_json(raw)
    if not isinstance(data, dict):
        logger.warning(
            "model_output_unparseable",
            schema=schema.__name__,
            raw_output=(raw or "")[:200],
        )
        return fallback()

    data.pop("origin", None)
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        logger.warning("model_output_invalid", schema=schema.__name__, errors=exc.error_count())
        return fallback()
