from datetime import datetime

from pydantic import BaseModel


class SimilarEmail(BaseModel):
    email_id: str
    subject: str
    sender: str
    received_at: datetime | None
    similarity: float


class SimilarEmailsResponse(BaseModel):
    similar: list[SimilarEmail]


class IndexAllResponse(BaseModel):
    success: bool
    indexed: int
    errors: int
