import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.llm.client import InferenceClient
from insightmate.records.models import Email
from insightmate.similarity.index import VectorIndex
from insightmate.similarity.schemas import IndexAllResponse, SimilarEmail

logger = structlog.get_logger()


def embedding_text(subject: str, body: str) -> str:
    return f"{subject} {body}"


async def find_similar_emails(
    db: AsyncSession,
    index: VectorIndex,
    email_id: str,
    top_k: int,
) -> list[SimilarEmail]:
    """Nearest stored emails to ``email_id``, most similar first, excluding itself.

    Returns an empty list when the email has no stored embedding or the vector
    backend fails.
    """
    try:
        embedding = await index.get_embedding(email_id)
        if embedding is None:
            return []
        matches = await index.query(embedding, top_k)
    except Exception as exc:
        logger.warning("vector_lookup_failed", email_id=email_id, error=str(exc))
        return []

    matches = [(match_id, score) for match_id, score in matches if match_id != email_id][: top_k - 1]
    if not matches:
        return []

    result = await db.execute(select(Email).where(Email.email_id.in_([m for m, _ in matches])))
    emails = {e.email_id: e for e in result.scalars().all()}

    similar = []
    for match_id, score in matches:
        email = emails.get(match_id)
        similar.append(
            SimilarEmail(
                email_id=match_id,
                subject=email.subject if email else "",
                sender=email.sender if email else "",
                received_at=email.received_at if email else None,
                similarity=score,
            )
        )
    return similar


async def index_unindexed_emails(
    db: AsyncSession,
    inference: InferenceClient,
    index: VectorIndex,
) -> IndexAllResponse:
    """Embed and index every email that has no ``vector_id`` yet.

    Each email is committed on its own; a failure is logged and counted and
    the job moves on to the next email.
    """
    result = await db.execute(
        select(Email.id, Email.email_id, Email.subject, Email.body)
        .where(Email.vector_id.is_(None))
        .order_by(Email.id)
    )
    pending = result.all()

    indexed = errors = 0
    for row_id, email_id, subject, body in pending:
        try:
            embedding = await inference.embed(embedding_text(subject, body))
            await index.upsert(email_id, embedding)
            await db.execute(update(Email).where(Email.id == row_id).values(vector_id=email_id))
            await db.commit()
            indexed += 1
        except Exception as exc:
            await db.rollback()
            logger.error("email_index_failed", email_id=email_id, error=str(exc))
            errors += 1

    logger.info("email_index_complete", indexed=indexed, errors=errors)
    return IndexAllResponse(success=errors == 0, indexed=indexed, errors=errors)
