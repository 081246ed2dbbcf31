from datetime import date, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.models.base import as_utc, utcnow
from insightmate.records.models import DailyIngestCount, Email, SignalRecord
from insightmate.records.schemas import RecordCreate

logger = structlog.get_logger()


class DuplicateRecordError(Exception):
    def __init__(self, source: str, external_id: str):
        self.source = source
        self.external_id = external_id
        super().__init__(f"{source} record {external_id!r} already exists")


async def ingest_record(
    db: AsyncSession,
    model: type[SignalRecord],
    data: RecordCreate,
) -> SignalRecord:
    """Insert one record and bump its source's daily counter in the same transaction."""
    values = data.model_dump(exclude={"created_at"})
    timestamp = as_utc(data.created_at) if data.created_at else utcnow()
    if model is Email:
        values["received_at"] = timestamp
    else:
        values["created_at"] = timestamp

    record = model(**values)
    external_id = record.external_id
    db.add(record)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateRecordError(model.source.value, external_id) from exc

    await increment_daily_count(db, model.counter_column, timestamp.date())
    await db.commit()

    logger.info(
        "record_ingested",
        source=model.source.value,
        external_id=external_id,
        counter_date=timestamp.date().isoformat(),
    )
    return record


async def increment_daily_count(db: AsyncSession, column: str, day: date) -> None:
    """Insert-or-increment the counter row for ``day``.

    The conflict clause on the date primary key keeps concurrent ingests from
    creating duplicate rows; the statement runs inside the caller's transaction.
    """
    table = DailyIngestCount.__table__
    if db.get_bind().dialect.name == "postgresql":
        insert = postgresql.insert
    else:
        insert = sqlite.insert

    stmt = insert(table).values({"date": day, column: 1})
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.date],
        set_={column: table.c[column] + 1},
    )
    await db.execute(stmt)


async def get_records(
    db: AsyncSession,
    model: type[SignalRecord],
    limit: int | None = None,
) -> list[SignalRecord]:
    """Rows for one source, newest first."""
    query = select(model).order_by(model.created_at.desc(), model.id.desc())
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_records_since(
    db: AsyncSession,
    model: type[SignalRecord],
    since: datetime,
) -> list[SignalRecord]:
    """Rows created at or after ``since``, oldest first."""
    result = await db.execute(
        select(model)
        .where(model.created_at >= since)
        .order_by(model.created_at.asc(), model.id.asc())
    )
    return list(result.scalars().all())


async def get_daily_counts(db: AsyncSession) -> list[DailyIngestCount]:
    result = await db.execute(
        select(DailyIngestCount).order_by(DailyIngestCount.day.desc())
    )
    return list(result.scalars().all())
