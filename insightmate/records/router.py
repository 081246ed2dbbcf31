from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.database import get_db
from insightmate.records.models import (
    DiscordMessage,
    Email,
    ForumPost,
    GithubIssue,
    SignalRecord,
    SupportTicket,
    TwitterPost,
)
from insightmate.records.schemas import (
    CollectResponse,
    DiscordMessageCreate,
    DiscordMessageResponse,
    EmailCreate,
    EmailResponse,
    ForumPostCreate,
    ForumPostResponse,
    GithubIssueCreate,
    GithubIssueResponse,
    RecordCreate,
    TicketCreate,
    TicketResponse,
    TwitterPostCreate,
    TwitterPostResponse,
)
from insightmate.records.service import DuplicateRecordError, get_records, ingest_record

collect_router = APIRouter(prefix="/collect", tags=["collection"])
router = APIRouter(tags=["data"])


async def _collect(db: AsyncSession, model: type[SignalRecord], data: RecordCreate) -> CollectResponse:
    try:
        await ingest_record(db, model, data)
    except DuplicateRecordError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return CollectResponse(success=True)


@collect_router.post("/tickets", response_model=CollectResponse)
async def collect_ticket(data: TicketCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, SupportTicket, data)


@collect_router.post("/discord", response_model=CollectResponse)
async def collect_discord_message(data: DiscordMessageCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, DiscordMessage, data)


@collect_router.post("/github", response_model=CollectResponse)
async def collect_github_issue(data: GithubIssueCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, GithubIssue, data)


@collect_router.post("/email", response_model=CollectResponse)
async def collect_email(data: EmailCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, Email, data)


@collect_router.post("/twitter", response_model=CollectResponse)
async def collect_twitter_post(data: TwitterPostCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, TwitterPost, data)


@collect_router.post("/forum", response_model=CollectResponse)
async def collect_forum_post(data: ForumPostCreate, db: AsyncSession = Depends(get_db)):
    return await _collect(db, ForumPost, data)


@router.get("/tickets", response_model=list[TicketResponse])
async def list_tickets(db: AsyncSession = Depends(get_db)):
    return [TicketResponse.model_validate(r) for r in await get_records(db, SupportTicket)]


@router.get("/discord", response_model=list[DiscordMessageResponse])
async def list_discord_messages(db: AsyncSession = Depends(get_db)):
    return [DiscordMessageResponse.model_validate(r) for r in await get_records(db, DiscordMessage)]


@router.get("/github", response_model=list[GithubIssueResponse])
async def list_github_issues(db: AsyncSession = Depends(get_db)):
    return [GithubIssueResponse.model_validate(r) for r in await get_records(db, GithubIssue)]


@router.get("/email", response_model=list[EmailResponse])
async def list_emails(db: AsyncSession = Depends(get_db)):
    return [EmailResponse.model_validate(r) for r in await get_records(db, Email)]


@router.get("/twitter", response_model=list[TwitterPostResponse])
async def list_twitter_posts(db: AsyncSession = Depends(get_db)):
    return [TwitterPostResponse.model_validate(r) for r in await get_records(db, TwitterPost)]


@router.get("/forum", response_model=list[ForumPostResponse])
async def list_forum_posts(db: AsyncSession = Depends(get_db)):
    return [ForumPostResponse.model_validate(r) for r in await get_records(db, ForumPost)]
