from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.database import get_db
from insightmate.dependencies import get_inference
from insightmate.insights.schemas import DailyCountResponse, InsightsResponse, InsightsSummaryResponse
from insightmate.insights.service import build_summary, build_unified_view, export_csv
from insightmate.llm.client import InferenceClient
from insightmate.models.base import utcnow
from insightmate.records.service import get_daily_counts

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("", response_model=InsightsResponse)
async def unified_insights(db: AsyncSession = Depends(get_db)):
    events = await build_unified_view(db)
    return InsightsResponse(events=events, total_events=len(events), persisted=True)


@router.get("/daily", response_model=list[DailyCountResponse])
async def daily_counts(db: AsyncSession = Depends(get_db)):
    rows = await get_daily_counts(db)
    return [
        DailyCountResponse(
            date=row.day,
            total_tickets=row.total_tickets,
            total_discord=row.total_discord,
            total_issues=row.total_issues,
            total_emails=row.total_emails,
            total_tweets=row.total_tweets,
            total_forum=row.total_forum,
        )
        for row in rows
    ]


@router.get("/summary", response_model=InsightsSummaryResponse)
async def insights_summary(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await build_summary(db, inference)


@router.get("/export")
async def export_insights(db: AsyncSession = Depends(get_db)):
    filename = f"insightmate-data-{utcnow().date().isoformat()}.csv"
    return Response(
        content=await export_csv(db),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
