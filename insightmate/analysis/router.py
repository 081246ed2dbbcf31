from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.analysis.categories import GITHUB, TICKETS, analyze_categories
from insightmate.analysis.discord import analyze_discord
from insightmate.analysis.email import analyze_email_priority
from insightmate.analysis.forum import analyze_forums
from insightmate.analysis.schemas import (
    CategoryAnalysisResponse,
    DiscordAnalysisResponse,
    EmailAnalysisResponse,
    ForumAnalysisResponse,
    OverallSentimentResponse,
    TwitterFeatureResponse,
)
from insightmate.analysis.twitter import analyze_overall_sentiment, analyze_twitter_features
from insightmate.database import get_db
from insightmate.dependencies import get_inference
from insightmate.llm.client import InferenceClient

router = APIRouter(tags=["analysis"])


@router.get("/tickets/analysis", response_model=CategoryAnalysisResponse)
async def ticket_analysis(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_categories(db, inference, TICKETS)


@router.get("/github/analysis", response_model=CategoryAnalysisResponse)
async def github_analysis(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_categories(db, inference, GITHUB)


@router.get("/email/analysis", response_model=EmailAnalysisResponse)
async def email_analysis(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_email_priority(db, inference)


@router.get("/discord/analysis", response_model=DiscordAnalysisResponse)
async def discord_analysis(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_discord(db, inference)


@router.get("/twitter/features", response_model=TwitterFeatureResponse)
async def twitter_features(
    days: int = Query(90, ge=1, le=3650),
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_twitter_features(db, inference, days)


@router.get("/twitter/overall-sentiment", response_model=OverallSentimentResponse)
async def twitter_overall_sentiment(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_overall_sentiment(db, inference)


@router.get("/forum/analysis", response_model=ForumAnalysisResponse)
async def forum_analysis(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
):
    return await analyze_forums(db, inference)
