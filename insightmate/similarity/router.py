from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from insightmate.config import settings
from insightmate.database import get_db
from insightmate.dependencies import get_inference, get_vector_index
from insightmate.llm.client import InferenceClient
from insightmate.similarity.index import VectorIndex
from insightmate.similarity.schemas import IndexAllResponse, SimilarEmailsResponse
from insightmate.similarity.service import find_similar_emails, index_unindexed_emails

router = APIRouter(prefix="/email", tags=["similarity"])


@router.get("/similar/{email_id}", response_model=SimilarEmailsResponse)
async def similar_emails(
    email_id: str,
    db: AsyncSession = Depends(get_db),
    index: VectorIndex = Depends(get_vector_index),
):
    similar = await find_similar_emails(db, index, email_id, settings.SIMILAR_TOP_K)
    return SimilarEmailsResponse(similar=similar)


@router.post("/index-all", response_model=IndexAllResponse)
async def index_all_emails(
    db: AsyncSession = Depends(get_db),
    inference: InferenceClient = Depends(get_inference),
    index: VectorIndex = Depends(get_vector_index),
):
    return await index_unindexed_emails(db, inference, index)
