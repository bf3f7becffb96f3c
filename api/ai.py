"""
AI routes — book summaries and genre recommendations.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.dependencies import get_book_ai_service
from auth.dependencies import get_current_user
from core.book_ai import BookAIService
from utils.schemas import (
    RecommendationRequest,
    RecommendationsResponse,
    SummaryRequest,
    SummaryResponse,
    UserRecord,
)

router = APIRouter(tags=["ai"])


@router.post("/ai-summary", response_model=SummaryResponse)
async def ai_summary(
    req: SummaryRequest,
    user: UserRecord = Depends(get_current_user),
    ai: BookAIService = Depends(get_book_ai_service),
) -> Dict[str, Any]:
    return {"summary": await ai.summary(req.title, req.author)}


@router.post("/ai-recommendations", response_model=RecommendationsResponse)
async def ai_recommendations(
    req: RecommendationRequest,
    user: UserRecord = Depends(get_current_user),
    ai: BookAIService = Depends(get_book_ai_service),
) -> Dict[str, Any]:
    recs = await ai.recommendations(req.genre)
    return {"recommendations": [r.model_dump() for r in recs]}
