# coding: utf-8
"""
AI Assistant API Endpoints

- POST /ai/chat            - talk to "Volga" (guests allowed)
- GET  /ai/recommendations - places and quests from the user's history
- POST /ai/route           - simple day route over top-rated places
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import (
    DEFAULT_ROUTE_DURATION_HOURS,
    MAX_ROUTE_DURATION_HOURS,
    MIN_ROUTE_DURATION_HOURS,
)
from src.api.auth import get_current_user, get_optional_user
from src.database.engine import get_session
from src.database.models import User
from src.services.assistant_service import AssistantService, get_assistant_service
from src.services.recommendation_service import RecommendationService

router = APIRouter(prefix="/ai", tags=["ai"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=500)


class RouteRequest(BaseModel):
    preferences: List[str] = Field(default_factory=list, description="Place category ids")
    duration: int = Field(
        DEFAULT_ROUTE_DURATION_HOURS,
        ge=MIN_ROUTE_DURATION_HOURS,
        le=MAX_ROUTE_DURATION_HOURS,
        description="Hours",
    )
    start_location: Optional[Dict[str, Any]] = None


@router.post("/chat")
async def chat(
    request: ChatRequest,
    user: Optional[User] = Depends(get_optional_user),
    assistant: AssistantService = Depends(get_assistant_service),
):
    return await assistant.chat(request.message, user)


@router.get("/recommendations")
async def get_recommendations(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    category: Optional[str] = Query(None),
    mood: Optional[str] = Query(None, description="active | relaxed"),
    time_of_day: Optional[str] = Query(None, description="morning | evening"),
    weather: Optional[str] = Query(None),
):
    recommendations = await RecommendationService.get_recommendations(
        session,
        user.id,
        category=category,
        mood=mood,
        time_of_day=time_of_day,
        weather=weather,
    )
    return {"recommendations": recommendations}


@router.post("/route")
async def build_route(
    request: RouteRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    route = await RecommendationService.build_route(
        session,
        preferences=request.preferences,
        duration=request.duration,
        start_location=request.start_location,
    )
    return {"route": route}
