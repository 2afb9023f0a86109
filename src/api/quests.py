# coding: utf-8
"""
Quests API Endpoints

Public quest catalog plus per-user completion and stats.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import (
    MAX_DIFFICULTY,
    MAX_QUEST_REWARD,
    MIN_DIFFICULTY,
    MIN_QUEST_REWARD,
)
from src.api.auth import get_current_user
from src.database.engine import get_session
from src.database.models import User
from src.services.catalog_service import CatalogService
from src.services.progression_service import ProgressionService

router = APIRouter(prefix="/quests", tags=["quests"])


class QuestCreateRequest(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10)
    category: str = Field(..., min_length=1, max_length=50)
    points_reward: int = Field(10, ge=MIN_QUEST_REWARD, le=MAX_QUEST_REWARD)
    difficulty: int = Field(1, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    place_id: Optional[int] = None


# ===========================
# ENDPOINTS
# ===========================


@router.get("")
async def list_quests(
    session: AsyncSession = Depends(get_session),
    category: Optional[str] = Query(None),
    difficulty: Optional[int] = Query(None, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    quests = await CatalogService.list_quests(
        session, category=category, difficulty=difficulty, limit=limit, offset=offset
    )
    return {"quests": quests}


# Static paths go before /{quest_id}
@router.get("/my")
async def my_quests(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await CatalogService.my_quests(session, user.id)


@router.get("/stats/my")
async def my_quest_stats(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await ProgressionService.get_quest_stats(session, user.id)


@router.get("/{quest_id}")
async def get_quest(
    quest_id: int,
    session: AsyncSession = Depends(get_session),
):
    return {"quest": await CatalogService.get_quest(session, quest_id)}


@router.post("/{quest_id}/complete")
async def complete_quest(
    quest_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Complete a quest once: awards points_reward and recomputes the level
    """
    return await ProgressionService.complete_quest(session, quest_id, user.id)


@router.post("", status_code=201)
async def create_quest(
    request: QuestCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    quest = await CatalogService.create_quest(session, **request.model_dump())
    return {"message": "Quest created successfully", "quest": quest}
