# coding: utf-8
"""
Users API Endpoints

Profile, achievements, leaderboard, rank, activity feed and premium.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, HttpUrl, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import get_current_user
from src.core.enums import PlanType
from src.database.engine import get_session
from src.database.models import User
from src.services.progression_service import ProgressionService
from src.services.user_service import ACTIVITY_DEFAULT_LIMIT, UserService

router = APIRouter(prefix="/users", tags=["users"])

AVATAR_URL_MAX_LENGTH = 255


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    avatar_url: Optional[HttpUrl] = None

    @field_validator("avatar_url")
    @classmethod
    def avatar_url_fits_column(cls, value: Optional[HttpUrl]) -> Optional[HttpUrl]:
        if value is not None and len(str(value)) > AVATAR_URL_MAX_LENGTH:
            raise ValueError(f"URL must be at most {AVATAR_URL_MAX_LENGTH} characters")
        return value


class PremiumActivateRequest(BaseModel):
    plan_type: PlanType


# ===========================
# PROFILE
# ===========================


@router.get("/profile")
async def get_profile(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return {"user": await UserService.get_profile(session, user)}


@router.put("/profile")
async def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    updated = await UserService.update_profile(
        session,
        user,
        full_name=request.full_name,
        avatar_url=str(request.avatar_url) if request.avatar_url else None,
    )
    return {"message": "Profile updated successfully", "user": updated}


# ===========================
# ACHIEVEMENTS
# ===========================


@router.get("/achievements")
async def get_achievements(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await ProgressionService.get_achievements(session, user)


@router.post("/achievements/{achievement_id}/claim", status_code=201)
async def claim_achievement(
    achievement_id: int,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Record an available achievement (points threshold met) as earned
    """
    return await ProgressionService.claim_achievement(session, user, achievement_id)


# ===========================
# RANKING
# ===========================


@router.get("/leaderboard")
async def get_leaderboard(
    session: AsyncSession = Depends(get_session),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    leaderboard = await ProgressionService.get_leaderboard(session, limit=limit, offset=offset)
    return {"leaderboard": leaderboard}


@router.get("/rank")
async def get_rank(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await ProgressionService.get_rank(session, user)


# ===========================
# ACTIVITY / PREMIUM
# ===========================


@router.get("/activity")
async def get_activity(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    limit: int = Query(ACTIVITY_DEFAULT_LIMIT, ge=1, le=100),
):
    return {"activities": await UserService.get_activity(session, user.id, limit=limit)}


@router.post("/premium/activate")
async def activate_premium(
    request: PremiumActivateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """
    Demo activation: no payment, just a subscription row and the premium flag
    """
    subscription = await UserService.activate_premium(session, user, request.plan_type.value)
    return {"message": "Premium subscription activated", "subscription": subscription}
