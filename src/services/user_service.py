# coding: utf-8
"""
User Service - profile, activity feed and premium activation
"""

import calendar
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import get_plan_pricing
from src.core.enums import ActivityType
from src.core.exceptions import StorageError, ValidationError
from src.database import crud
from src.database.models import User
from src.utils.serializers import iso, subscription_to_dict, user_to_dict


ACTIVITY_DEFAULT_LIMIT = 10


def add_months(start: datetime, months: int) -> datetime:
    """
    Calendar month arithmetic, clamping the day (Jan 31 + 1 month -> Feb 28/29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class UserService:
    """Service for user profile and premium operations"""

    @staticmethod
    async def get_profile(session: AsyncSession, user: User) -> Dict[str, Any]:
        profile = user_to_dict(user)
        profile["stats"] = await crud.get_user_stats(session, user.id)
        return profile

    @staticmethod
    async def update_profile(
        session: AsyncSession,
        user: User,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        user = await crud.update_user_profile(session, user, full_name=full_name, avatar_url=avatar_url)
        logger.info(f"Profile updated: user {user.id}")
        return user_to_dict(user)

    @staticmethod
    async def get_activity(
        session: AsyncSession,
        user_id: int,
        limit: int = ACTIVITY_DEFAULT_LIMIT,
    ) -> List[Dict[str, Any]]:
        """
        Merged feed of completions, reviews and claimed achievements,
        newest first, capped at limit
        """
        activity: List[Dict[str, Any]] = []

        for row in await crud.get_recent_completions(session, user_id, limit):
            activity.append({
                "type": ActivityType.QUEST_COMPLETED.value,
                "title": row.title,
                "points": row.points_earned,
                "rating": None,
                "place_name": row.place_name,
                "date": row.completed_at,
            })

        for row in await crud.get_recent_reviews(session, user_id, limit):
            activity.append({
                "type": ActivityType.REVIEW_ADDED.value,
                "title": row.name,
                "points": None,
                "rating": row.rating,
                "place_name": row.name,
                "date": row.created_at,
            })

        for row in await crud.get_recent_achievements(session, user_id, limit):
            activity.append({
                "type": ActivityType.ACHIEVEMENT_EARNED.value,
                "title": row.name,
                "points": None,
                "rating": None,
                "place_name": None,
                "date": row.earned_at,
            })

        activity.sort(key=lambda item: _as_utc(item["date"]), reverse=True)

        result = activity[:limit]
        for item in result:
            item["date"] = iso(item["date"])
        return result

    @staticmethod
    async def activate_premium(session: AsyncSession, user: User, plan_type: str) -> Dict[str, Any]:
        """
        Record a subscription and flag the user premium (one transaction)

        No payment is taken; the plan only fixes price and duration.

        Raises:
            ValidationError: unknown plan
            StorageError: database failure
        """
        try:
            plan = get_plan_pricing(plan_type)
        except KeyError:
            raise ValidationError.for_field("plan_type", "Plan must be monthly or yearly")

        start_date = datetime.now(UTC)
        end_date = add_months(start_date, plan.duration_months)

        try:
            subscription = await crud.add_subscription(
                session,
                user_id=user.id,
                plan_type=plan.plan_type,
                price=plan.price,
                start_date=start_date,
                end_date=end_date,
            )
            await crud.set_user_premium(session, user.id, True)
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Error activating premium for user {user.id}: {e}")
            raise StorageError("Failed to activate premium")

        logger.info(f"Premium activated: user {user.id}, plan={plan.plan_type}, until {end_date.date()}")

        data = subscription_to_dict(subscription)
        data.pop("is_active", None)
        return data
