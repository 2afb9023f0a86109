# coding: utf-8
"""
Progression Service

Quest completion, points and levels, read-time achievement state and
leaderboard ranking.

Rules:
- A quest is completed at most once per user (pre-check + unique constraint)
- level = floor(points / 100) + 1, stored level never goes down
- Achievements are derived on read: earned / available / locked.
  Nothing is awarded automatically; claiming is an explicit action.
- Ranking: points desc, level desc, user id asc (strict total order)
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Set

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import level_for_points
from src.core.enums import AchievementStatus
from src.core.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from src.database import crud
from src.database.models import Achievement, User
from src.utils.serializers import achievement_to_dict, user_to_dict


QUEST_ALREADY_COMPLETED = "You have already completed this quest"


def achievement_status(
    achievement: Achievement, earned_ids: Set[int], user_points: int
) -> AchievementStatus:
    if achievement.id in earned_ids:
        return AchievementStatus.EARNED
    if user_points >= achievement.points_required:
        return AchievementStatus.AVAILABLE
    return AchievementStatus.LOCKED


def partition_achievements(
    catalog: Iterable[Achievement],
    earned_ids: Set[int],
    user_points: int,
) -> Dict[AchievementStatus, List[Achievement]]:
    """
    Split the catalog into earned / available / locked.

    Every catalog entry lands in exactly one bucket; catalog order is kept.
    """
    buckets: Dict[AchievementStatus, List[Achievement]] = {
        AchievementStatus.EARNED: [],
        AchievementStatus.AVAILABLE: [],
        AchievementStatus.LOCKED: [],
    }
    for achievement in catalog:
        buckets[achievement_status(achievement, earned_ids, user_points)].append(achievement)
    return buckets


class ProgressionService:
    """Service for quest completion, achievements and ranking"""

    @staticmethod
    async def complete_quest(
        session: AsyncSession,
        quest_id: int,
        user_id: int,
    ) -> Dict[str, Any]:
        """
        Complete a quest for a user (exactly once)

        One transaction: insert UserQuest, points += reward, raise level.

        Returns:
            {message, points_earned, total_points, level, leveled_up, quest}

        Raises:
            NotFoundError: quest missing or inactive
            ConflictError: already completed
            StorageError: database failure
        """
        quest = await crud.get_active_quest(session, quest_id)
        if not quest:
            raise NotFoundError("Quest not found or inactive")

        if await crud.get_user_quest(session, user_id, quest_id):
            raise ConflictError(QUEST_ALREADY_COMPLETED)

        reward = quest.points_reward
        quest_summary = {
            "id": quest.id,
            "title": quest.title,
            "points_reward": reward,
        }

        try:
            await crud.add_user_quest(session, user_id, quest_id, points_earned=reward)
            new_points, stored_level = await crud.add_user_points(session, user_id, reward)

            new_level = level_for_points(new_points)
            leveled_up = False
            if new_level > stored_level:
                leveled_up = await crud.raise_user_level(session, user_id, new_level)

            await session.commit()

        except IntegrityError:
            # Concurrent completion won the unique (user_id, quest_id) race
            await session.rollback()
            logger.warning(f"Duplicate completion of quest {quest_id} by user {user_id} rejected")
            raise ConflictError(QUEST_ALREADY_COMPLETED)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Error completing quest {quest_id} for user {user_id}: {e}")
            raise StorageError("Failed to complete quest")

        if leveled_up:
            logger.info(f"User {user_id} leveled up: {stored_level} -> {new_level}")

        logger.info(
            f"User {user_id} completed quest {quest_id} "
            f"(+{reward} points, total: {new_points})"
        )

        return {
            "message": "Quest completed!",
            "points_earned": reward,
            "total_points": new_points,
            "level": max(new_level, stored_level),
            "leveled_up": leveled_up,
            "quest": quest_summary,
        }

    @staticmethod
    async def get_achievements(session: AsyncSession, user: User) -> Dict[str, Any]:
        """
        Read-time achievement state for a user

        Returns:
            {earned, available, locked, user_points}
        """
        catalog = await crud.get_all_achievements(session)
        earned_rows = await crud.get_earned_achievements(session, user.id)
        earned_at: Dict[int, datetime] = {a.id: ts for a, ts in earned_rows}

        buckets = partition_achievements(catalog, set(earned_at), user.points)

        # Most recently earned first
        earned = sorted(
            buckets[AchievementStatus.EARNED],
            key=lambda a: (earned_at[a.id], a.id),
            reverse=True,
        )

        return {
            "earned": [achievement_to_dict(a, earned_at[a.id]) for a in earned],
            "available": [achievement_to_dict(a) for a in buckets[AchievementStatus.AVAILABLE]],
            "locked": [achievement_to_dict(a) for a in buckets[AchievementStatus.LOCKED]],
            "user_points": user.points,
        }

    @staticmethod
    async def claim_achievement(
        session: AsyncSession,
        user: User,
        achievement_id: int,
    ) -> Dict[str, Any]:
        """
        Record an available achievement as earned

        Raises:
            NotFoundError: unknown achievement
            ConflictError: already earned
            ValidationError: points requirement not met yet
        """
        achievement = await crud.get_achievement(session, achievement_id)
        if not achievement:
            raise NotFoundError("Achievement not found")

        earned_ids = {a.id for a, _ in await crud.get_earned_achievements(session, user.id)}
        status = achievement_status(achievement, earned_ids, user.points)

        if status is AchievementStatus.EARNED:
            raise ConflictError("Achievement already earned")
        if status is AchievementStatus.LOCKED:
            raise ValidationError(
                f"Achievement requires {achievement.points_required} points",
                errors=[{"field": "achievement_id", "message": "Not enough points"}],
            )

        try:
            user_achievement = await crud.add_user_achievement(session, user.id, achievement.id)
            earned_at = user_achievement.earned_at
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError("Achievement already earned")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Error claiming achievement {achievement_id} for user {user.id}: {e}")
            raise StorageError("Failed to claim achievement")

        logger.info(f"User {user.id} earned achievement '{achievement.name}'")
        return {
            "message": "Achievement earned",
            "achievement": achievement_to_dict(achievement, earned_at),
        }

    @staticmethod
    async def get_leaderboard(
        session: AsyncSession,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Leaderboard page with 1-based positions
        """
        rows = await crud.get_leaderboard(session, limit=limit, offset=offset)

        leaderboard = []
        for index, (user, quests_completed) in enumerate(rows):
            entry = user_to_dict(user, include_email=False)
            entry["quests_completed"] = quests_completed
            entry["position"] = offset + index + 1
            leaderboard.append(entry)

        return leaderboard

    @staticmethod
    async def get_rank(session: AsyncSession, user: User) -> Dict[str, int]:
        """
        rank = 1 + number of users strictly ahead
        """
        ahead = await crud.count_users_ahead(session, user.points, user.level, user.id)
        total = await crud.count_users(session)
        return {"rank": ahead + 1, "total_users": total}

    @staticmethod
    async def get_quest_stats(session: AsyncSession, user_id: int) -> Dict[str, Any]:
        """
        {stats: {total_completed, total_points, <tier>_completed...}, categories}
        """
        stats = await crud.get_quest_stats(session, user_id)
        preferences = await crud.get_category_preferences(session, user_id)

        categories = [
            {"category": p["category"], "count": p["frequency"]}
            for p in preferences
        ]
        categories.sort(key=lambda c: -c["count"])

        return {"stats": stats, "categories": categories}
