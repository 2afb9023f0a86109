# coding: utf-8
"""
Catalog Service - places, reviews and quests

Reads are straight crud calls plus serialization; the only multi-step
write is AddReview (insert + rating recomputation in one transaction).
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import PLACE_CATEGORIES
from src.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
)
from src.database import crud
from src.database.models import User
from src.utils.serializers import (
    place_to_dict,
    quest_row_to_dict,
    quest_to_dict,
    review_to_dict,
)


PLACE_NOT_FOUND = "Place not found"
ALREADY_REVIEWED = "You have already reviewed this place"


def round_rating(value: float) -> float:
    """
    Round a mean rating to one decimal, halves away from zero (4.25 -> 4.3)
    """
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class CatalogService:
    """Service for the place and quest catalog"""

    # ===========================
    # PLACES
    # ===========================

    @staticmethod
    async def list_places(
        session: AsyncSession,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        places = await crud.list_places(
            session, category=category, search=search, limit=limit, offset=offset
        )
        return {
            "places": [place_to_dict(p) for p in places],
            "total": len(places),
        }

    @staticmethod
    async def get_place(session: AsyncSession, place_id: int) -> Dict[str, Any]:
        """
        Place with its reviews (newest first)

        Raises:
            NotFoundError: place absent
        """
        place = await crud.get_place(session, place_id)
        if not place:
            raise NotFoundError(PLACE_NOT_FOUND)

        data = place_to_dict(place)
        data["reviews"] = await crud.get_place_reviews(session, place_id)
        return data

    @staticmethod
    async def create_place(session: AsyncSession, owner: User, **fields: Any) -> Dict[str, Any]:
        place = await crud.create_place(session, owner_id=owner.id, **fields)
        return place_to_dict(place)

    @staticmethod
    async def update_place(
        session: AsyncSession,
        place_id: int,
        caller: User,
        **fields: Any,
    ) -> Dict[str, Any]:
        """
        Owner-only partial update

        Raises:
            NotFoundError: place absent
            ForbiddenError: caller is not the owner
        """
        place = await crud.get_place(session, place_id)
        if not place:
            raise NotFoundError(PLACE_NOT_FOUND)

        if place.owner_id != caller.id:
            logger.warning(f"User {caller.id} tried to edit place {place_id} owned by {place.owner_id}")
            raise ForbiddenError("You can only edit your own places")

        place = await crud.update_place(session, place, **fields)
        logger.info(f"Place {place_id} updated by owner {caller.id}")
        return place_to_dict(place)

    @staticmethod
    async def add_review(
        session: AsyncSession,
        place_id: int,
        user_id: int,
        rating: int,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Add the user's single review and recompute the place rating

        place.rating = round(mean(all ratings), 1), computed inside the same
        transaction as the insert.

        Raises:
            NotFoundError: place absent
            ConflictError: user already reviewed this place
        """
        place = await crud.get_place(session, place_id)
        if not place:
            raise NotFoundError(PLACE_NOT_FOUND)

        if await crud.get_review(session, user_id, place_id):
            raise ConflictError(ALREADY_REVIEWED)

        try:
            review = await crud.add_review(session, user_id, place_id, rating, comment)
            average = await crud.get_average_rating(session, place_id)
            new_rating = round_rating(average) if average is not None else 0.0
            await crud.set_place_rating(session, place_id, new_rating)
            await session.commit()
        except IntegrityError:
            await session.rollback()
            raise ConflictError(ALREADY_REVIEWED)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Error adding review for place {place_id} by user {user_id}: {e}")
            raise StorageError("Failed to add review")

        logger.info(f"Review added: place={place_id}, user={user_id}, rating={rating} -> {new_rating}")
        return review_to_dict(review)

    @staticmethod
    def list_categories() -> List[Dict[str, str]]:
        return [dict(c) for c in PLACE_CATEGORIES]

    # ===========================
    # QUESTS
    # ===========================

    @staticmethod
    async def list_quests(
        session: AsyncSession,
        category: Optional[str] = None,
        difficulty: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        rows = await crud.list_quests(
            session, category=category, difficulty=difficulty, limit=limit, offset=offset
        )
        return [quest_row_to_dict(row) for row in rows]

    @staticmethod
    async def get_quest(session: AsyncSession, quest_id: int) -> Dict[str, Any]:
        row = await crud.get_quest_with_place(session, quest_id)
        if not row:
            raise NotFoundError("Quest not found")
        return quest_row_to_dict(row)

    @staticmethod
    async def create_quest(
        session: AsyncSession,
        title: str,
        description: str,
        category: str,
        points_reward: int = 10,
        difficulty: int = 1,
        place_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: place_id given but no such place
        """
        if place_id is not None and not await crud.get_place(session, place_id):
            raise NotFoundError(PLACE_NOT_FOUND)

        quest = await crud.create_quest(
            session,
            title=title,
            description=description,
            category=category,
            points_reward=points_reward,
            difficulty=difficulty,
            place_id=place_id,
        )
        return quest_to_dict(quest)

    @staticmethod
    async def my_quests(session: AsyncSession, user_id: int) -> Dict[str, List[Dict[str, Any]]]:
        """
        {completed, available} for a user
        """
        completed = [
            quest_to_dict(
                quest,
                completed_at=completed_at,
                points_earned=points_earned,
                place_name=place_name,
            )
            for quest, completed_at, points_earned, place_name in await crud.get_completed_quests(
                session, user_id
            )
        ]
        available = [quest_row_to_dict(row) for row in await crud.get_available_quests(session, user_id)]

        return {"completed": completed, "available": available}
