# coding: utf-8
"""
Recommendation Service - personal recommendations and day routes

Both are heuristics over the catalog; no real routing or distance
computation happens here.
"""

import math
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import (
    DEFAULT_ROUTE_DURATION_HOURS,
    DISTANCE_PER_STOP_KM,
    HOURS_PER_STOP,
    PREFERRED_CATEGORIES_LIMIT,
    RECOMMENDED_PLACES_LIMIT,
    RECOMMENDED_QUESTS_LIMIT,
    ROUTE_CANDIDATE_LIMIT,
)
from config.prompts import ROUTE_DESCRIPTION_TEMPLATE
from src.database import crud
from src.services.assistant_service import recommendation_message
from src.utils.serializers import place_to_dict, quest_row_to_dict


def route_stop_count(candidates: int, duration: int) -> int:
    """Number of stops: min(candidates, floor(duration / 1.5))"""
    return min(candidates, math.floor(duration / HOURS_PER_STOP))


def build_route(places: List[Dict[str, Any]], duration: int) -> List[Dict[str, Any]]:
    """
    Take the leading places as stops, numbering them from 1 and splitting
    the duration evenly
    """
    stops = places[: route_stop_count(len(places), duration)]
    if not stops:
        return []

    per_stop = duration / len(stops)
    return [
        {**place, "order": index, "estimated_time": per_stop}
        for index, place in enumerate(stops, start=1)
    ]


class RecommendationService:
    """Service for recommendations and routes"""

    @staticmethod
    async def get_recommendations(
        session: AsyncSession,
        user_id: int,
        category: Optional[str] = None,
        mood: Optional[str] = None,
        time_of_day: Optional[str] = None,
        weather: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Places and quests picked from the user's quest history

        Place filter: explicit category, else the top preferred categories,
        else none. `weather` is accepted but does not change the result.
        """
        preferences = await crud.get_category_preferences(session, user_id)

        if category:
            categories = [category]
        else:
            categories = [p["category"] for p in preferences[:PREFERRED_CATEGORIES_LIMIT]]

        places = []
        for place, avg_rating in await crud.get_places_by_review_rating(
            session, categories=categories or None, limit=RECOMMENDED_PLACES_LIMIT
        ):
            data = place_to_dict(place)
            data["avg_rating"] = avg_rating
            places.append(data)

        quests = [
            quest_row_to_dict(row)
            for row in await crud.get_recommended_quests(session, user_id, limit=RECOMMENDED_QUESTS_LIMIT)
        ]

        logger.debug(
            f"Recommendations for user {user_id}: {len(places)} places, {len(quests)} quests "
            f"(categories={categories or 'any'})"
        )

        return {
            "places": places,
            "quests": quests,
            "message": recommendation_message(time_of_day=time_of_day, mood=mood),
            "user_preferences": preferences,
        }

    @staticmethod
    async def build_route(
        session: AsyncSession,
        preferences: Optional[List[str]] = None,
        duration: int = DEFAULT_ROUTE_DURATION_HOURS,
        start_location: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        places = await crud.get_top_rated_places(
            session, categories=preferences or None, limit=ROUTE_CANDIDATE_LIMIT
        )
        stops = build_route([place_to_dict(p) for p in places], duration)

        return {
            "places": stops,
            "estimated_duration": duration,
            "total_distance": len(stops) * DISTANCE_PER_STOP_KM,
            "description": ROUTE_DESCRIPTION_TEMPLATE.format(duration=duration),
            "start_location": start_location,
        }
