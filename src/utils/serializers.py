"""
Serializers - ORM models to JSON-ready dicts
"""

from datetime import datetime
from typing import Any, Dict, Optional

from src.database.models import (
    User,
    Place,
    Quest,
    Review,
    Achievement,
    BusinessSubscription,
)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(user: User, include_email: bool = True) -> Dict[str, Any]:
    """Public user shape (never includes password_hash)"""
    data = {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "points": user.points,
        "level": user.level,
        "is_premium": user.is_premium,
        "created_at": iso(user.created_at),
    }
    if include_email:
        data["email"] = user.email
    return data


def place_to_dict(place: Place) -> Dict[str, Any]:
    return {
        "id": place.id,
        "name": place.name,
        "description": place.description,
        "category": place.category,
        "latitude": place.latitude,
        "longitude": place.longitude,
        "address": place.address,
        "phone": place.phone,
        "website": place.website,
        "rating": place.rating,
        "image_url": place.image_url,
        "is_premium": place.is_premium,
        "owner_id": place.owner_id,
        "created_at": iso(place.created_at),
        "updated_at": iso(place.updated_at),
    }


def quest_to_dict(quest: Quest, **extra: Any) -> Dict[str, Any]:
    """Quest fields plus any joined columns (place_name, completed_at, ...)"""
    data = {
        "id": quest.id,
        "title": quest.title,
        "description": quest.description,
        "category": quest.category,
        "points_reward": quest.points_reward,
        "difficulty": quest.difficulty,
        "place_id": quest.place_id,
        "is_active": quest.is_active,
        "created_at": iso(quest.created_at),
    }
    for key, value in extra.items():
        data[key] = iso(value) if isinstance(value, datetime) else value
    return data


def quest_row_to_dict(row: Any) -> Dict[str, Any]:
    """Row of (Quest, <labelled joined columns>...)"""
    mapping = dict(row._mapping)
    quest = mapping.pop("Quest")
    return quest_to_dict(quest, **mapping)


def review_to_dict(review: Review) -> Dict[str, Any]:
    return {
        "id": review.id,
        "user_id": review.user_id,
        "place_id": review.place_id,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": iso(review.created_at),
    }


def achievement_to_dict(achievement: Achievement, earned_at: Optional[datetime] = None) -> Dict[str, Any]:
    data = {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "points_required": achievement.points_required,
    }
    if earned_at is not None:
        data["earned_at"] = iso(earned_at)
    return data


def subscription_to_dict(subscription: BusinessSubscription) -> Dict[str, Any]:
    return {
        "id": subscription.id,
        "plan_type": subscription.plan_type,
        "price": subscription.price,
        "start_date": iso(subscription.start_date),
        "end_date": iso(subscription.end_date),
        "is_active": subscription.is_active,
    }
