"""
Core Enums - shared value types for the API and services.
"""

from enum import Enum


class PlanType(str, Enum):
    """Premium subscription plan"""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class ActivityType(str, Enum):
    """User activity feed entry type"""

    QUEST_COMPLETED = "quest_completed"
    REVIEW_ADDED = "review_added"
    ACHIEVEMENT_EARNED = "achievement_earned"


class AssistantTopic(str, Enum):
    """Category picked by the local assistant responder"""

    GREETING = "greeting"
    FOOD = "food"
    ATTRACTIONS = "attractions"
    WEATHER = "weather"
    BUDGET = "budget"
    GENERIC = "generic"


class AchievementStatus(str, Enum):
    """Read-time achievement state for one user"""

    EARNED = "earned"  # UserAchievement row exists
    AVAILABLE = "available"  # points >= points_required, not claimed yet
    LOCKED = "locked"  # points < points_required
