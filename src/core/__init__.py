"""
Core module - shared enums and errors.
"""

from src.core.enums import (
    PlanType,
    ActivityType,
    AssistantTopic,
    AchievementStatus,
)
from src.core.exceptions import (
    AppError,
    ValidationError,
    AuthError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    StorageError,
    UpstreamError,
)

__all__ = [
    "PlanType",
    "ActivityType",
    "AssistantTopic",
    "AchievementStatus",
    "AppError",
    "ValidationError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "UpstreamError",
]
