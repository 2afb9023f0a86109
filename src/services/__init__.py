"""Application services (catalog, progression, users, assistant)"""
from .assistant_service import AssistantService
from .catalog_service import CatalogService
from .progression_service import ProgressionService
from .recommendation_service import RecommendationService
from .user_service import UserService

__all__ = [
    'AssistantService',
    'CatalogService',
    'ProgressionService',
    'RecommendationService',
    'UserService',
]
