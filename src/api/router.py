"""
FastAPI Router для Saratov Quest API
"""

from fastapi import APIRouter

# Import sub-routers
from src.api.auth import router as auth_router
from src.api.places import router as places_router
from src.api.quests import router as quests_router
from src.api.users import router as users_router
from src.api.ai import router as ai_router


# Создаем главный router
router = APIRouter()

# Include sub-routers (они уже имеют префиксы)
router.include_router(auth_router)
router.include_router(places_router)
router.include_router(quests_router)
router.include_router(users_router)
router.include_router(ai_router)  # "Volga" assistant

