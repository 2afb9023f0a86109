# coding: utf-8
"""
Saratov Quest gamification configuration

Points/level rules, quest difficulty tiers, premium plans, place
categories and the initial catalog rows.
"""

from dataclasses import dataclass
from typing import Dict, List

from src.core.enums import PlanType


# =======================
# LEVELS
# =======================

# Каждые 100 баллов = новый уровень
POINTS_PER_LEVEL: int = 100


def level_for_points(points: int) -> int:
    """
    Level derived from a point total: floor(points / 100) + 1
    """
    return max(points, 0) // POINTS_PER_LEVEL + 1


# =======================
# QUEST DIFFICULTY
# =======================

MIN_DIFFICULTY: int = 1
MAX_DIFFICULTY: int = 5

# Quest difficulty -> stats bucket (4 and 5 both count as expert)
DIFFICULTY_TIERS: Dict[int, str] = {
    1: "easy",
    2: "medium",
    3: "hard",
}
EXPERT_TIER: str = "expert"


MIN_QUEST_REWARD: int = 1
MAX_QUEST_REWARD: int = 1000


# =======================
# PREMIUM PLANS
# =======================


@dataclass(frozen=True)
class PlanPricing:
    """Pricing for a premium plan"""

    plan_type: str
    price: int  # RUB
    duration_months: int


PREMIUM_PLANS: Dict[str, PlanPricing] = {
    PlanType.MONTHLY.value: PlanPricing(
        plan_type=PlanType.MONTHLY.value, price=299, duration_months=1
    ),
    PlanType.YEARLY.value: PlanPricing(
        plan_type=PlanType.YEARLY.value, price=1999, duration_months=12
    ),
}


def get_plan_pricing(plan_type: str) -> PlanPricing:
    """
    Raises:
        KeyError: for an unknown plan
    """
    return PREMIUM_PLANS[plan_type]


# =======================
# PLACE CATEGORIES
# =======================

PLACE_CATEGORIES: List[Dict[str, str]] = [
    {"id": "restaurant", "name": "Рестораны", "icon": "🍽️"},
    {"id": "cafe", "name": "Кафе", "icon": "☕"},
    {"id": "park", "name": "Парки", "icon": "🌳"},
    {"id": "museum", "name": "Музеи", "icon": "🏛️"},
    {"id": "culture", "name": "Культура", "icon": "🎭"},
    {"id": "attraction", "name": "Достопримечательности", "icon": "🏰"},
    {"id": "shopping", "name": "Шоппинг", "icon": "🛍️"},
    {"id": "entertainment", "name": "Развлечения", "icon": "🎮"},
    {"id": "sport", "name": "Спорт", "icon": "⚽"},
    {"id": "hotel", "name": "Отели", "icon": "🏨"},
]


# =======================
# ROUTE PLANNER
# =======================

DEFAULT_ROUTE_DURATION_HOURS: int = 4
MIN_ROUTE_DURATION_HOURS: int = 1
MAX_ROUTE_DURATION_HOURS: int = 12
HOURS_PER_STOP: float = 1.5
ROUTE_CANDIDATE_LIMIT: int = 10
# Placeholder distance between consecutive stops (km), not a real routing result
DISTANCE_PER_STOP_KM: int = 2

RECOMMENDED_PLACES_LIMIT: int = 10
RECOMMENDED_QUESTS_LIMIT: int = 5
PREFERRED_CATEGORIES_LIMIT: int = 3


# =======================
# SEED DATA
# =======================

SEED_ACHIEVEMENTS: List[Dict] = [
    {"name": "Первые шаги", "description": "Зарегистрировались в приложении", "icon": "🎯", "points_required": 0},
    {"name": "Исследователь", "description": "Посетили 5 мест", "icon": "🗺️", "points_required": 50},
    {"name": "Гурман", "description": "Посетили 10 ресторанов", "icon": "🍽️", "points_required": 100},
    {"name": "Знаток Саратова", "description": "Набрали 500 баллов", "icon": "🏆", "points_required": 500},
    {"name": "Мастер квестов", "description": "Выполнили 20 квестов", "icon": "⭐", "points_required": 200},
]

SEED_PLACES: List[Dict] = [
    {
        "name": "Парк Липки",
        "description": "Старейший парк Саратова с красивыми аллеями",
        "category": "park",
        "latitude": 51.533562,
        "longitude": 46.034266,
        "address": "ул. Радищева, Саратов",
        "rating": 4.5,
    },
    {
        "name": "Саратовская консерватория",
        "description": "Знаменитая консерватория имени Л.В. Собинова",
        "category": "culture",
        "latitude": 51.533333,
        "longitude": 46.008889,
        "address": "пр. Кирова, 1, Саратов",
        "rating": 4.8,
    },
    {
        "name": "Набережная Космонавтов",
        "description": "Живописная набережная Волги",
        "category": "attraction",
        "latitude": 51.520833,
        "longitude": 46.030556,
        "address": "Набережная Космонавтов, Саратов",
        "rating": 4.6,
    },
]

# place_index points into SEED_PLACES
SEED_QUESTS: List[Dict] = [
    {
        "title": "Прогулка по Липкам",
        "description": "Посетите старейший парк города и сделайте фото у фонтана",
        "category": "walk",
        "points_reward": 20,
        "difficulty": 1,
        "place_index": 0,
    },
    {
        "title": "Культурный вечер",
        "description": "Посетите концерт в консерватории",
        "category": "culture",
        "points_reward": 50,
        "difficulty": 2,
        "place_index": 1,
    },
    {
        "title": "Волжские виды",
        "description": "Прогуляйтесь по набережной и насладитесь видом на Волгу",
        "category": "nature",
        "points_reward": 30,
        "difficulty": 1,
        "place_index": 2,
    },
]
