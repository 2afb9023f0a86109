"""
Unit tests for the assistant (local responder, hosted model fallback,
recommendations and routes)
"""

import random
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from config.prompts import (
    FOOD_RESPONSES,
    GENERIC_RESPONSE,
    GREETING_RESPONSES,
    PREMIUM_GREETING_SUFFIX,
    SUGGESTIONS,
    WEATHER_RESPONSES,
)
from src.core.enums import AssistantTopic
from src.core.exceptions import UpstreamError
from src.services.assistant_service import (
    AssistantService,
    local_response,
    recommendation_message,
    select_topic,
    suggestions,
)
from src.services.progression_service import ProgressionService
from src.services.recommendation_service import RecommendationService, build_route, route_stop_count


# ===========================
# LOCAL RESPONDER
# ===========================


@pytest.mark.parametrize(
    "message, topic",
    [
        ("Привет, Волга!", AssistantTopic.GREETING),
        ("Здравствуйте", AssistantTopic.GREETING),
        ("Посоветуй ресторан на вечер", AssistantTopic.FOOD),
        ("Где поесть недорого?", AssistantTopic.FOOD),
        ("Какой музей открыт?", AssistantTopic.ATTRACTIONS),
        ("Что посмотреть в центре?", AssistantTopic.ATTRACTIONS),
        ("Какая завтра погода?", AssistantTopic.WEATHER),
        ("У меня маленький бюджет", AssistantTopic.BUDGET),
        ("Расскажи про трамваи", AssistantTopic.GENERIC),
    ],
)
def test_select_topic(message, topic):
    assert select_topic(message) is topic


def test_rules_are_ordered():
    # greeting wins over food when both match
    assert select_topic("Привет! Где ресторан?") is AssistantTopic.GREETING
    assert select_topic("РЕСТОРАН") is AssistantTopic.FOOD


def test_restaurant_always_food_bucket():
    rng = random.Random(3)
    for _ in range(20):
        assert local_response("Хочу в ресторан", rng=rng) in FOOD_RESPONSES


def test_premium_greeting_suffix():
    plain = local_response("привет", is_premium=False)
    premium = local_response("привет", is_premium=True)

    assert plain in GREETING_RESPONSES
    assert premium.endswith(PREMIUM_GREETING_SUFFIX)
    assert premium[: -len(PREMIUM_GREETING_SUFFIX) - 1] in GREETING_RESPONSES


def test_generic_response():
    assert local_response("abc") == GENERIC_RESPONSE


def test_suggestions_first_three():
    assert suggestions() == SUGGESTIONS[:3]


def test_recommendation_message():
    base = recommendation_message()
    assert base.startswith("На основе ваших предпочтений")

    morning_active = recommendation_message(time_of_day="morning", mood="active")
    assert "Утром" in morning_active
    assert "активного" in morning_active

    evening_relaxed = recommendation_message(time_of_day="evening", mood="relaxed")
    assert "Вечером" in evening_relaxed
    assert "спокойного" in evening_relaxed

    assert recommendation_message(time_of_day="night", mood="sleepy") == base


# ===========================
# HOSTED MODEL
# ===========================


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def mock_client():
    with patch("src.services.assistant_service.AsyncOpenAI") as client_cls:
        client = MagicMock()
        client.chat.completions.create = AsyncMock()
        client_cls.return_value = client
        yield client_cls, client


def test_client_built_with_timeout_and_no_retries(mock_client):
    client_cls, _ = mock_client

    AssistantService(api_key="sk-test")

    kwargs = client_cls.call_args.kwargs
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["max_retries"] == 0
    assert kwargs["timeout"] > 0


def test_no_key_no_client(mock_client):
    client_cls, _ = mock_client

    service = AssistantService(api_key="")

    assert service.client is None
    client_cls.assert_not_called()


@pytest.mark.asyncio
async def test_hosted_answer_used(mock_client):
    _, client = mock_client
    client.chat.completions.create.return_value = _completion("Сходите на Соколовую гору!")

    service = AssistantService(api_key="sk-test")
    result = await service.chat("Что посмотреть?")

    assert result["response"] == "Сходите на Соколовую гору!"
    assert result["suggestions"] == SUGGESTIONS[:3]
    assert result["timestamp"]

    messages = client.chat.completions.create.call_args.kwargs["messages"]
    assert messages[0]["role"] == "system"
    assert "ВОЛГА" in messages[0]["content"]
    assert "Что посмотреть?" in messages[1]["content"]


@pytest.mark.asyncio
async def test_upstream_failure_falls_back(mock_client):
    _, client = mock_client
    client.chat.completions.create.side_effect = RuntimeError("connection reset")

    service = AssistantService(api_key="sk-test")

    with pytest.raises(UpstreamError):
        await service.remote_completion("ресторан")

    result = await service.chat("Где ресторан?")
    assert result["response"] in FOOD_RESPONSES


@pytest.mark.asyncio
async def test_empty_completion_falls_back(mock_client):
    _, client = mock_client
    client.chat.completions.create.return_value = _completion("   ")

    service = AssistantService(api_key="sk-test")
    response = await service.generate_response("Какая погода?")

    assert response in WEATHER_RESPONSES


@pytest.mark.asyncio
async def test_missing_key_uses_local_responder():
    service = AssistantService(api_key="")

    result = await service.chat("Хочу в ресторан")

    assert result["response"] in FOOD_RESPONSES


# ===========================
# ROUTES / RECOMMENDATIONS
# ===========================


def test_route_stop_count():
    assert route_stop_count(10, 4) == 2
    assert route_stop_count(10, 1) == 0
    assert route_stop_count(10, 12) == 8
    assert route_stop_count(3, 12) == 3


def test_build_route_orders_and_splits_time():
    places = [{"id": i, "name": f"P{i}"} for i in range(1, 6)]

    stops = build_route(places, 6)

    assert [s["order"] for s in stops] == [1, 2, 3, 4]
    assert [s["id"] for s in stops] == [1, 2, 3, 4]
    assert all(s["estimated_time"] == 1.5 for s in stops)
    assert build_route(places, 1) == []


@pytest.mark.asyncio
async def test_route_from_catalog(seeded_session):
    route = await RecommendationService.build_route(seeded_session, preferences=[], duration=4)

    assert route["estimated_duration"] == 4
    assert [p["name"] for p in route["places"]] == ["Саратовская консерватория", "Набережная Космонавтов"]
    assert route["total_distance"] == 4
    assert route["description"] == "Персональный маршрут на 4 часов по интересным местам Саратова"

    parks = await RecommendationService.build_route(seeded_session, preferences=["park"], duration=12)
    assert [p["name"] for p in parks["places"]] == ["Парк Липки"]
    assert parks["places"][0]["estimated_time"] == 12
    assert parks["total_distance"] == 2


@pytest.mark.asyncio
async def test_recommendations_follow_history(seeded_session, make_user):
    user = await make_user("explorer")

    fresh = await RecommendationService.get_recommendations(seeded_session, user.id)
    assert fresh["user_preferences"] == []
    assert len(fresh["places"]) == 3
    # reward desc, then difficulty asc
    assert [q["id"] for q in fresh["quests"]] == [2, 3, 1]

    await ProgressionService.complete_quest(seeded_session, 2, user.id)

    result = await RecommendationService.get_recommendations(
        seeded_session, user.id, time_of_day="morning", mood="active"
    )
    assert [p["category"] for p in result["user_preferences"]] == ["culture"]
    assert [p["name"] for p in result["places"]] == ["Саратовская консерватория"]
    assert 2 not in [q["id"] for q in result["quests"]]
    assert "Утром" in result["message"]

    explicit = await RecommendationService.get_recommendations(seeded_session, user.id, category="park")
    assert [p["name"] for p in explicit["places"]] == ["Парк Липки"]
