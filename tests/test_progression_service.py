"""
Unit tests for progression (quest completion, levels, achievements, ranking)
"""

import random
from types import SimpleNamespace

import pytest

from src.core.enums import AchievementStatus
from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.database import crud
from src.services import progression_service
from src.services.catalog_service import CatalogService
from src.services.progression_service import (
    ProgressionService,
    partition_achievements,
)


async def _add_quest(session, reward: int, difficulty: int = 1, category: str = "walk"):
    return await crud.create_quest(
        session,
        title=f"Квест на {reward} баллов",
        description="Тестовый квест для проверки прогресса",
        category=category,
        points_reward=reward,
        difficulty=difficulty,
    )


# ===========================
# QUEST COMPLETION
# ===========================


@pytest.mark.asyncio
async def test_complete_quest_awards_points(seeded_session, make_user):
    user = await make_user("walker")

    result = await ProgressionService.complete_quest(seeded_session, 2, user.id)

    assert result["points_earned"] == 50
    assert result["total_points"] == 50
    assert result["level"] == 1
    assert result["leveled_up"] is False
    assert result["quest"] == {"id": 2, "title": "Культурный вечер", "points_reward": 50}

    await seeded_session.refresh(user)
    assert user.points == 50


@pytest.mark.asyncio
async def test_complete_quest_twice_is_conflict(seeded_session, make_user):
    user = await make_user("walker")

    await ProgressionService.complete_quest(seeded_session, 1, user.id)

    with pytest.raises(ConflictError):
        await ProgressionService.complete_quest(seeded_session, 1, user.id)

    await seeded_session.refresh(user)
    assert user.points == 20


@pytest.mark.asyncio
async def test_complete_inactive_quest_not_found(seeded_session, make_user):
    user = await make_user("walker")
    quest = await crud.get_active_quest(seeded_session, 1)
    quest.is_active = False
    await seeded_session.commit()

    with pytest.raises(NotFoundError):
        await ProgressionService.complete_quest(seeded_session, 1, user.id)

    with pytest.raises(NotFoundError):
        await ProgressionService.complete_quest(seeded_session, 999, user.id)

    await seeded_session.refresh(user)
    assert user.points == 0
    assert await crud.get_user_quest(seeded_session, user.id, 1) is None


@pytest.mark.asyncio
async def test_concurrent_duplicate_completion(seeded_session, make_user, monkeypatch):
    """
    A completion whose pre-check ran before the other request committed
    hits the unique constraint and is reported as a conflict
    """
    user = await make_user("walker")
    await ProgressionService.complete_quest(seeded_session, 3, user.id)

    async def stale_check(*args, **kwargs):
        return None

    monkeypatch.setattr(progression_service.crud, "get_user_quest", stale_check)

    with pytest.raises(ConflictError):
        await ProgressionService.complete_quest(seeded_session, 3, user.id)

    monkeypatch.undo()

    await seeded_session.refresh(user)
    assert user.points == 30


@pytest.mark.asyncio
async def test_two_fifty_points_reaches_level_three(db_session, make_user):
    """Rewards 100 + 150 -> 250 points -> level 3"""
    user = await make_user("climber")
    first = await _add_quest(db_session, 100)
    second = await _add_quest(db_session, 150)

    r1 = await ProgressionService.complete_quest(db_session, first.id, user.id)
    assert (r1["total_points"], r1["level"], r1["leveled_up"]) == (100, 2, True)

    r2 = await ProgressionService.complete_quest(db_session, second.id, user.id)
    assert (r2["total_points"], r2["level"], r2["leveled_up"]) == (250, 3, True)

    await db_session.refresh(user)
    assert user.points == 250
    assert user.level == 3


@pytest.mark.asyncio
async def test_level_never_decreases(db_session, make_user):
    user = await make_user("veteran", points=10, level=5)
    quest = await _add_quest(db_session, 20)

    result = await ProgressionService.complete_quest(db_session, quest.id, user.id)

    assert result["total_points"] == 30
    assert result["level"] == 5
    assert result["leveled_up"] is False

    await db_session.refresh(user)
    assert user.level == 5


@pytest.mark.asyncio
async def test_points_equal_sum_of_completed_rewards(db_session, make_user):
    user = await make_user("collector")
    rewards = [5, 15, 35, 95, 120]
    for reward in rewards:
        quest = await _add_quest(db_session, reward)
        await ProgressionService.complete_quest(db_session, quest.id, user.id)

    await db_session.refresh(user)
    assert user.points == sum(rewards)
    assert user.level == sum(rewards) // 100 + 1

    stats = await ProgressionService.get_quest_stats(db_session, user.id)
    assert stats["stats"]["total_completed"] == len(rewards)
    assert stats["stats"]["total_points"] == sum(rewards)


@pytest.mark.asyncio
async def test_quest_stats_tiers_and_categories(db_session, make_user):
    user = await make_user("ranger")
    for reward, difficulty, category in [
        (10, 1, "walk"),
        (20, 2, "walk"),
        (30, 3, "culture"),
        (40, 4, "nature"),
        (50, 5, "walk"),
    ]:
        quest = await _add_quest(db_session, reward, difficulty=difficulty, category=category)
        await ProgressionService.complete_quest(db_session, quest.id, user.id)

    result = await ProgressionService.get_quest_stats(db_session, user.id)

    assert result["stats"] == {
        "total_completed": 5,
        "total_points": 150,
        "easy_completed": 1,
        "medium_completed": 1,
        "hard_completed": 1,
        "expert_completed": 2,
    }
    assert result["categories"][0] == {"category": "walk", "count": 3}
    assert {c["category"] for c in result["categories"]} == {"walk", "culture", "nature"}


@pytest.mark.asyncio
async def test_my_quests_split(seeded_session, make_user):
    user = await make_user("walker")
    await ProgressionService.complete_quest(seeded_session, 2, user.id)

    result = await CatalogService.my_quests(seeded_session, user.id)

    assert [q["id"] for q in result["completed"]] == [2]
    assert result["completed"][0]["points_earned"] == 50
    assert result["completed"][0]["place_name"] == "Саратовская консерватория"
    # difficulty asc, then reward desc
    assert [q["id"] for q in result["available"]] == [3, 1]


# ===========================
# ACHIEVEMENTS
# ===========================


def _achievement(achievement_id: int, points_required: int):
    return SimpleNamespace(id=achievement_id, points_required=points_required)


def test_partition_is_exhaustive_and_disjoint():
    rng = random.Random(7)
    for _ in range(200):
        catalog = [_achievement(i, rng.randint(0, 600)) for i in range(1, rng.randint(1, 12))]
        earned = {a.id for a in catalog if rng.random() < 0.3}
        points = rng.randint(0, 600)

        buckets = partition_achievements(catalog, earned, points)
        ids = [a.id for bucket in buckets.values() for a in bucket]

        assert sorted(ids) == [a.id for a in catalog]
        assert {a.id for a in buckets[AchievementStatus.EARNED]} == earned
        assert all(a.points_required <= points for a in buckets[AchievementStatus.AVAILABLE])
        assert all(a.points_required > points for a in buckets[AchievementStatus.LOCKED])


@pytest.mark.asyncio
async def test_get_achievements_is_read_only(seeded_session, make_user):
    user = await make_user("reader", points=120, level=2)

    result = await ProgressionService.get_achievements(seeded_session, user)

    assert result["user_points"] == 120
    assert result["earned"] == []
    assert [a["name"] for a in result["available"]] == ["Первые шаги", "Исследователь", "Гурман"]
    assert [a["name"] for a in result["locked"]] == ["Мастер квестов", "Знаток Саратова"]

    # reading twice never awards anything
    again = await ProgressionService.get_achievements(seeded_session, user)
    assert again["earned"] == []


@pytest.mark.asyncio
async def test_claim_achievement(seeded_session, make_user):
    user = await make_user("claimer", points=60)
    catalog = {a.name: a for a in await crud.get_all_achievements(seeded_session)}

    claimed = await ProgressionService.claim_achievement(seeded_session, user, catalog["Исследователь"].id)
    assert claimed["achievement"]["name"] == "Исследователь"
    assert claimed["achievement"]["earned_at"]

    result = await ProgressionService.get_achievements(seeded_session, user)
    assert [a["name"] for a in result["earned"]] == ["Исследователь"]
    assert "Исследователь" not in [a["name"] for a in result["available"]]

    with pytest.raises(ConflictError):
        await ProgressionService.claim_achievement(seeded_session, user, catalog["Исследователь"].id)

    with pytest.raises(ValidationError):
        await ProgressionService.claim_achievement(seeded_session, user, catalog["Гурман"].id)

    with pytest.raises(NotFoundError):
        await ProgressionService.claim_achievement(seeded_session, user, 999)


# ===========================
# LEADERBOARD / RANK
# ===========================


@pytest.mark.asyncio
async def test_leaderboard_is_a_strict_total_order(db_session, make_user):
    """Ties on points and level are broken by id; rank matches board position"""
    rng = random.Random(11)
    users = []
    for i in range(25):
        points = rng.choice([0, 100, 250])
        users.append(await make_user(f"user{i:02d}", points=points, level=rng.choice([1, 2, 3])))

    expected = sorted(users, key=lambda u: (-u.points, -u.level, u.id))

    board = await ProgressionService.get_leaderboard(db_session, limit=100)
    assert [e["id"] for e in board] == [u.id for u in expected]
    assert [e["position"] for e in board] == list(range(1, len(users) + 1))

    ranks = []
    for user in users:
        rank = await ProgressionService.get_rank(db_session, user)
        assert rank["total_users"] == len(users)
        ranks.append(rank["rank"])

    assert sorted(ranks) == list(range(1, len(users) + 1))
    for position, user in enumerate(expected, start=1):
        assert ranks[users.index(user)] == position


@pytest.mark.asyncio
async def test_leaderboard_positions_and_rank(db_session, make_user):
    a = await make_user("anna", points=300, level=4)
    b = await make_user("boris", points=300, level=4)
    c = await make_user("clara", points=500, level=6)
    d = await make_user("dmitry", points=300, level=3)

    board = await ProgressionService.get_leaderboard(db_session)
    assert [e["username"] for e in board] == ["clara", "anna", "boris", "dmitry"]
    assert [e["position"] for e in board] == [1, 2, 3, 4]
    assert all("email" not in e for e in board)
    assert all(e["quests_completed"] == 0 for e in board)

    page = await ProgressionService.get_leaderboard(db_session, limit=2, offset=2)
    assert [(e["username"], e["position"]) for e in page] == [("boris", 3), ("dmitry", 4)]

    for user, expected in [(c, 1), (a, 2), (b, 3), (d, 4)]:
        rank = await ProgressionService.get_rank(db_session, user)
        assert rank == {"rank": expected, "total_users": 4}
