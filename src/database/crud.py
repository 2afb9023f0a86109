"""
CRUD operations for Saratov Quest API

Async database operations using SQLAlchemy 2.0.

Helpers that are one step of a larger operation (quest completion, review
+ rating update, premium activation) only flush; the calling service owns
the transaction and commits.
"""

from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy import select, update, func, case, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from config.progression_config import DIFFICULTY_TIERS, EXPERT_TIER
from src.database.models import (
    User,
    Place,
    Quest,
    UserQuest,
    Review,
    Achievement,
    UserAchievement,
    BusinessSubscription,
)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# ===========================
# USER OPERATIONS
# ===========================


async def get_user_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_login(session: AsyncSession, login: str) -> Optional[User]:
    """
    Get user by username OR email (exact match)

    Args:
        session: Database session
        login: Username or email

    Returns:
        User model or None
    """
    stmt = select(User).where(or_(User.username == login, User.email == login)).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def user_exists(session: AsyncSession, username: str, email: str) -> bool:
    """Check whether the username or the email is already taken"""
    stmt = select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
    result = await session.execute(stmt)
    return result.scalar_one_or_none() is not None


async def create_user(
    session: AsyncSession,
    username: str,
    email: str,
    password_hash: str,
    full_name: Optional[str] = None,
) -> User:
    """
    Create new user with points=0, level=1, is_premium=False

    Returns:
        Created User model
    """
    user = User(
        username=username,
        email=email,
        password_hash=password_hash,
        full_name=full_name or "",
        points=0,
        level=1,
        is_premium=False,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)

    logger.info(f"User created: id={user.id} (@{username})")
    return user


async def update_user_profile(
    session: AsyncSession,
    user: User,
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> User:
    """Partial update: None keeps the stored value"""
    if full_name is not None:
        user.full_name = full_name
    if avatar_url is not None:
        user.avatar_url = avatar_url

    await session.commit()
    await session.refresh(user)
    return user


async def add_user_points(session: AsyncSession, user_id: int, amount: int) -> Tuple[int, int]:
    """
    Increment user points in SQL (points = points + amount)

    Returns:
        Tuple of (new_points, stored_level)
    """
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(points=User.points + amount)
    )
    result = await session.execute(select(User.points, User.level).where(User.id == user_id))
    points, level = result.one()
    return points, level


async def raise_user_level(session: AsyncSession, user_id: int, new_level: int) -> bool:
    """
    Persist new_level only if it is above the stored one

    Returns:
        True if a row was updated
    """
    result = await session.execute(
        update(User)
        .where(User.id == user_id, User.level < new_level)
        .values(level=new_level)
    )
    return result.rowcount > 0


async def get_user_stats(session: AsyncSession, user_id: int) -> Dict[str, int]:
    """
    Profile counters, each counted on its own table
    """
    quests_completed = await session.scalar(
        select(func.count(UserQuest.id)).where(UserQuest.user_id == user_id)
    )
    categories_explored = await session.scalar(
        select(func.count(func.distinct(Quest.category)))
        .select_from(UserQuest)
        .join(Quest, UserQuest.quest_id == Quest.id)
        .where(UserQuest.user_id == user_id)
    )
    reviews_written = await session.scalar(
        select(func.count(Review.id)).where(Review.user_id == user_id)
    )
    achievements_earned = await session.scalar(
        select(func.count(UserAchievement.id)).where(UserAchievement.user_id == user_id)
    )

    return {
        "quests_completed": quests_completed or 0,
        "categories_explored": categories_explored or 0,
        "reviews_written": reviews_written or 0,
        "achievements_earned": achievements_earned or 0,
    }


# ===========================
# PLACE OPERATIONS
# ===========================


async def list_places(
    session: AsyncSession,
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> Sequence[Place]:
    """
    List places: exact category filter, case-insensitive substring search on
    name/description, ordered by rating desc then newest first
    """
    stmt = select(Place)

    if category:
        stmt = stmt.where(Place.category == category)

    if search:
        pattern = _like_pattern(search)
        stmt = stmt.where(
            or_(
                Place.name.ilike(pattern, escape="\\"),
                Place.description.ilike(pattern, escape="\\"),
            )
        )

    stmt = (
        stmt.order_by(Place.rating.desc(), Place.created_at.desc(), Place.id.desc())
        .limit(limit)
        .offset(offset)
    )

    result = await session.execute(stmt)
    return result.scalars().all()


async def get_place(session: AsyncSession, place_id: int) -> Optional[Place]:
    return await session.get(Place, place_id)


async def get_place_reviews(session: AsyncSession, place_id: int) -> List[Dict[str, Any]]:
    """
    Reviews of a place (newest first) with reviewer username/avatar
    """
    stmt = (
        select(Review, User.username, User.avatar_url)
        .join(User, Review.user_id == User.id)
        .where(Review.place_id == place_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    result = await session.execute(stmt)

    return [
        {
            "id": review.id,
            "user_id": review.user_id,
            "place_id": review.place_id,
            "rating": review.rating,
            "comment": review.comment,
            "created_at": review.created_at.isoformat() if review.created_at else None,
            "username": username,
            "avatar_url": avatar_url,
        }
        for review, username, avatar_url in result.all()
    ]


async def create_place(session: AsyncSession, owner_id: int, **fields: Any) -> Place:
    """Create place owned by owner_id with rating 0"""
    place = Place(owner_id=owner_id, rating=0.0, **fields)
    session.add(place)
    await session.commit()
    await session.refresh(place)

    logger.info(f"Place created: id={place.id} ({place.name}) by user {owner_id}")
    return place


async def update_place(session: AsyncSession, place: Place, **fields: Any) -> Place:
    """Partial merge: fields with None keep their prior value"""
    for name, value in fields.items():
        if value is not None:
            setattr(place, name, value)

    await session.commit()
    await session.refresh(place)
    return place


async def get_review(session: AsyncSession, user_id: int, place_id: int) -> Optional[Review]:
    stmt = select(Review).where(Review.user_id == user_id, Review.place_id == place_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def add_review(
    session: AsyncSession,
    user_id: int,
    place_id: int,
    rating: int,
    comment: Optional[str] = None,
) -> Review:
    """Insert review (flush only)"""
    review = Review(user_id=user_id, place_id=place_id, rating=rating, comment=comment or "")
    session.add(review)
    await session.flush()
    return review


async def get_average_rating(session: AsyncSession, place_id: int) -> Optional[float]:
    """Mean of all review ratings for a place, None without reviews"""
    avg = await session.scalar(select(func.avg(Review.rating)).where(Review.place_id == place_id))
    return float(avg) if avg is not None else None


async def set_place_rating(session: AsyncSession, place_id: int, rating: float) -> None:
    await session.execute(
        update(Place)
        .where(Place.id == place_id)
        .values(rating=rating)
    )


# ===========================
# QUEST OPERATIONS
# ===========================


def _quest_with_place_stmt():
    return select(
        Quest,
        Place.name.label("place_name"),
        Place.latitude,
        Place.longitude,
        Place.address,
        Place.image_url.label("place_image"),
    ).outerjoin(Place, Quest.place_id == Place.id)


async def list_quests(
    session: AsyncSession,
    category: Optional[str] = None,
    difficulty: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
) -> List[Any]:
    """
    Active quests joined with place info, newest first

    Returns:
        Rows of (Quest, place_name, latitude, longitude, address, place_image)
    """
    stmt = _quest_with_place_stmt().where(Quest.is_active.is_(True))

    if category:
        stmt = stmt.where(Quest.category == category)

    if difficulty is not None:
        stmt = stmt.where(Quest.difficulty == difficulty)

    stmt = stmt.order_by(Quest.created_at.desc(), Quest.id.desc()).limit(limit).offset(offset)

    result = await session.execute(stmt)
    return result.all()


async def get_quest_with_place(session: AsyncSession, quest_id: int) -> Optional[Any]:
    result = await session.execute(_quest_with_place_stmt().where(Quest.id == quest_id))
    return result.one_or_none()


async def get_active_quest(session: AsyncSession, quest_id: int) -> Optional[Quest]:
    stmt = select(Quest).where(Quest.id == quest_id, Quest.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def create_quest(
    session: AsyncSession,
    title: str,
    description: str,
    category: str,
    points_reward: int,
    difficulty: int,
    place_id: Optional[int] = None,
) -> Quest:
    quest = Quest(
        title=title,
        description=description,
        category=category,
        points_reward=points_reward,
        difficulty=difficulty,
        place_id=place_id,
        is_active=True,
    )
    session.add(quest)
    await session.commit()
    await session.refresh(quest)

    logger.info(f"Quest created: id={quest.id} ({title}), reward={points_reward}")
    return quest


async def get_user_quest(session: AsyncSession, user_id: int, quest_id: int) -> Optional[UserQuest]:
    stmt = select(UserQuest).where(UserQuest.user_id == user_id, UserQuest.quest_id == quest_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def add_user_quest(
    session: AsyncSession, user_id: int, quest_id: int, points_earned: int
) -> UserQuest:
    """Insert completion row (flush only, unique (user_id, quest_id))"""
    user_quest = UserQuest(
        user_id=user_id,
        quest_id=quest_id,
        points_earned=points_earned,
        completed_at=datetime.now(UTC),
    )
    session.add(user_quest)
    await session.flush()
    return user_quest


async def get_completed_quests(session: AsyncSession, user_id: int) -> List[Any]:
    """
    Rows of (Quest, completed_at, points_earned, place_name), newest completion first
    """
    stmt = (
        select(Quest, UserQuest.completed_at, UserQuest.points_earned, Place.name.label("place_name"))
        .join(Quest, UserQuest.quest_id == Quest.id)
        .outerjoin(Place, Quest.place_id == Place.id)
        .where(UserQuest.user_id == user_id)
        .order_by(UserQuest.completed_at.desc(), UserQuest.id.desc())
    )
    result = await session.execute(stmt)
    return result.all()


def _not_completed_by(user_id: int):
    completed = select(UserQuest.quest_id).where(UserQuest.user_id == user_id)
    return Quest.id.not_in(completed)


async def get_available_quests(session: AsyncSession, user_id: int) -> List[Any]:
    """
    Active quests the user has not completed: difficulty asc, reward desc
    """
    stmt = (
        _quest_with_place_stmt()
        .where(Quest.is_active.is_(True), _not_completed_by(user_id))
        .order_by(Quest.difficulty.asc(), Quest.points_reward.desc(), Quest.id.asc())
    )
    result = await session.execute(stmt)
    return result.all()


async def get_recommended_quests(session: AsyncSession, user_id: int, limit: int = 5) -> List[Any]:
    """
    Active quests the user has not completed: reward desc, difficulty asc
    """
    stmt = (
        _quest_with_place_stmt()
        .where(Quest.is_active.is_(True), _not_completed_by(user_id))
        .order_by(Quest.points_reward.desc(), Quest.difficulty.asc(), Quest.id.asc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return result.all()


async def get_quest_stats(session: AsyncSession, user_id: int) -> Dict[str, int]:
    """
    Completed quest counts by difficulty tier plus total points from quests

    Difficulties above the named tiers all count as expert.
    """
    tier_columns = [
        func.coalesce(func.sum(case((Quest.difficulty == difficulty, 1), else_=0)), 0).label(f"{tier}_completed")
        for difficulty, tier in DIFFICULTY_TIERS.items()
    ]
    tier_columns.append(
        func.coalesce(
            func.sum(case((Quest.difficulty > max(DIFFICULTY_TIERS), 1), else_=0)), 0
        ).label(f"{EXPERT_TIER}_completed")
    )

    stmt = (
        select(
            func.count(UserQuest.id).label("total_completed"),
            func.coalesce(func.sum(UserQuest.points_earned), 0).label("total_points"),
            *tier_columns,
        )
        .select_from(UserQuest)
        .join(Quest, UserQuest.quest_id == Quest.id)
        .where(UserQuest.user_id == user_id)
    )
    row = (await session.execute(stmt)).one()

    return {key: int(value or 0) for key, value in row._mapping.items()}


async def get_category_preferences(session: AsyncSession, user_id: int) -> List[Dict[str, Any]]:
    """
    Completed quest categories: frequency desc, then average points desc
    """
    frequency = func.count(UserQuest.id).label("frequency")
    avg_points = func.avg(UserQuest.points_earned).label("avg_points")
    stmt = (
        select(Quest.category, frequency, avg_points)
        .select_from(UserQuest)
        .join(Quest, UserQuest.quest_id == Quest.id)
        .where(UserQuest.user_id == user_id)
        .group_by(Quest.category)
        .order_by(frequency.desc(), avg_points.desc(), Quest.category.asc())
    )
    result = await session.execute(stmt)

    return [
        {
            "category": row.category,
            "frequency": int(row.frequency),
            "avg_points": float(row.avg_points) if row.avg_points is not None else 0.0,
        }
        for row in result.all()
    ]


# ===========================
# RECOMMENDATION / ROUTE QUERIES
# ===========================


async def get_places_by_review_rating(
    session: AsyncSession,
    categories: Optional[List[str]] = None,
    limit: int = 10,
) -> List[Tuple[Place, Optional[float]]]:
    """
    Places ordered by mean review rating (no reviews last), then stored rating

    Returns:
        List of (Place, avg_rating)
    """
    avg_rating = func.avg(Review.rating).label("avg_rating")
    stmt = select(Place, avg_rating).outerjoin(Review, Review.place_id == Place.id)

    if categories:
        stmt = stmt.where(Place.category.in_(categories))

    stmt = (
        stmt.group_by(Place.id)
        .order_by(avg_rating.desc().nulls_last(), Place.rating.desc(), Place.id.asc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return [(place, float(avg) if avg is not None else None) for place, avg in result.all()]


async def get_top_rated_places(
    session: AsyncSession,
    categories: Optional[List[str]] = None,
    limit: int = 10,
) -> Sequence[Place]:
    stmt = select(Place)

    if categories:
        stmt = stmt.where(Place.category.in_(categories))

    stmt = stmt.order_by(Place.rating.desc(), Place.id.asc()).limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


# ===========================
# ACHIEVEMENTS
# ===========================


async def get_all_achievements(session: AsyncSession) -> Sequence[Achievement]:
    stmt = select(Achievement).order_by(Achievement.points_required.asc(), Achievement.id.asc())
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_achievement(session: AsyncSession, achievement_id: int) -> Optional[Achievement]:
    return await session.get(Achievement, achievement_id)


async def get_earned_achievements(
    session: AsyncSession, user_id: int
) -> List[Tuple[Achievement, datetime]]:
    """(Achievement, earned_at) pairs, most recent first"""
    stmt = (
        select(Achievement, UserAchievement.earned_at)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())
    )
    result = await session.execute(stmt)
    return [(achievement, earned_at) for achievement, earned_at in result.all()]


async def add_user_achievement(
    session: AsyncSession, user_id: int, achievement_id: int
) -> UserAchievement:
    """Insert claim row (flush only, unique (user_id, achievement_id))"""
    user_achievement = UserAchievement(
        user_id=user_id,
        achievement_id=achievement_id,
        earned_at=datetime.now(UTC),
    )
    session.add(user_achievement)
    await session.flush()
    return user_achievement


# ===========================
# LEADERBOARD
# ===========================


async def get_leaderboard(
    session: AsyncSession, limit: int = 20, offset: int = 0
) -> List[Tuple[User, int]]:
    """
    Users ordered by points desc, level desc, id asc

    Returns:
        List of (User, quests_completed)
    """
    quests_completed = func.count(UserQuest.id).label("quests_completed")
    stmt = (
        select(User, quests_completed)
        .outerjoin(UserQuest, UserQuest.user_id == User.id)
        .group_by(User.id)
        .order_by(User.points.desc(), User.level.desc(), User.id.asc())
        .limit(limit)
        .offset(offset)
    )
    result = await session.execute(stmt)
    return [(user, int(count)) for user, count in result.all()]


async def count_users_ahead(session: AsyncSession, points: int, level: int, user_id: int) -> int:
    """Number of users strictly ahead under (points desc, level desc, id asc)"""
    stmt = select(func.count(User.id)).where(
        or_(
            User.points > points,
            and_(User.points == points, User.level > level),
            and_(User.points == points, User.level == level, User.id < user_id),
        )
    )
    return (await session.scalar(stmt)) or 0


async def count_users(session: AsyncSession) -> int:
    return (await session.scalar(select(func.count(User.id)))) or 0


# ===========================
# ACTIVITY FEED
# ===========================


async def get_recent_completions(session: AsyncSession, user_id: int, limit: int) -> List[Any]:
    stmt = (
        select(Quest.title, UserQuest.points_earned, UserQuest.completed_at, Place.name.label("place_name"))
        .select_from(UserQuest)
        .join(Quest, UserQuest.quest_id == Quest.id)
        .outerjoin(Place, Quest.place_id == Place.id)
        .where(UserQuest.user_id == user_id)
        .order_by(UserQuest.completed_at.desc())
        .limit(limit)
    )
    return (await session.execute(stmt)).all()


async def get_recent_reviews(session: AsyncSession, user_id: int, limit: int) -> List[Any]:
    stmt = (
        select(Place.name, Review.rating, Review.created_at)
        .select_from(Review)
        .join(Place, Review.place_id == Place.id)
        .where(Review.user_id == user_id)
        .order_by(Review.created_at.desc())
        .limit(limit)
    )
    return (await session.execute(stmt)).all()


async def get_recent_achievements(session: AsyncSession, user_id: int, limit: int) -> List[Any]:
    stmt = (
        select(Achievement.name, UserAchievement.earned_at)
        .select_from(UserAchievement)
        .join(Achievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.earned_at.desc())
        .limit(limit)
    )
    return (await session.execute(stmt)).all()


# ===========================
# SUBSCRIPTIONS
# ===========================


async def add_subscription(
    session: AsyncSession,
    user_id: int,
    plan_type: str,
    price: int,
    start_date: datetime,
    end_date: datetime,
) -> BusinessSubscription:
    """Insert subscription (flush only)"""
    subscription = BusinessSubscription(
        user_id=user_id,
        plan_type=plan_type,
        price=price,
        start_date=start_date,
        end_date=end_date,
        is_active=True,
    )
    session.add(subscription)
    await session.flush()
    return subscription


async def set_user_premium(session: AsyncSession, user_id: int, is_premium: bool = True) -> None:
    await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(is_premium=is_premium)
    )
