"""
Database models for Saratov Quest API

SQLAlchemy 2.0 models with full type hints
"""

from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy import (
    String,
    Text,
    Integer,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models"""

    pass


# ===========================
# MODELS
# ===========================


class User(Base):
    """
    User model

    Tracks:
    - Credentials (username/email + bcrypt hash)
    - Gamification state (points, level)
    - Premium flag (set by BusinessSubscription activation)

    Note: level is derived from points (floor(points / 100) + 1) and only
    ever moves up.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(50), unique=True, index=True, nullable=False, comment="Public username"
    )
    email: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False, comment="Login email"
    )
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="bcrypt hash"
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default="")
    avatar_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Gamification
    points: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False, comment="Total points earned"
    )
    level: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False, comment="floor(points / 100) + 1"
    )

    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    places: Mapped[List["Place"]] = relationship(back_populates="owner")
    reviews: Mapped[List["Review"]] = relationship(back_populates="user")
    completed_quests: Mapped[List["UserQuest"]] = relationship(back_populates="user")
    achievements: Mapped[List["UserAchievement"]] = relationship(back_populates="user")
    subscriptions: Mapped[List["BusinessSubscription"]] = relationship(
        back_populates="user"
    )

    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
        CheckConstraint("level >= 1", name="ck_users_level_positive"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, points={self.points}, level={self.level})>"


class Place(Base):
    """
    Place (venue / sight) on the city map

    rating is the rounded mean of the place's reviews, recomputed on every
    new review; 0 while there are no reviews.
    """

    __tablename__ = "places"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    category: Mapped[str] = mapped_column(String(50), index=True, nullable=False)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default="")
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, default="")
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default="")
    image_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default="")

    rating: Mapped[float] = mapped_column(
        Float, default=0.0, nullable=False, comment="Mean review rating (1 decimal)"
    )
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    owner_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # Relationships
    owner: Mapped[Optional["User"]] = relationship(back_populates="places")
    reviews: Mapped[List["Review"]] = relationship(back_populates="place")
    quests: Mapped[List["Quest"]] = relationship(back_populates="place")

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_places_rating_range"),
        Index("ix_places_rating_created", "rating", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name={self.name}, category={self.category}, rating={self.rating})>"


class Quest(Base):
    """Quest - a task a user completes once for a points reward"""

    __tablename__ = "quests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), index=True, nullable=True)

    points_reward: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    difficulty: Mapped[int] = mapped_column(
        Integer, default=1, nullable=False, comment="1 (easy) .. 5 (expert)"
    )

    place_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("places.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    place: Mapped[Optional["Place"]] = relationship(back_populates="quests")
    completions: Mapped[List["UserQuest"]] = relationship(back_populates="quest")

    __table_args__ = (
        CheckConstraint("points_reward > 0", name="ck_quests_reward_positive"),
        CheckConstraint("difficulty >= 1 AND difficulty <= 5", name="ck_quests_difficulty_range"),
    )

    def __repr__(self) -> str:
        return f"<Quest(id={self.id}, title={self.title}, reward={self.points_reward})>"


class UserQuest(Base):
    """
    Quest completion record

    Exactly one row per (user, quest). points_earned is frozen at
    completion time.
    """

    __tablename__ = "user_quests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    quest_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("quests.id", ondelete="CASCADE"), index=True, nullable=False
    )
    points_earned: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="completed_quests")
    quest: Mapped["Quest"] = relationship(back_populates="completions")

    __table_args__ = (UniqueConstraint("user_id", "quest_id", name="uq_user_quest"),)

    def __repr__(self) -> str:
        return f"<UserQuest(user_id={self.user_id}, quest_id={self.quest_id}, points={self.points_earned})>"


class Review(Base):
    """Place review - at most one per (user, place)"""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    place_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("places.id", ondelete="CASCADE"), index=True, nullable=False
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="reviews")
    place: Mapped["Place"] = relationship(back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("user_id", "place_id", name="uq_user_place_review"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review(user_id={self.user_id}, place_id={self.place_id}, rating={self.rating})>"


class Achievement(Base):
    """Achievement catalog entry (seeded, not user-editable)"""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    points_required: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("points_required >= 0", name="ck_achievements_points_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Achievement(id={self.id}, name={self.name}, points_required={self.points_required})>"


class UserAchievement(Base):
    """Claimed achievement - unique per (user, achievement)"""

    __tablename__ = "user_achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    achievement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False
    )
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="achievements")
    achievement: Mapped["Achievement"] = relationship()

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )


class BusinessSubscription(Base):
    """Premium subscription record; activating one flips User.is_premium"""

    __tablename__ = "business_subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    plan_type: Mapped[str] = mapped_column(
        String(20), nullable=False, comment="monthly / yearly"
    )
    price: Mapped[int] = mapped_column(Integer, nullable=False, comment="Price in RUB")
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="subscriptions")

    def __repr__(self) -> str:
        return f"<BusinessSubscription(user_id={self.user_id}, plan={self.plan_type}, active={self.is_active})>"
