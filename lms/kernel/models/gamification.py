"""
Gamification models - per-student XP/streak state, point log, level progress,
missions and achievements.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.kernel.models.base import Base, UTCDateTime, utcnow


class StudentGamification(Base):
    """
    Current gamification state, one row per student (created lazily).
    current_level always equals calculate_level(xp_total).
    """

    __tablename__ = "student_gamification"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    xp_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    available_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_streak_update: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("xp_total >= 0", name="ck_student_gamification_xp_non_negative"),
        CheckConstraint("current_level >= 1", name="ck_student_gamification_level_positive"),
        CheckConstraint("streak_days >= 0", name="ck_student_gamification_streak_non_negative"),
    )


class PointLog(Base):
    """Append-only audit of XP awards (records the nominal, pre-multiplier amount)."""

    __tablename__ = "point_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    earned_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)


class LevelProgress(Base):
    """Per-student progress on a content level. completed never flips back to False."""

    __tablename__ = "level_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level_id: Mapped[int] = mapped_column(
        ForeignKey("levels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    percent_complete: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    started_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("student_id", "level_id", name="uq_level_progress_student_level"),
        CheckConstraint("percent_complete BETWEEN 0 AND 100", name="ck_level_progress_percent_range"),
    )


class Mission(Base):
    """Mission definition (global catalogue), looked up by its type tag."""

    __tablename__ = "missions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    icon: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    target_value: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_daily: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class MissionProgress(Base):
    """
    Student progress on a mission. week_start (a Monday) is only set on rows
    seeded by the weekly sync for Pro students.
    """

    __tablename__ = "mission_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    mission_id: Mapped[int] = mapped_column(
        ForeignKey("missions.id", ondelete="CASCADE"),
        nullable=False,
    )
    week_start: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    current_progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reward_claimed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    started_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    mission: Mapped["Mission"] = relationship("Mission")

    __table_args__ = (
        Index("ix_mission_progress_student_mission", "student_id", "mission_id"),
        Index("ix_mission_progress_student_week", "student_id", "week_start"),
    )


class AchievementCondition(str, Enum):
    """Stat an achievement is measured against."""
    LEVEL_REACHED = "LEVEL_REACHED"
    STREAK = "STREAK"
    XP_TOTAL = "XP_TOTAL"


class Achievement(Base):
    """Achievement definition (global catalogue)."""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    condition_type: Mapped[str] = mapped_column(String(50), nullable=False)
    condition_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class AchievementUnlock(Base):
    """An achievement unlocked by a student; at most one row per pair."""

    __tablename__ = "achievement_unlocks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    achievement_id: Mapped[int] = mapped_column(
        ForeignKey("achievements.id", ondelete="CASCADE"),
        nullable=False,
    )
    unlocked_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    achievement: Mapped["Achievement"] = relationship("Achievement")

    __table_args__ = (
        UniqueConstraint("student_id", "achievement_id", name="uq_achievement_unlocks_student_achievement"),
    )
