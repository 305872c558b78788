"""
Course content models - modules, content levels, activities and the
student-owned rows the progression engine reads (assignments, submissions,
attendance).
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.kernel.models.base import Base, UTCDateTime, utcnow


class Module(Base):
    """A course module; an ordered sequence of content levels."""

    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    duration_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    levels: Mapped[List["Level"]] = relationship(
        "Level",
        back_populates="module",
        order_by="Level.order",
    )


class Assignment(Base):
    """Module assigned to a student; unlock schedules count from assigned_at."""

    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    module_id: Mapped[int] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    professor_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        nullable=False,
    )


class Level(Base):
    """
    Content level inside a module.

    manual_lock_override is tri-state: True forces the level locked, False
    forces it open, NULL follows the schedule (days_to_unlock + prerequisite).
    """

    __tablename__ = "levels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    module_id: Mapped[int] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    days_to_unlock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    manual_lock_override: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    module: Mapped["Module"] = relationship("Module", back_populates="levels")

    __table_args__ = (UniqueConstraint("module_id", "order", name="uq_levels_module_order"),)


class Activity(Base):
    """Gradable activity belonging to a level."""

    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    level_id: Mapped[int] = mapped_column(
        ForeignKey("levels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # deliverable, quiz, code
    title: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    max_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    due_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)


class Submission(Base):
    """A student's submission for an activity; counts once it has a numeric grade."""

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    numeric_grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Attendance(Base):
    """Attendance of a student for a level; recovered once the level is completed anyway."""

    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    level_id: Mapped[int] = mapped_column(
        ForeignKey("levels.id", ondelete="CASCADE"),
        nullable=False,
    )
    professor_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    attended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recovered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    date: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    __table_args__ = (Index("ix_attendance_student_level", "student_id", "level_id"),)
