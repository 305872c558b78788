"""
Kernel Data Models

SQLAlchemy models for users, course content and the gamification state
maintained by the progression engine.
"""

from lms.kernel.models.base import Base, TimestampMixin, UTCDateTime, as_utc, utcnow
from lms.kernel.models.user import Plan, User, UserRole
from lms.kernel.models.course import (
    Activity,
    Assignment,
    Attendance,
    Level,
    Module,
    Submission,
)
from lms.kernel.models.gamification import (
    Achievement,
    AchievementCondition,
    AchievementUnlock,
    LevelProgress,
    Mission,
    MissionProgress,
    PointLog,
    StudentGamification,
)
from lms.kernel.models.awards import Certificate, RankingAward

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    "as_utc",
    "utcnow",
    # Users
    "Plan",
    "User",
    "UserRole",
    # Course content
    "Activity",
    "Assignment",
    "Attendance",
    "Level",
    "Module",
    "Submission",
    # Gamification
    "Achievement",
    "AchievementCondition",
    "AchievementUnlock",
    "LevelProgress",
    "Mission",
    "MissionProgress",
    "PointLog",
    "StudentGamification",
    # Optional tables
    "Certificate",
    "RankingAward",
]
