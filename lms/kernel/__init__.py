"""
Kernel Layer

Persistent state shared by every engine:
- Identity (users, roles, subscription plans)
- Course content (modules, levels, activities, submissions, attendance)
- Gamification state (XP, streaks, missions, achievements)

Engines read and write these rows only through an AsyncSession.
"""

from lms.kernel.models import (
    Achievement,
    AchievementUnlock,
    Level,
    LevelProgress,
    Mission,
    MissionProgress,
    Module,
    PointLog,
    StudentGamification,
    User,
    UserRole,
)

__all__ = [
    "Achievement",
    "AchievementUnlock",
    "Level",
    "LevelProgress",
    "Mission",
    "MissionProgress",
    "Module",
    "PointLog",
    "StudentGamification",
    "User",
    "UserRole",
]
