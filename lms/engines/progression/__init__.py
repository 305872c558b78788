"""
Progression Engine - level gating, XP, streaks, missions and achievements.

Components:
- LevelUnlockEvaluator: override / schedule / prerequisite gating of content levels
- ProgressCalculator: level completion from graded submissions
- XPEngine: XP awards, Pro multiplier and level recomputation
- StreakTracker: consecutive-day streaks with milestone bonuses
- MissionTracker: daily, global and weekly (Pro) mission progress and claims
- AchievementUnlocker: stat-threshold achievements

Every component takes the AsyncSession it reads and writes through.
"""

from lms.engines.progression.achievement_unlocker import AchievementUnlocker
from lms.engines.progression.catalogue import CatalogueSeeder
from lms.engines.progression.errors import (
    CourseModuleNotFoundError,
    LevelNotFoundError,
    ProgressionError,
    StudentNotFoundError,
)
from lms.engines.progression.gamification_service import (
    DailyLoginResult,
    GamificationService,
    GamificationStats,
    LeaderboardEntry,
    UnlockedAchievement,
)
from lms.engines.progression.level_unlock import (
    LevelAvailability,
    LevelState,
    LevelUnlockEvaluator,
    LockOverride,
)
from lms.engines.progression.leveling import (
    calculate_level,
    get_xp_for_level,
    get_xp_for_next_level,
)
from lms.engines.progression.mission_tracker import ClaimResult, MissionStatus, MissionTracker
from lms.engines.progression.progress_calculator import (
    GuideKind,
    GuideSubmissionResult,
    LevelProgressResult,
    LevelProgressUpdate,
    LevelStatus,
    ProgressCalculator,
)
from lms.engines.progression.progress_reset import BulkResetResult, ProgressResetService, ResetResult
from lms.engines.progression.streak_tracker import StreakResult, StreakTracker, streak_bonus
from lms.engines.progression.xp_engine import XPAwardResult, XPEngine

__all__ = [
    "AchievementUnlocker",
    "BulkResetResult",
    "CatalogueSeeder",
    "ClaimResult",
    "CourseModuleNotFoundError",
    "DailyLoginResult",
    "GamificationService",
    "GamificationStats",
    "GuideKind",
    "GuideSubmissionResult",
    "LeaderboardEntry",
    "LevelAvailability",
    "LevelNotFoundError",
    "LevelProgressResult",
    "LevelProgressUpdate",
    "LevelState",
    "LevelStatus",
    "LevelUnlockEvaluator",
    "LockOverride",
    "MissionStatus",
    "MissionTracker",
    "ProgressCalculator",
    "ProgressResetService",
    "ProgressionError",
    "ResetResult",
    "StreakResult",
    "StreakTracker",
    "StudentNotFoundError",
    "UnlockedAchievement",
    "XPAwardResult",
    "XPEngine",
    "calculate_level",
    "get_xp_for_level",
    "get_xp_for_next_level",
    "streak_bonus",
]
