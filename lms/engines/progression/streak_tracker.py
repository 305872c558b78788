"""
Streak Tracker - daily login streaks with milestone bonus XP.
"""

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import Settings, get_settings
from lms.engines.progression.mission_tracker import MissionTracker
from lms.engines.progression.records import ensure_gamification_record
from lms.engines.progression.xp_engine import XPEngine
from lms.kernel.models import as_utc, utcnow
from lms.logging_config import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# (mission type, streak needed); pushed as 1/0 after every streak change
STREAK_MISSIONS = (
    ("STREAK_3", 3),
    ("STREAK_7", 7),
    ("LOGIN_CONSECUTIVE_2", 2),
)


class StreakResult(BaseModel):
    """Streak after the update and the bonus XP it granted."""

    streak: int
    bonus_xp: int = 0


def streak_bonus(streak: int) -> int:
    """Milestone bonus for reaching `streak` consecutive days."""
    if streak == 3:
        return 50
    if streak == 7:
        return 150
    if streak > 7 and streak % 7 == 0:
        return 200
    return 0


class StreakTracker:
    """
    Maintains a student's consecutive-day streak.

    Days are counted as whole 24h periods since the last update:
    - 0: same day, nothing changes
    - 1: streak continues (+1), milestone bonus may apply
    - more (or a clock going backwards): streak restarts at 1
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.xp_engine = XPEngine(session, self.settings)
        self.missions = MissionTracker(session, self.settings)

    async def update_streak(self, student_id: int, now: Optional[datetime] = None) -> StreakResult:
        now = as_utc(now or utcnow())
        record, created = await ensure_gamification_record(self.session, student_id)

        if created or record.last_streak_update is None:
            record.streak_days = 1
            record.last_streak_update = now
            await self.session.flush()
            return StreakResult(streak=1, bonus_xp=0)

        elapsed = now - as_utc(record.last_streak_update)
        days_diff = math.floor(elapsed.total_seconds() / SECONDS_PER_DAY)

        if days_diff == 0:
            return StreakResult(streak=record.streak_days, bonus_xp=0)

        if days_diff == 1:
            new_streak = record.streak_days + 1
            bonus = streak_bonus(new_streak)
        else:
            if record.streak_days > 1:
                logger.info("Student %s lost a %s-day streak", student_id, record.streak_days)
            new_streak = 1
            bonus = 0

        record.streak_days = new_streak
        record.last_streak_update = now
        await self.session.flush()

        if bonus > 0:
            logger.info("Student %s reached a %s-day streak (+%s XP)", student_id, new_streak, bonus)
            await self.xp_engine.award_xp(student_id, bonus, f"Streak of {new_streak} days")

        for mission_type, needed in STREAK_MISSIONS:
            await self.missions.update_mission_progress(
                student_id,
                mission_type,
                1 if new_streak >= needed else 0,
                now=now,
            )

        return StreakResult(streak=new_streak, bonus_xp=bonus)
