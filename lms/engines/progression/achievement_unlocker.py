"""
Achievement Unlocker - unlocks achievements whose stat threshold is met.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.engines.progression.records import dialect_insert, get_gamification_record
from lms.kernel.models import (
    Achievement,
    AchievementCondition,
    AchievementUnlock,
    StudentGamification,
    utcnow,
)
from lms.logging_config import get_logger

logger = get_logger(__name__)


class AchievementUnlocker:
    """
    Scans active achievements against a student's current stats.

    Conditions:
    - LEVEL_REACHED: current_level >= condition_value
    - STREAK: streak_days >= condition_value
    - XP_TOTAL: xp_total >= condition_value

    Unlocks are inserted with ON CONFLICT DO NOTHING on (student_id,
    achievement_id), so concurrent checks never create duplicate rows.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def is_satisfied(achievement: Achievement, record: StudentGamification) -> bool:
        """Whether the student's stats meet the achievement's condition."""
        try:
            condition = AchievementCondition(achievement.condition_type)
        except ValueError:
            logger.debug(
                "Unknown achievement condition %s on achievement %s",
                achievement.condition_type,
                achievement.id,
            )
            return False

        if condition is AchievementCondition.LEVEL_REACHED:
            return record.current_level >= achievement.condition_value
        if condition is AchievementCondition.STREAK:
            return record.streak_days >= achievement.condition_value
        return record.xp_total >= achievement.condition_value

    async def check_achievements(self, student_id: int, now: Optional[datetime] = None) -> List[int]:
        """
        Unlock every newly satisfied achievement.

        No-op for students without a gamification record. Returns the ids of
        the achievements unlocked by this call.
        """
        record = await get_gamification_record(self.session, student_id)
        if record is None:
            return []

        already_unlocked = select(AchievementUnlock.achievement_id).where(
            AchievementUnlock.student_id == student_id
        )
        q = (
            select(Achievement)
            .where(
                Achievement.active.is_(True),
                Achievement.id.not_in(already_unlocked),
            )
            .order_by(Achievement.id)
        )
        result = await self.session.execute(q)
        candidates = list(result.scalars().all())

        unlocked_at = now or utcnow()
        newly_unlocked: List[int] = []
        for achievement in candidates:
            if not self.is_satisfied(achievement, record):
                continue
            stmt = (
                dialect_insert(self.session, AchievementUnlock)
                .values(
                    student_id=student_id,
                    achievement_id=achievement.id,
                    unlocked_at=unlocked_at,
                )
                .on_conflict_do_nothing(index_elements=["student_id", "achievement_id"])
            )
            insert_result = await self.session.execute(stmt)
            if insert_result.rowcount == 1:
                newly_unlocked.append(achievement.id)
                logger.info("Student %s unlocked achievement %r", student_id, achievement.title)

        return newly_unlocked
