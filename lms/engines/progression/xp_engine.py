"""
XP Engine - awards experience points and keeps the student's level in sync.
"""

import math
from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import Settings, get_settings
from lms.engines.progression.achievement_unlocker import AchievementUnlocker
from lms.engines.progression.leveling import calculate_level
from lms.engines.progression.records import ensure_gamification_record, get_gamification_record
from lms.kernel.models import PointLog, StudentGamification, User
from lms.logging_config import get_logger

logger = get_logger(__name__)


class XPAwardResult(BaseModel):
    """Outcome of an XP award. new_level is only set when the level went up."""

    leveled_up: bool
    new_level: Optional[int] = None
    xp_awarded: int


class XPEngine:
    """
    Awards XP to students.

    The point log records the nominal amount passed in; the totals receive the
    plan-adjusted amount (Pro students get floor(amount * multiplier)), so the
    two can diverge for Pro students.

    Totals are updated with an atomic `xp_total = xp_total + :amount` and then
    re-read, so concurrent awards for the same student never lose an update.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.achievements = AchievementUnlocker(session)

    async def is_pro(self, student_id: int) -> bool:
        """Whether the student is on the Pro plan."""
        q = select(User.plan_id).where(User.id == student_id)
        plan_id = (await self.session.execute(q)).scalar_one_or_none()
        return plan_id is not None and plan_id == self.settings.pro_plan_id

    def apply_multiplier(self, amount: int, is_pro: bool) -> int:
        if not is_pro:
            return amount
        return math.floor(amount * self.settings.pro_xp_multiplier)

    async def award_xp(self, student_id: int, amount: int, reason: str) -> XPAwardResult:
        """
        Award XP to a student.

        1. Append a point-log entry with the raw amount
        2. Apply the Pro multiplier
        3. Add to xp_total and available_points (creating the record if needed)
        4. Recompute the level
        5. Check achievements against the new totals (for a first award, only
           on a level-up)
        """
        if amount < 0:
            raise ValueError("XP amount must be non-negative")

        self.session.add(PointLog(student_id=student_id, amount=amount, reason=reason))
        await self.session.flush()

        final_amount = self.apply_multiplier(amount, await self.is_pro(student_id))

        record, created = await ensure_gamification_record(self.session, student_id)
        old_level = record.current_level

        await self.session.execute(
            update(StudentGamification)
            .where(StudentGamification.student_id == student_id)
            .values(
                xp_total=StudentGamification.xp_total + final_amount,
                available_points=StudentGamification.available_points + final_amount,
            )
            .execution_options(synchronize_session=False)
        )
        record = await get_gamification_record(self.session, student_id)

        new_level = calculate_level(record.xp_total)
        if new_level != record.current_level:
            record.current_level = new_level
            await self.session.flush()

        leveled_up = new_level > old_level
        if leveled_up:
            logger.info(
                "Student %s leveled up %s -> %s (xp_total=%s)",
                student_id,
                old_level,
                new_level,
                record.xp_total,
            )
        logger.info(
            "Awarded %s XP to student %s (nominal %s, reason=%r%s)",
            final_amount,
            student_id,
            amount,
            reason,
            ", new record" if created else "",
        )

        # a record created by this award is only checked when it also levels up
        if leveled_up or not created:
            await self.achievements.check_achievements(student_id)

        return XPAwardResult(
            leveled_up=leveled_up,
            new_level=new_level if leveled_up else None,
            xp_awarded=final_amount,
        )
