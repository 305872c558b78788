"""
Progress Calculator - level completion from graded submissions.

A level's percent complete is the share of its activities the student has a
graded submission for. The first time a level reaches 100%:
- a missed attendance for the level is recovered (+ bonus XP)
- a zero-progress row is seeded for the next level of the module
"""

import math
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import Settings, get_settings
from lms.engines.progression.level_unlock import LevelState, LevelUnlockEvaluator
from lms.engines.progression.xp_engine import XPEngine
from lms.kernel.models import (
    Activity,
    Assignment,
    Attendance,
    Level,
    LevelProgress,
    Submission,
    as_utc,
    utcnow,
)
from lms.logging_config import get_logger

logger = get_logger(__name__)


class LevelProgressResult(BaseModel):
    """Computed progress of a level (not persisted)."""

    percent_complete: int
    completed: bool


class LevelProgressUpdate(BaseModel):
    """Stored progress after an update."""

    level_id: int
    percent_complete: int
    completed: bool
    completed_at: Optional[datetime] = None
    newly_completed: bool = False
    attendance_recovered: bool = False


class LevelStatus(BaseModel):
    """Unlock and progress status of one level of a module."""

    level_id: int
    order: int
    title: Optional[str] = None
    days_required: int
    percent_complete: int = 0
    completed: bool = False
    is_available: bool
    is_unlocked_by_time: bool
    is_unlocked_by_progress: bool
    is_stuck: bool
    is_manually_blocked: bool


class GuideKind(str, Enum):
    """Guided-activity templates attached to levels."""
    RAG = "rag"
    HA = "ha"


class GuideSubmissionResult(BaseModel):
    """Guide submissions are not supported yet; this is always not_implemented."""

    kind: GuideKind
    status: str = "not_implemented"
    detail: str


class ProgressCalculator:
    """
    Computes and stores per-student level progress.

    calculate_level_progress only reads; update_level_progress upserts the
    progress row and fires the first-completion side effects. A stored
    completed flag never goes back to False.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.xp_engine = XPEngine(session, self.settings)
        self.evaluator = LevelUnlockEvaluator(self.settings.default_days_to_unlock)

    async def _get_level(self, level_id: int) -> Optional[Level]:
        return (await self.session.execute(select(Level).where(Level.id == level_id))).scalar_one_or_none()

    async def _get_level_progress(self, student_id: int, level_id: int) -> Optional[LevelProgress]:
        q = select(LevelProgress).where(
            LevelProgress.student_id == student_id,
            LevelProgress.level_id == level_id,
        )
        return (await self.session.execute(q)).scalar_one_or_none()

    async def calculate_level_progress(self, student_id: int, level_id: int) -> LevelProgressResult:
        """
        Percent of the level's activities with a graded submission.

        A level with no activities (including an unknown level id) is complete.
        """
        total_q = select(func.count(Activity.id)).where(Activity.level_id == level_id)
        total_tasks = (await self.session.execute(total_q)).scalar_one()
        if total_tasks == 0:
            return LevelProgressResult(percent_complete=100, completed=True)

        completed_q = (
            select(func.count(Submission.id))
            .join(Activity, Activity.id == Submission.activity_id)
            .where(
                Activity.level_id == level_id,
                Submission.student_id == student_id,
                Submission.numeric_grade.is_not(None),
            )
        )
        completed_tasks = (await self.session.execute(completed_q)).scalar_one()

        # half-up: 1 of 8 tasks is 13%
        percent = min(100, math.floor(completed_tasks / total_tasks * 100 + 0.5))
        return LevelProgressResult(percent_complete=percent, completed=percent == 100)

    async def update_level_progress(
        self,
        student_id: int,
        level_id: int,
        now: Optional[datetime] = None,
    ) -> Optional[LevelProgressUpdate]:
        """Store the level's progress; no-op (None) for an unknown level."""
        if await self._get_level(level_id) is None:
            logger.debug("Progress update skipped: level %s does not exist", level_id)
            return None

        now = as_utc(now or utcnow())
        calculated = await self.calculate_level_progress(student_id, level_id)
        row = await self._get_level_progress(student_id, level_id)

        was_completed = row is not None and row.completed
        newly_completed = calculated.completed and not was_completed

        if row is None:
            row = LevelProgress(
                student_id=student_id,
                level_id=level_id,
                percent_complete=calculated.percent_complete,
                completed=calculated.completed,
                started_at=now,
                completed_at=now if calculated.completed else None,
            )
            self.session.add(row)
        else:
            row.percent_complete = calculated.percent_complete
            if newly_completed:
                row.completed = True
                row.completed_at = now
        await self.session.flush()

        recovered = False
        if newly_completed:
            logger.info("Student %s completed level %s", student_id, level_id)
            recovered = await self._recover_attendance(student_id, level_id)
            await self.unlock_next_level(student_id, level_id)

        return LevelProgressUpdate(
            level_id=level_id,
            percent_complete=row.percent_complete,
            completed=row.completed,
            completed_at=row.completed_at,
            newly_completed=newly_completed,
            attendance_recovered=recovered,
        )

    async def _recover_attendance(self, student_id: int, level_id: int) -> bool:
        """Mark a missed attendance for the level as recovered and grant the bonus."""
        q = (
            select(Attendance)
            .where(
                Attendance.student_id == student_id,
                Attendance.level_id == level_id,
                Attendance.attended.is_(False),
                Attendance.recovered.is_(False),
            )
            .order_by(Attendance.id)
            .limit(1)
        )
        attendance = (await self.session.execute(q)).scalar_one_or_none()
        if attendance is None:
            return False

        attendance.recovered = True
        await self.session.flush()
        await self.xp_engine.award_xp(student_id, self.settings.attendance_recovery_xp, "Attendance recovered")
        logger.info("Student %s recovered attendance for level %s", student_id, level_id)
        return True

    async def unlock_next_level(self, student_id: int, level_id: int) -> Optional[int]:
        """
        Seed a zero-progress row for the level after `level_id`.

        Gating is still computed live; the row only marks the level as
        reached. Returns the next level's id, or None at the end of the module.
        """
        level = await self._get_level(level_id)
        if level is None:
            return None

        next_q = select(Level).where(Level.module_id == level.module_id, Level.order == level.order + 1)
        next_level = (await self.session.execute(next_q)).scalar_one_or_none()
        if next_level is None:
            return None

        if await self._get_level_progress(student_id, next_level.id) is None:
            self.session.add(
                LevelProgress(
                    student_id=student_id,
                    level_id=next_level.id,
                    percent_complete=0,
                    completed=False,
                )
            )
            await self.session.flush()
        return next_level.id

    async def days_since_assignment(self, student_id: int, module_id: int, now: Optional[datetime] = None) -> int:
        """Whole days since the module was (last) assigned to the student; 0 if never."""
        q = select(func.max(Assignment.assigned_at)).where(
            Assignment.student_id == student_id,
            Assignment.module_id == module_id,
        )
        assigned_at = (await self.session.execute(q)).scalar_one_or_none()
        if assigned_at is None:
            return 0
        elapsed = as_utc(now or utcnow()) - as_utc(assigned_at)
        return max(0, elapsed.days)

    async def get_student_level_progress(
        self,
        student_id: int,
        module_id: int,
        now: Optional[datetime] = None,
    ) -> List[LevelStatus]:
        """Every level of the module in order, with unlock and progress status (empty for an unknown module)."""
        levels_q = select(Level).where(Level.module_id == module_id).order_by(Level.order)
        levels = list((await self.session.execute(levels_q)).scalars().all())
        if not levels:
            return []

        progress_q = select(LevelProgress).where(
            LevelProgress.student_id == student_id,
            LevelProgress.level_id.in_([level.id for level in levels]),
        )
        progress = {row.level_id: row for row in (await self.session.execute(progress_q)).scalars().all()}

        days_elapsed = await self.days_since_assignment(student_id, module_id, now=now)
        availability = self.evaluator.evaluate_module(
            [
                LevelState(
                    level_id=level.id,
                    order=level.order,
                    days_to_unlock=level.days_to_unlock,
                    manual_lock_override=level.manual_lock_override,
                    completed=level.id in progress and progress[level.id].completed,
                )
                for level in levels
            ],
            days_elapsed,
        )

        statuses: List[LevelStatus] = []
        for level, status in zip(levels, availability):
            row = progress.get(level.id)
            statuses.append(
                LevelStatus(
                    level_id=level.id,
                    order=level.order,
                    title=level.title,
                    days_required=status.days_required,
                    percent_complete=row.percent_complete if row else 0,
                    completed=row.completed if row else False,
                    is_available=status.is_available,
                    is_unlocked_by_time=status.is_unlocked_by_time,
                    is_unlocked_by_progress=status.is_unlocked_by_progress,
                    is_stuck=status.is_stuck,
                    is_manually_blocked=status.is_manually_blocked,
                )
            )
        return statuses

    async def submit_guide(self, student_id: int, level_id: int, kind: GuideKind) -> GuideSubmissionResult:
        """RAG/HA guide submissions are not supported."""
        logger.debug("Guide submission (%s) for student %s level %s is not implemented", kind.value, student_id, level_id)
        return GuideSubmissionResult(
            kind=kind,
            detail=f"{kind.value.upper()} guide submissions are not implemented",
        )
