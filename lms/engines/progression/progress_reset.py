"""
Progress Reset - wipes a student's progression state (admin operation).
"""

from typing import Iterable, List

from pydantic import BaseModel
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.engines.progression.errors import StudentNotFoundError
from lms.engines.progression.records import ensure_gamification_record
from lms.kernel.models import (
    AchievementUnlock,
    Assignment,
    Attendance,
    Certificate,
    LevelProgress,
    MissionProgress,
    PointLog,
    RankingAward,
    StudentGamification,
    Submission,
    User,
)
from lms.logging_config import bind_student, get_logger

logger = get_logger(__name__)

# Deleted in this order; every table here must exist
STUDENT_TABLES = (
    Assignment,
    LevelProgress,
    Submission,
    Attendance,
    MissionProgress,
    AchievementUnlock,
)

# Not every deployment has these tables
OPTIONAL_STUDENT_TABLES = (RankingAward, Certificate)


class ResetResult(BaseModel):
    student_id: int
    success: bool = True
    skipped_tables: List[str] = []


class BulkResetResult(BaseModel):
    success: bool
    message: str
    successful: int = 0
    failed: int = 0


class ProgressResetService:
    """
    Full reset of a student's progress.

    Runs in the caller's transaction. Deletes on the optional tables run in
    their own SAVEPOINT so a missing table only skips that table.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _delete_optional(self, model, student_id: int) -> bool:
        try:
            async with self.session.begin_nested():
                await self.session.execute(delete(model).where(model.student_id == student_id))
        except SQLAlchemyError as exc:
            logger.warning(
                "Reset of student %s skipped table %s: %s",
                student_id,
                model.__tablename__,
                exc.__class__.__name__,
            )
            return False
        return True

    async def reset_student_progress(self, student_id: int) -> ResetResult:
        exists = (await self.session.execute(select(User.id).where(User.id == student_id))).scalar_one_or_none()
        if exists is None:
            raise StudentNotFoundError(student_id)

        with bind_student(student_id):
            for model in STUDENT_TABLES:
                await self.session.execute(delete(model).where(model.student_id == student_id))

            skipped = [
                model.__tablename__
                for model in OPTIONAL_STUDENT_TABLES
                if not await self._delete_optional(model, student_id)
            ]

            await self.session.execute(delete(PointLog).where(PointLog.student_id == student_id))

            await ensure_gamification_record(self.session, student_id)
            await self.session.execute(
                update(StudentGamification)
                .where(StudentGamification.student_id == student_id)
                .values(
                    xp_total=0,
                    current_level=1,
                    available_points=0,
                    streak_days=0,
                    last_streak_update=None,
                )
                .execution_options(synchronize_session=False)
            )
            logger.info("Reset progress of student %s", student_id)

        return ResetResult(student_id=student_id, skipped_tables=skipped)

    async def bulk_reset(self, student_ids: Iterable[int]) -> BulkResetResult:
        """Reset several students; each one commits or rolls back on its own savepoint."""
        student_ids = list(student_ids)
        if not student_ids:
            return BulkResetResult(success=False, message="No student ids provided")

        successful = 0
        failed = 0
        for student_id in student_ids:
            try:
                async with self.session.begin_nested():
                    await self.reset_student_progress(student_id)
            except (StudentNotFoundError, SQLAlchemyError) as exc:
                logger.warning("Reset of student %s failed: %s", student_id, exc)
                failed += 1
            else:
                successful += 1

        return BulkResetResult(
            success=True,
            message=f"{successful} reset, {failed} failed",
            successful=successful,
            failed=failed,
        )
