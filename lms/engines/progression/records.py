"""
Store helpers shared by the progression engines.
"""

from typing import Tuple

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from lms.kernel.models import StudentGamification


def dialect_insert(session: AsyncSession, model):
    """
    INSERT construct for the session's dialect.

    Both PostgreSQL and SQLite inserts support on_conflict_do_nothing(), which
    the engines use for rows guarded by a unique constraint.
    """
    if session.get_bind().dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)


async def get_gamification_record(session: AsyncSession, student_id: int):
    """Current gamification row of a student (re-read from the store) or None."""
    q = (
        select(StudentGamification)
        .where(StudentGamification.student_id == student_id)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(q)
    return result.scalar_one_or_none()


async def ensure_gamification_record(session: AsyncSession, student_id: int) -> Tuple[StudentGamification, bool]:
    """
    Get the student's gamification row, creating it at its zero state if absent.

    Returns (row, created). Concurrent creators race on the unique student_id;
    the loser's insert is a no-op and it reads the winner's row.
    """
    stmt = (
        dialect_insert(session, StudentGamification)
        .values(
            student_id=student_id,
            xp_total=0,
            current_level=1,
            available_points=0,
            streak_days=0,
        )
        .on_conflict_do_nothing(index_elements=["student_id"])
    )
    result = await session.execute(stmt)
    record = await get_gamification_record(session, student_id)
    return record, result.rowcount == 1
