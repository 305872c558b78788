"""
FastAPI dependencies for database sessions and path-id lookups.

Unknown students, modules and levels are 404s at this layer; the engines
themselves treat missing rows as no-ops.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.database import get_db
from lms.engines.progression.errors import (
    CourseModuleNotFoundError,
    LevelNotFoundError,
    StudentNotFoundError,
)
from lms.kernel.models import Level, Module, User


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_student(student_id: int, db: DbSession) -> User:
    """Resolve the {student_id} path parameter."""
    result = await db.execute(select(User).where(User.id == student_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise StudentNotFoundError(student_id)
    return user


async def get_course_module(module_id: int, db: DbSession) -> Module:
    result = await db.execute(select(Module).where(Module.id == module_id))
    module = result.scalar_one_or_none()
    if module is None:
        raise CourseModuleNotFoundError(module_id)
    return module


async def get_level(level_id: int, db: DbSession) -> Level:
    result = await db.execute(select(Level).where(Level.id == level_id))
    level = result.scalar_one_or_none()
    if level is None:
        raise LevelNotFoundError(level_id)
    return level


Student = Annotated[User, Depends(get_student)]
CourseModule = Annotated[Module, Depends(get_course_module)]
ContentLevel = Annotated[Level, Depends(get_level)]
