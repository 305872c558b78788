"""
Content level endpoints - unlock status, level progress and guide submissions.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from lms.api.deps import ContentLevel, CourseModule, DbSession, Student
from lms.engines.progression import (
    GuideKind,
    LevelProgressResult,
    LevelProgressUpdate,
    ProgressCalculator,
)
from lms.schemas.progression import GuideSubmissionRequest, ModuleLevelsResponse

router = APIRouter()


@router.get("/modules/{module_id}/levels", response_model=ModuleLevelsResponse)
async def get_module_levels(module: CourseModule, student: Student, db: DbSession):
    """Every level of the module in order, with its unlock and progress status."""
    levels = await ProgressCalculator(db).get_student_level_progress(student.id, module.id)
    return ModuleLevelsResponse(student_id=student.id, module_id=module.id, levels=levels)


@router.get("/levels/{level_id}/progress", response_model=LevelProgressResult)
async def get_level_progress(level: ContentLevel, student: Student, db: DbSession):
    """Current progress computed from graded submissions (nothing is stored)."""
    return await ProgressCalculator(db).calculate_level_progress(student.id, level.id)


@router.post("/levels/{level_id}/progress", response_model=LevelProgressUpdate)
async def update_level_progress(level: ContentLevel, student: Student, db: DbSession):
    """Recompute and store level progress, applying first-completion rewards."""
    return await ProgressCalculator(db).update_level_progress(student.id, level.id)


@router.post("/guides/{kind}/submissions")
async def submit_guide(kind: GuideKind, body: GuideSubmissionRequest, student: Student, db: DbSession):
    result = await ProgressCalculator(db).submit_guide(student.id, body.level_id, kind)
    return JSONResponse(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        content=result.model_dump(mode="json"),
    )
