"""
Admin endpoints - progress resets.
"""

from fastapi import APIRouter

from lms.api.deps import DbSession
from lms.engines.progression import BulkResetResult, ProgressResetService, ResetResult
from lms.schemas.progression import BulkResetRequest

router = APIRouter()


@router.post("/students/reset", response_model=BulkResetResult)
async def bulk_reset(body: BulkResetRequest, db: DbSession):
    """Reset several students; failures are counted, not raised."""
    return await ProgressResetService(db).bulk_reset(body.student_ids)


@router.post("/students/{student_id}/reset", response_model=ResetResult)
async def reset_student_progress(student_id: int, db: DbSession):
    """
    Delete all of a student's progression rows and zero the gamification record.

    Ranking awards and certificates are skipped when their tables are missing.
    """
    return await ProgressResetService(db).reset_student_progress(student_id)
