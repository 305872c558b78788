"""
API v1 routes.
"""

from fastapi import APIRouter

from lms.api.v1 import admin, gamification, levels
from lms.schemas.common import ErrorResponse

router = APIRouter()

# {student_id} routes answer 404 for unknown students
student_responses = {404: {"model": ErrorResponse}}

router.include_router(gamification.leaderboard_router, prefix="/gamification", tags=["Gamification"])
router.include_router(
    gamification.router,
    prefix="/students/{student_id}/gamification",
    tags=["Gamification"],
    responses=student_responses,
)
router.include_router(levels.router, prefix="/students/{student_id}", tags=["Levels"], responses=student_responses)
router.include_router(admin.router, prefix="/admin", tags=["Admin"], responses=student_responses)
