"""
Pydantic schemas for API request/response validation.
"""

from lms.schemas.common import ErrorResponse, HealthResponse
from lms.schemas.progression import (
    AchievementListResponse,
    BulkResetRequest,
    GuideSubmissionRequest,
    LeaderboardResponse,
    MissionListResponse,
    ModuleLevelsResponse,
    XPAwardRequest,
)

__all__ = [
    "AchievementListResponse",
    "BulkResetRequest",
    "ErrorResponse",
    "GuideSubmissionRequest",
    "HealthResponse",
    "LeaderboardResponse",
    "MissionListResponse",
    "ModuleLevelsResponse",
    "XPAwardRequest",
]
