"""
Progression request/response schemas.
"""

from typing import List

from pydantic import BaseModel, Field

from lms.engines.progression import (
    LeaderboardEntry,
    LevelStatus,
    MissionStatus,
    UnlockedAchievement,
)


class XPAwardRequest(BaseModel):
    """Manual XP award (admin tools, integrations)."""

    amount: int = Field(..., ge=0, le=100_000)
    reason: str = Field(..., min_length=1, max_length=255)


class GuideSubmissionRequest(BaseModel):
    level_id: int = Field(..., ge=1)
    step_index: int = Field(0, ge=0)
    file_url: str = Field("", max_length=2048)


class BulkResetRequest(BaseModel):
    student_ids: List[int] = Field(default_factory=list, max_length=500)


class MissionListResponse(BaseModel):
    missions: List[MissionStatus]


class AchievementListResponse(BaseModel):
    achievements: List[UnlockedAchievement]


class LeaderboardResponse(BaseModel):
    entries: List[LeaderboardEntry]


class ModuleLevelsResponse(BaseModel):
    student_id: int
    module_id: int
    levels: List[LevelStatus]
