"""
Gamification endpoints - XP, daily login, missions, achievements, leaderboard.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from lms.api.deps import DbSession, Student
from lms.engines.progression import (
    ClaimResult,
    DailyLoginResult,
    GamificationService,
    GamificationStats,
    MissionTracker,
    XPAwardResult,
    XPEngine,
)
from lms.schemas.progression import (
    AchievementListResponse,
    LeaderboardResponse,
    MissionListResponse,
    XPAwardRequest,
)

router = APIRouter()
leaderboard_router = APIRouter()


@router.get("", response_model=GamificationStats)
async def get_gamification_stats(student: Student, db: DbSession):
    """Snapshot of the student's XP, level, streak, points and achievements."""
    return await GamificationService(db).get_gamification_stats(student.id)


@router.post("/xp", response_model=XPAwardResult)
async def award_xp(body: XPAwardRequest, student: Student, db: DbSession):
    return await XPEngine(db).award_xp(student.id, body.amount, body.reason)


@router.post("/login", response_model=DailyLoginResult)
async def register_daily_login(student: Student, db: DbSession):
    """Daily login: streak update, login XP and the DAILY_LOGIN mission."""
    return await GamificationService(db).register_daily_login(student.id)


@router.post("/content-views", status_code=status.HTTP_204_NO_CONTENT)
async def track_content_view(student: Student, db: DbSession):
    await MissionTracker(db).track_content_view(student.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/missions", response_model=MissionListResponse)
async def list_missions(student: Student, db: DbSession):
    return MissionListResponse(missions=await MissionTracker(db).list_missions(student.id))


@router.post("/missions/{mission_id}/claim", response_model=ClaimResult)
async def claim_mission_reward(mission_id: int, student: Student, db: DbSession):
    """
    Claim a completed mission's reward.

    Not-yet-completed, already-claimed and unknown missions return
    success=false rather than an error.
    """
    return await MissionTracker(db).claim_mission_reward(student.id, mission_id)


@router.get("/achievements", response_model=AchievementListResponse)
async def list_achievements(student: Student, db: DbSession):
    return AchievementListResponse(
        achievements=await GamificationService(db).list_achievements(student.id)
    )


@leaderboard_router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    db: DbSession,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Students ranked by total XP."""
    return LeaderboardResponse(entries=await GamificationService(db).get_leaderboard(limit))
