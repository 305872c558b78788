"""
Gamification Service - student-facing entry points over the progression engines.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import Settings, get_settings
from lms.engines.progression.errors import StudentNotFoundError
from lms.engines.progression.leveling import get_xp_for_level, get_xp_for_next_level
from lms.engines.progression.mission_tracker import MissionTracker
from lms.engines.progression.records import ensure_gamification_record
from lms.engines.progression.streak_tracker import StreakTracker
from lms.engines.progression.xp_engine import XPAwardResult, XPEngine
from lms.kernel.models import (
    Achievement,
    AchievementUnlock,
    PointLog,
    StudentGamification,
    User,
    utcnow,
)
from lms.logging_config import bind_student, get_logger

logger = get_logger(__name__)


class UnlockedAchievement(BaseModel):
    achievement_id: int
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    condition_type: str
    condition_value: int
    unlocked_at: datetime


class GamificationStats(BaseModel):
    """Full gamification snapshot of a student."""

    student_id: int
    xp_total: int
    current_level: int
    available_points: int
    streak_days: int
    last_streak_update: Optional[datetime] = None
    xp_for_current_level: int
    xp_for_next_level: int
    total_points: int
    achievements: List[UnlockedAchievement] = []


class LeaderboardEntry(BaseModel):
    position: int
    student_id: int
    name: str
    avatar: Optional[str] = None
    xp_total: int
    current_level: int
    streak_days: int


class DailyLoginResult(BaseModel):
    streak: int
    streak_bonus_xp: int
    login: XPAwardResult


class GamificationService:
    """
    Read models and the daily-login flow.

    The login flow runs, in order: streak update, the daily login XP award
    and the DAILY_LOGIN mission.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.xp_engine = XPEngine(session, self.settings)
        self.streaks = StreakTracker(session, self.settings)
        self.missions = MissionTracker(session, self.settings)

    async def ensure_student(self, student_id: int) -> User:
        user = (await self.session.execute(select(User).where(User.id == student_id))).scalar_one_or_none()
        if user is None:
            raise StudentNotFoundError(student_id)
        return user

    async def list_achievements(self, student_id: int) -> List[UnlockedAchievement]:
        q = (
            select(Achievement, AchievementUnlock.unlocked_at)
            .join(AchievementUnlock, AchievementUnlock.achievement_id == Achievement.id)
            .where(AchievementUnlock.student_id == student_id)
            .order_by(AchievementUnlock.unlocked_at, Achievement.id)
        )
        result = await self.session.execute(q)
        return [
            UnlockedAchievement(
                achievement_id=achievement.id,
                title=achievement.title,
                description=achievement.description,
                icon=achievement.icon,
                condition_type=achievement.condition_type,
                condition_value=achievement.condition_value,
                unlocked_at=unlocked_at,
            )
            for achievement, unlocked_at in result.all()
        ]

    async def get_gamification_stats(self, student_id: int) -> GamificationStats:
        """
        Snapshot of the student's gamification state.

        Creates the record at its zero state if the student has none yet.
        total_points is the sum of the point log (nominal amounts).
        """
        record, created = await ensure_gamification_record(self.session, student_id)
        if created:
            logger.info("Initialized gamification record for student %s", student_id)

        total_q = select(func.coalesce(func.sum(PointLog.amount), 0)).where(PointLog.student_id == student_id)
        total_points = (await self.session.execute(total_q)).scalar_one()

        return GamificationStats(
            student_id=student_id,
            xp_total=record.xp_total,
            current_level=record.current_level,
            available_points=record.available_points,
            streak_days=record.streak_days,
            last_streak_update=record.last_streak_update,
            xp_for_current_level=get_xp_for_level(record.current_level),
            xp_for_next_level=get_xp_for_next_level(record.current_level),
            total_points=total_points,
            achievements=await self.list_achievements(student_id),
        )

    async def get_leaderboard(self, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """Students ranked by total XP."""
        q = (
            select(StudentGamification, User)
            .join(User, User.id == StudentGamification.student_id)
            .order_by(StudentGamification.xp_total.desc(), StudentGamification.student_id)
            .limit(limit or self.settings.leaderboard_limit)
        )
        result = await self.session.execute(q)
        return [
            LeaderboardEntry(
                position=position,
                student_id=user.id,
                name=user.full_name,
                avatar=user.avatar,
                xp_total=record.xp_total,
                current_level=record.current_level,
                streak_days=record.streak_days,
            )
            for position, (record, user) in enumerate(result.all(), start=1)
        ]

    async def register_daily_login(self, student_id: int, now: Optional[datetime] = None) -> DailyLoginResult:
        now = now or utcnow()
        with bind_student(student_id):
            streak = await self.streaks.update_streak(student_id, now=now)
            login = await self.xp_engine.award_xp(student_id, self.settings.daily_login_xp, "Daily login")
            await self.missions.update_mission_progress(student_id, "DAILY_LOGIN", 1, now=now)
        return DailyLoginResult(streak=streak.streak, streak_bonus_xp=streak.bonus_xp, login=login)
