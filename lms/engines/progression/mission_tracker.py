"""
Mission Tracker - per-student progress counters against mission definitions.

Mission kinds:
- daily: progress row is created on first touch
- global: progress row must already exist, otherwise the update is dropped
- weekly (Pro only): rows seeded per Monday-aligned week by sync_weekly_missions
"""

from datetime import date, datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import Settings, get_settings
from lms.engines.progression.xp_engine import XPEngine
from lms.kernel.models import Mission, MissionProgress, as_utc, utcnow
from lms.logging_config import get_logger

logger = get_logger(__name__)

# Mission types seeded every week for Pro students
WEEKLY_MISSION_TYPES = ("LOGIN_CONSECUTIVE_2", "VIEW_CONTENT_4", "COMPLETE_ACTIVITY")


def week_start(now: datetime) -> date:
    """Monday of the (UTC) week containing `now`."""
    today = as_utc(now).date()
    return today - timedelta(days=today.weekday())


class ClaimResult(BaseModel):
    """Result of a reward claim; failures award nothing."""

    success: bool
    xp_awarded: int = 0


class MissionStatus(BaseModel):
    """Active mission merged with the student's progress on it."""

    mission_id: int
    type: str
    title: str
    description: Optional[str] = None
    icon: Optional[str] = None
    xp_reward: int
    target_value: int
    is_daily: bool
    current_progress: int = 0
    completed: bool = False
    reward_claimed: bool = False
    week_start: Optional[date] = None


class MissionTracker:
    """
    Tracks mission progress and reward claims.

    Progress rows are looked up by (student, mission) without filtering on
    week_start: when a mission has several rows across weeks, the oldest one
    (lowest id) is the one read and updated.
    """

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.xp_engine = XPEngine(session, self.settings)

    async def _active_missions(self, mission_type: str) -> List[Mission]:
        q = (
            select(Mission)
            .where(Mission.type == mission_type, Mission.active.is_(True))
            .order_by(Mission.id)
        )
        result = await self.session.execute(q)
        return list(result.scalars().all())

    async def _get_progress(self, student_id: int, mission_id: int) -> Optional[MissionProgress]:
        q = (
            select(MissionProgress)
            .where(
                MissionProgress.student_id == student_id,
                MissionProgress.mission_id == mission_id,
            )
            .order_by(MissionProgress.id)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(q)
        return result.scalar_one_or_none()

    async def sync_weekly_missions(self, student_id: int, now: Optional[datetime] = None) -> int:
        """
        Seed this week's missions for a Pro student.

        No-op for other plans, or when the student already has any row for
        the current week. Returns the number of rows created.
        """
        if not await self.xp_engine.is_pro(student_id):
            return 0

        monday = week_start(now or utcnow())
        q = select(MissionProgress.id).where(
            MissionProgress.student_id == student_id,
            MissionProgress.week_start == monday,
        ).limit(1)
        if (await self.session.execute(q)).first() is not None:
            return 0

        created = 0
        for mission_type in WEEKLY_MISSION_TYPES:
            missions = await self._active_missions(mission_type)
            if not missions:
                continue
            self.session.add(
                MissionProgress(
                    student_id=student_id,
                    mission_id=missions[0].id,
                    week_start=monday,
                    current_progress=0,
                    completed=False,
                )
            )
            created += 1

        if created:
            await self.session.flush()
            logger.info("Seeded %s weekly missions for student %s (week %s)", created, student_id, monday)
        return created

    async def update_mission_progress(
        self,
        student_id: int,
        mission_type: str,
        increment_by: int = 1,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Advance every active mission of `mission_type` for the student.

        Completed rows are frozen. Daily missions get a row on first touch;
        any other mission without a row is skipped.
        """
        now = now or utcnow()
        await self.sync_weekly_missions(student_id, now=now)

        for mission in await self._active_missions(mission_type):
            progress = await self._get_progress(student_id, mission.id)

            if progress is None:
                if not mission.is_daily:
                    continue
                completed = increment_by >= mission.target_value
                self.session.add(
                    MissionProgress(
                        student_id=student_id,
                        mission_id=mission.id,
                        current_progress=increment_by,
                        completed=completed,
                        completed_at=now if completed else None,
                    )
                )
                await self.session.flush()
                if completed:
                    logger.info("Student %s completed mission %r", student_id, mission.title)
                continue

            if progress.completed:
                continue

            result = await self.session.execute(
                update(MissionProgress)
                .where(MissionProgress.id == progress.id, MissionProgress.completed.is_(False))
                .values(current_progress=MissionProgress.current_progress + increment_by)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                continue

            await self.session.refresh(progress)
            if progress.current_progress >= mission.target_value:
                progress.completed = True
                progress.completed_at = now
                await self.session.flush()
                logger.info("Student %s completed mission %r", student_id, mission.title)

    async def track_content_view(self, student_id: int, now: Optional[datetime] = None) -> None:
        """A content view counts towards the VIEW_CONTENT missions."""
        await self.update_mission_progress(student_id, "VIEW_CONTENT", 1, now=now)
        await self.update_mission_progress(student_id, "VIEW_CONTENT_4", 1, now=now)

    async def claim_mission_reward(self, student_id: int, mission_id: int) -> ClaimResult:
        """
        Claim the XP reward of a completed mission, at most once.

        The claimed flag is flipped with a conditional update, and XP is only
        awarded when that update touched the row.
        """
        mission = (
            await self.session.execute(select(Mission).where(Mission.id == mission_id))
        ).scalar_one_or_none()
        if mission is None:
            logger.debug("Claim rejected: mission %s does not exist", mission_id)
            return ClaimResult(success=False)

        progress = await self._get_progress(student_id, mission_id)
        if progress is None or not progress.completed or progress.reward_claimed:
            logger.debug("Claim rejected: student %s mission %s not claimable", student_id, mission_id)
            return ClaimResult(success=False)

        result = await self.session.execute(
            update(MissionProgress)
            .where(
                MissionProgress.id == progress.id,
                MissionProgress.completed.is_(True),
                MissionProgress.reward_claimed.is_(False),
            )
            .values(reward_claimed=True)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.debug("Claim rejected: student %s mission %s already claimed", student_id, mission_id)
            return ClaimResult(success=False)
        await self.session.refresh(progress)

        await self.xp_engine.award_xp(
            student_id,
            mission.xp_reward,
            f"Mission completed: {mission.title}",
        )
        logger.info("Student %s claimed mission %r (reward %s XP)", student_id, mission.title, mission.xp_reward)
        # nominal reward, like the point log
        return ClaimResult(success=True, xp_awarded=mission.xp_reward)

    async def list_missions(self, student_id: int) -> List[MissionStatus]:
        """Active missions with the student's progress (defaults when untouched)."""
        result = await self.session.execute(
            select(Mission).where(Mission.active.is_(True)).order_by(Mission.id)
        )
        statuses: List[MissionStatus] = []
        for mission in result.scalars().all():
            progress = await self._get_progress(student_id, mission.id)
            status = MissionStatus(
                mission_id=mission.id,
                type=mission.type,
                title=mission.title,
                description=mission.description,
                icon=mission.icon,
                xp_reward=mission.xp_reward,
                target_value=mission.target_value,
                is_daily=mission.is_daily,
            )
            if progress is not None:
                status.current_progress = progress.current_progress
                status.completed = progress.completed
                status.reward_claimed = progress.reward_claimed
                status.week_start = progress.week_start
            statuses.append(status)
        return statuses
