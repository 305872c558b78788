"""
Catalogue Seeder - default achievement and mission definitions.

Seeding is idempotent: a definition is only inserted when no row with the
same title exists.
"""

from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.kernel.models import Achievement, AchievementCondition, Mission
from lms.logging_config import get_logger

logger = get_logger(__name__)


DEFAULT_ACHIEVEMENTS: List[Dict[str, Any]] = [
    {
        "title": "First Steps",
        "description": "Reach level 2",
        "icon": "star",
        "condition_type": AchievementCondition.LEVEL_REACHED.value,
        "condition_value": 2,
    },
    {
        "title": "Apprentice",
        "description": "Reach level 5",
        "icon": "book",
        "condition_type": AchievementCondition.LEVEL_REACHED.value,
        "condition_value": 5,
    },
    {
        "title": "Expert",
        "description": "Reach level 10",
        "icon": "trophy",
        "condition_type": AchievementCondition.LEVEL_REACHED.value,
        "condition_value": 10,
    },
    {
        "title": "On Fire",
        "description": "Log in 3 days in a row",
        "icon": "flame",
        "condition_type": AchievementCondition.STREAK.value,
        "condition_value": 3,
    },
    {
        "title": "Total Dedication",
        "description": "Log in 7 days in a row",
        "icon": "zap",
        "condition_type": AchievementCondition.STREAK.value,
        "condition_value": 7,
    },
    {
        "title": "Collector",
        "description": "Earn 1000 XP",
        "icon": "target",
        "condition_type": AchievementCondition.XP_TOTAL.value,
        "condition_value": 1000,
    },
]

DEFAULT_MISSIONS: List[Dict[str, Any]] = [
    {
        "type": "DAILY_LOGIN",
        "title": "Daily Login",
        "description": "Log in to the platform",
        "xp_reward": 10,
        "icon": "login",
        "target_value": 1,
        "is_daily": True,
    },
    {
        "type": "VIEW_CONTENT",
        "title": "Explorer",
        "description": "Review 3 pieces of content",
        "xp_reward": 30,
        "icon": "eye",
        "target_value": 3,
        "is_daily": False,
    },
    {
        "type": "COMPLETE_ACTIVITY",
        "title": "Hard Worker",
        "description": "Complete 5 activities",
        "xp_reward": 100,
        "icon": "check",
        "target_value": 5,
        "is_daily": False,
    },
    {
        "type": "STREAK_3",
        "title": "Consistency",
        "description": "Keep a 3-day streak",
        "xp_reward": 50,
        "icon": "flame",
        "target_value": 1,
        "is_daily": False,
    },
    {
        "type": "STREAK_7",
        "title": "Discipline",
        "description": "Keep a 7-day streak",
        "xp_reward": 150,
        "icon": "zap",
        "target_value": 1,
        "is_daily": False,
    },
    {
        "type": "LOGIN_CONSECUTIVE_2",
        "title": "Dynamic Duo",
        "description": "Log in 2 days in a row",
        "xp_reward": 40,
        "icon": "users",
        "target_value": 1,
        "is_daily": False,
    },
    {
        "type": "VIEW_CONTENT_4",
        "title": "Unstoppable",
        "description": "Watch 4 pieces of content",
        "xp_reward": 80,
        "icon": "trending-up",
        "target_value": 4,
        "is_daily": False,
    },
]


class CatalogueSeeder:
    """Inserts the default achievements and missions."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _seed(self, model, definitions: List[Dict[str, Any]]) -> int:
        created = 0
        for definition in definitions:
            q = select(model.id).where(model.title == definition["title"]).limit(1)
            if (await self.session.execute(q)).first() is not None:
                continue
            self.session.add(model(active=True, **definition))
            created += 1
        await self.session.flush()
        return created

    async def seed_initial_achievements(self) -> int:
        created = await self._seed(Achievement, DEFAULT_ACHIEVEMENTS)
        logger.info("Seeded %s achievements", created)
        return created

    async def seed_initial_missions(self) -> int:
        created = await self._seed(Mission, DEFAULT_MISSIONS)
        logger.info("Seeded %s missions", created)
        return created
