"""
Pytest fixtures for progression engine tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lms.config import Settings
from lms.database import install_sqlite_listeners
from lms.engines.progression.catalogue import CatalogueSeeder
from lms.kernel.models import Base, Plan, User, UserRole

PRO_PLAN_ID = 3
BASIC_PLAN_ID = 1


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    install_sqlite_listeners(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def plans(db_session: AsyncSession) -> dict:
    basic = Plan(id=BASIC_PLAN_ID, name="Basic")
    standard = Plan(id=2, name="Standard")
    pro = Plan(id=PRO_PLAN_ID, name="Pro")
    db_session.add_all([basic, standard, pro])
    await db_session.flush()
    return {"basic": basic, "standard": standard, "pro": pro}


@pytest_asyncio.fixture
async def student(db_session: AsyncSession, plans: dict) -> User:
    """Student on the Basic plan."""
    user = User(
        email="student@example.com",
        full_name="Basic Student",
        role=UserRole.STUDENT.value,
        plan_id=BASIC_PLAN_ID,
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest_asyncio.fixture
async def pro_student(db_session: AsyncSession, plans: dict) -> User:
    """Student on the Pro plan."""
    user = User(
        email="pro@example.com",
        full_name="Pro Student",
        role=UserRole.STUDENT.value,
        plan_id=PRO_PLAN_ID,
    )
    db_session.add(user)
    await db_session.flush()
    return user


@pytest_asyncio.fixture
async def catalogue(db_session: AsyncSession) -> None:
    """Default achievements and missions."""
    seeder = CatalogueSeeder(db_session)
    await seeder.seed_initial_achievements()
    await seeder.seed_initial_missions()
