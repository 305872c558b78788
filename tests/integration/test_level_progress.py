"""Integration tests for level progress, unlocking and attendance recovery."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy import select

from lms.engines.progression.progress_calculator import GuideKind, ProgressCalculator
from lms.engines.progression.records import get_gamification_record
from lms.kernel.models import (
    Activity,
    Assignment,
    Attendance,
    Level,
    LevelProgress,
    Module,
    PointLog,
    Submission,
)

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def course(db_session):
    """
    Module with three levels:
    - level 1: two activities
    - level 2: one activity, default schedule (7 days)
    - level 3: no activities
    """
    module = Module(name="Intro to Python", duration_days=30)
    db_session.add(module)
    await db_session.flush()

    levels = [
        Level(module_id=module.id, order=1, title="Basics"),
        Level(module_id=module.id, order=2, title="Control flow"),
        Level(module_id=module.id, order=3, title="Functions"),
    ]
    db_session.add_all(levels)
    await db_session.flush()

    activities = [
        Activity(level_id=levels[0].id, kind="quiz", title="Quiz 1"),
        Activity(level_id=levels[0].id, kind="deliverable", title="Homework 1"),
        Activity(level_id=levels[1].id, kind="code", title="Exercise 2"),
    ]
    db_session.add_all(activities)
    await db_session.flush()

    return {
        "module_id": module.id,
        "level_ids": [level.id for level in levels],
        "activity_ids": [activity.id for activity in activities],
    }


async def _grade(session, student_id, activity_id, grade=90):
    submission = Submission(activity_id=activity_id, student_id=student_id, numeric_grade=grade)
    session.add(submission)
    await session.flush()
    return submission


async def _progress_row(session, student_id, level_id):
    result = await session.execute(
        select(LevelProgress).where(
            LevelProgress.student_id == student_id,
            LevelProgress.level_id == level_id,
        )
    )
    return result.scalar_one_or_none()


class TestCalculateLevelProgress:
    @pytest.mark.asyncio
    async def test_level_without_activities_is_complete(self, db_session, student, course, settings):
        result = await ProgressCalculator(db_session, settings).calculate_level_progress(
            student.id, course["level_ids"][2]
        )
        assert result.percent_complete == 100
        assert result.completed is True

    @pytest.mark.asyncio
    async def test_counts_graded_submissions_only(self, db_session, student, course, settings):
        calculator = ProgressCalculator(db_session, settings)
        level_id = course["level_ids"][0]

        await _grade(db_session, student.id, course["activity_ids"][0], grade=None)
        result = await calculator.calculate_level_progress(student.id, level_id)
        assert result.percent_complete == 0

        await _grade(db_session, student.id, course["activity_ids"][0])
        result = await calculator.calculate_level_progress(student.id, level_id)
        assert result.percent_complete == 50
        assert result.completed is False

    @pytest.mark.asyncio
    async def test_other_levels_and_students_do_not_count(self, db_session, student, pro_student, course, settings):
        await _grade(db_session, student.id, course["activity_ids"][2])
        await _grade(db_session, pro_student.id, course["activity_ids"][0])

        result = await ProgressCalculator(db_session, settings).calculate_level_progress(
            student.id, course["level_ids"][0]
        )
        assert result.percent_complete == 0

    @pytest.mark.asyncio
    async def test_rounds_half_up(self, db_session, student, settings):
        module = Module(name="Rounding")
        db_session.add(module)
        await db_session.flush()
        level = Level(module_id=module.id, order=1)
        db_session.add(level)
        await db_session.flush()
        activities = [Activity(level_id=level.id) for _ in range(8)]
        db_session.add_all(activities)
        await db_session.flush()

        await _grade(db_session, student.id, activities[0].id)
        result = await ProgressCalculator(db_session, settings).calculate_level_progress(student.id, level.id)
        assert result.percent_complete == 13

    @pytest.mark.asyncio
    async def test_unknown_level_has_nothing_to_do(self, db_session, student, settings):
        result = await ProgressCalculator(db_session, settings).calculate_level_progress(student.id, 404)
        assert result.percent_complete == 100
        assert result.completed is True

    @pytest.mark.asyncio
    async def test_calculation_does_not_write(self, db_session, student, course, settings):
        await ProgressCalculator(db_session, settings).calculate_level_progress(student.id, course["level_ids"][2])
        assert await _progress_row(db_session, student.id, course["level_ids"][2]) is None


class TestUpdateLevelProgress:
    @pytest.mark.asyncio
    async def test_partial_progress_creates_row(self, db_session, student, course, settings):
        await _grade(db_session, student.id, course["activity_ids"][0])

        result = await ProgressCalculator(db_session, settings).update_level_progress(
            student.id, course["level_ids"][0], now=NOW
        )

        assert result.percent_complete == 50
        assert result.completed is False
        assert result.newly_completed is False
        row = await _progress_row(db_session, student.id, course["level_ids"][0])
        assert row.percent_complete == 50
        assert row.completed_at is None
        assert await _progress_row(db_session, student.id, course["level_ids"][1]) is None

    @pytest.mark.asyncio
    async def test_completion_seeds_next_level(self, db_session, student, course, settings):
        for activity_id in course["activity_ids"][:2]:
            await _grade(db_session, student.id, activity_id)

        result = await ProgressCalculator(db_session, settings).update_level_progress(
            student.id, course["level_ids"][0], now=NOW
        )

        assert result.completed is True
        assert result.newly_completed is True
        assert result.completed_at is not None
        next_row = await _progress_row(db_session, student.id, course["level_ids"][1])
        assert next_row.percent_complete == 0
        assert next_row.completed is False

    @pytest.mark.asyncio
    async def test_completion_is_monotonic(self, db_session, student, course, settings):
        calculator = ProgressCalculator(db_session, settings)
        level_id = course["level_ids"][0]
        submissions = [await _grade(db_session, student.id, activity_id) for activity_id in course["activity_ids"][:2]]

        first = await calculator.update_level_progress(student.id, level_id, now=NOW)

        submissions[1].numeric_grade = None
        await db_session.flush()
        second = await calculator.update_level_progress(student.id, level_id, now=NOW + timedelta(days=1))

        assert second.percent_complete == 50
        assert second.completed is True
        assert second.newly_completed is False
        assert second.completed_at == first.completed_at

    @pytest.mark.asyncio
    async def test_completed_at_stays_utc_after_reload(self, db_session, student, course, settings):
        level_id = course["level_ids"][2]
        calculator = ProgressCalculator(db_session, settings)
        first = await calculator.update_level_progress(student.id, level_id, now=NOW)

        db_session.expunge_all()
        second = await calculator.update_level_progress(student.id, level_id, now=NOW + timedelta(days=1))
        row = await _progress_row(db_session, student.id, level_id)

        assert first.completed_at == NOW
        assert second.completed_at == NOW
        assert second.completed_at.tzinfo is not None
        assert row.completed_at.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_unknown_level_update_is_noop(self, db_session, student, settings):
        result = await ProgressCalculator(db_session, settings).update_level_progress(student.id, 404, now=NOW)

        assert result is None
        rows = (await db_session.execute(select(LevelProgress).where(LevelProgress.student_id == student.id))).all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_last_level_has_no_next(self, db_session, student, course, settings):
        calculator = ProgressCalculator(db_session, settings)
        result = await calculator.update_level_progress(student.id, course["level_ids"][2], now=NOW)

        assert result.newly_completed is True
        assert await calculator.unlock_next_level(student.id, course["level_ids"][2]) is None

    @pytest.mark.asyncio
    async def test_unlock_next_level_keeps_existing_row(self, db_session, student, course, settings):
        db_session.add(LevelProgress(student_id=student.id, level_id=course["level_ids"][1], percent_complete=40))
        await db_session.flush()

        next_id = await ProgressCalculator(db_session, settings).unlock_next_level(student.id, course["level_ids"][0])

        assert next_id == course["level_ids"][1]
        row = await _progress_row(db_session, student.id, course["level_ids"][1])
        assert row.percent_complete == 40


class TestAttendanceRecovery:
    @pytest.mark.asyncio
    async def test_missed_attendance_recovered_once(self, db_session, student, course, settings):
        level_id = course["level_ids"][2]
        attendance = Attendance(student_id=student.id, level_id=level_id, attended=False)
        db_session.add(attendance)
        await db_session.flush()

        calculator = ProgressCalculator(db_session, settings)
        result = await calculator.update_level_progress(student.id, level_id, now=NOW)
        await calculator.update_level_progress(student.id, level_id, now=NOW)

        assert result.attendance_recovered is True
        assert attendance.recovered is True
        record = await get_gamification_record(db_session, student.id)
        assert record.xp_total == 150
        reasons = (
            await db_session.execute(select(PointLog.reason).where(PointLog.student_id == student.id))
        ).scalars().all()
        assert reasons == ["Attendance recovered"]

    @pytest.mark.asyncio
    async def test_attended_level_gives_no_bonus(self, db_session, student, course, settings):
        level_id = course["level_ids"][2]
        db_session.add(Attendance(student_id=student.id, level_id=level_id, attended=True))
        await db_session.flush()

        result = await ProgressCalculator(db_session, settings).update_level_progress(student.id, level_id, now=NOW)

        assert result.attendance_recovered is False
        assert await get_gamification_record(db_session, student.id) is None


class TestStudentLevelProgress:
    @pytest.mark.asyncio
    async def test_schedule_and_prerequisites(self, db_session, student, course, settings):
        db_session.add(Assignment(student_id=student.id, module_id=course["module_id"], assigned_at=NOW - timedelta(days=10)))
        for activity_id in course["activity_ids"][:2]:
            await _grade(db_session, student.id, activity_id)
        calculator = ProgressCalculator(db_session, settings)
        await calculator.update_level_progress(student.id, course["level_ids"][0], now=NOW)

        levels = await calculator.get_student_level_progress(student.id, course["module_id"], now=NOW)

        assert [level.order for level in levels] == [1, 2, 3]
        assert [level.completed for level in levels] == [True, False, False]
        assert [level.is_available for level in levels] == [True, True, False]
        assert [level.days_required for level in levels] == [0, 7, 7]
        assert levels[2].is_stuck is True
        assert levels[0].percent_complete == 100

    @pytest.mark.asyncio
    async def test_without_assignment_no_time_has_passed(self, db_session, student, course, settings):
        levels = await ProgressCalculator(db_session, settings).get_student_level_progress(
            student.id, course["module_id"], now=NOW
        )

        assert [level.is_available for level in levels] == [True, False, False]
        assert [level.is_unlocked_by_time for level in levels] == [True, False, False]

    @pytest.mark.asyncio
    async def test_manual_overrides(self, db_session, student, course, settings):
        levels = (
            await db_session.execute(select(Level).where(Level.module_id == course["module_id"]).order_by(Level.order))
        ).scalars().all()
        levels[0].manual_lock_override = True
        levels[2].manual_lock_override = False
        await db_session.flush()

        statuses = await ProgressCalculator(db_session, settings).get_student_level_progress(
            student.id, course["module_id"], now=NOW
        )

        assert [status.is_available for status in statuses] == [False, False, True]
        assert statuses[0].is_manually_blocked is True

    @pytest.mark.asyncio
    async def test_unknown_module_has_no_levels(self, db_session, student, settings):
        levels = await ProgressCalculator(db_session, settings).get_student_level_progress(student.id, 404)
        assert levels == []


class TestGuideSubmissions:
    @pytest.mark.asyncio
    async def test_not_implemented(self, db_session, student, course, settings):
        result = await ProgressCalculator(db_session, settings).submit_guide(
            student.id, course["level_ids"][0], GuideKind.RAG
        )
        assert result.status == "not_implemented"
        assert result.kind is GuideKind.RAG
