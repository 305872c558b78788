"""Initial schema - users, course content and gamification

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Plans and users
    op.create_table(
        'plans',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(50), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
    )

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, default='student'),
        sa.Column('plan_id', sa.Integer(), sa.ForeignKey('plans.id'), nullable=True),
        sa.Column('avatar', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Course content
    op.create_table(
        'modules',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=True),
    )

    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('module_id', sa.Integer(), sa.ForeignKey('modules.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('professor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'levels',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('module_id', sa.Integer(), sa.ForeignKey('modules.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(100), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('days_to_unlock', sa.Integer(), nullable=True),
        sa.Column('manual_lock_override', sa.Boolean(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.UniqueConstraint('module_id', 'order', name='uq_levels_module_order'),
    )

    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('level_id', sa.Integer(), sa.ForeignKey('levels.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('kind', sa.String(20), nullable=True),
        sa.Column('title', sa.String(100), nullable=True),
        sa.Column('max_points', sa.Integer(), nullable=True),
        sa.Column('due_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'submissions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('activity_id', sa.Integer(), sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('numeric_grade', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
    )

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('level_id', sa.Integer(), sa.ForeignKey('levels.id', ondelete='CASCADE'), nullable=False),
        sa.Column('professor_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('attended', sa.Boolean(), nullable=False, default=False),
        sa.Column('recovered', sa.Boolean(), nullable=False, default=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_attendance_student_level', 'attendance', ['student_id', 'level_id'])

    # Gamification state
    op.create_table(
        'student_gamification',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('xp_total', sa.Integer(), nullable=False, default=0),
        sa.Column('current_level', sa.Integer(), nullable=False, default=1),
        sa.Column('available_points', sa.Integer(), nullable=False, default=0),
        sa.Column('streak_days', sa.Integer(), nullable=False, default=0),
        sa.Column('last_streak_update', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('xp_total >= 0', name='ck_student_gamification_xp_non_negative'),
        sa.CheckConstraint('current_level >= 1', name='ck_student_gamification_level_positive'),
        sa.CheckConstraint('streak_days >= 0', name='ck_student_gamification_streak_non_negative'),
    )

    op.create_table(
        'point_log',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(255), nullable=False),
        sa.Column('earned_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'level_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('level_id', sa.Integer(), sa.ForeignKey('levels.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('percent_complete', sa.Integer(), nullable=False, default=0),
        sa.Column('completed', sa.Boolean(), nullable=False, default=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('student_id', 'level_id', name='uq_level_progress_student_level'),
        sa.CheckConstraint('percent_complete BETWEEN 0 AND 100', name='ck_level_progress_percent_range'),
    )

    # Missions
    op.create_table(
        'missions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('type', sa.String(50), nullable=False, index=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('xp_reward', sa.Integer(), nullable=False, default=0),
        sa.Column('icon', sa.String(255), nullable=True),
        sa.Column('target_value', sa.Integer(), nullable=False, default=1),
        sa.Column('is_daily', sa.Boolean(), nullable=False, default=False),
        sa.Column('active', sa.Boolean(), nullable=False, default=True),
    )

    op.create_table(
        'mission_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mission_id', sa.Integer(), sa.ForeignKey('missions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=True),
        sa.Column('current_progress', sa.Integer(), nullable=False, default=0),
        sa.Column('completed', sa.Boolean(), nullable=False, default=False),
        sa.Column('reward_claimed', sa.Boolean(), nullable=False, default=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_mission_progress_student_mission', 'mission_progress', ['student_id', 'mission_id'])
    op.create_index('ix_mission_progress_student_week', 'mission_progress', ['student_id', 'week_start'])

    # Achievements
    op.create_table(
        'achievements',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('condition_type', sa.String(50), nullable=False),
        sa.Column('condition_value', sa.Integer(), nullable=False, default=0),
        sa.Column('active', sa.Boolean(), nullable=False, default=True),
    )

    op.create_table(
        'achievement_unlocks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('achievement_id', sa.Integer(), sa.ForeignKey('achievements.id', ondelete='CASCADE'), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('student_id', 'achievement_id', name='uq_achievement_unlocks_student_achievement'),
    )


def downgrade() -> None:
    op.drop_table('achievement_unlocks')
    op.drop_table('achievements')
    op.drop_index('ix_mission_progress_student_week', table_name='mission_progress')
    op.drop_index('ix_mission_progress_student_mission', table_name='mission_progress')
    op.drop_table('mission_progress')
    op.drop_table('missions')
    op.drop_table('level_progress')
    op.drop_table('point_log')
    op.drop_table('student_gamification')
    op.drop_index('ix_attendance_student_level', table_name='attendance')
    op.drop_table('attendance')
    op.drop_table('submissions')
    op.drop_table('activities')
    op.drop_table('levels')
    op.drop_table('assignments')
    op.drop_table('modules')
    op.drop_table('users')
    op.drop_table('plans')
