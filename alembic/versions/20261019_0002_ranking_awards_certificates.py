"""Ranking awards and certificates

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

Some deployments never applied this revision; progress resets tolerate
both tables being absent.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0002'
down_revision: Union[str, None] = '0001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ranking_awards',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('current_position', sa.Integer(), nullable=True),
        sa.Column('rewind_url', sa.Text(), nullable=True),
    )

    op.create_table(
        'certificates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('module_id', sa.Integer(), sa.ForeignKey('modules.id'), nullable=True),
        sa.Column('verification_code', sa.String(100), nullable=True),
        sa.Column('pdf_url', sa.Text(), nullable=True),
        sa.Column('issued_at', sa.Date(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('certificates')
    op.drop_table('ranking_awards')
