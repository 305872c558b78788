"""
Ranking awards and certificates.

Both tables are optional: some deployments never ran the migration that
creates them, so code touching them must tolerate their absence.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lms.kernel.models.base import Base


class RankingAward(Base):
    """Position of a student in the awards ranking."""

    __tablename__ = "ranking_awards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    current_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    rewind_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Certificate(Base):
    """Module completion certificate."""

    __tablename__ = "certificates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    module_id: Mapped[Optional[int]] = mapped_column(ForeignKey("modules.id"), nullable=True)
    verification_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pdf_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    issued_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
