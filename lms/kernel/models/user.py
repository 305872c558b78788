"""
User and plan models.

The progression engine only reads from these tables: the user's role and
subscription plan (Pro students get an XP multiplier and weekly missions).
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from lms.kernel.models.base import Base, TimestampMixin


class UserRole(str, Enum):
    """User roles in the system."""
    ADMIN = "admin"
    STUDENT = "student"
    PROFESSOR = "professor"
    SPECIALIST = "specialist"


class Plan(Base):
    """Subscription plan (Basic, Standard, Pro, ...)."""

    __tablename__ = "plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)


class User(Base, TimestampMixin):
    """User account model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(String(50), default=UserRole.STUDENT, nullable=False)
    plan_id: Mapped[Optional[int]] = mapped_column(ForeignKey("plans.id"), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"
