"""
Level Unlock Evaluator - decides whether a content level is open to a student.

A level's manual override takes precedence:
- FORCE_LOCKED: locked, whatever the schedule or prerequisite say
- FORCE_UNLOCKED: open, bypassing both checks
- SCHEDULED: open once the unlock delay has elapsed since the module was
  assigned AND the previous level (by order) is completed

The first level of a module always has its prerequisite satisfied.
"""

from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel


class LockOverride(str, Enum):
    """Manual lock state of a level."""
    FORCE_LOCKED = "force_locked"
    FORCE_UNLOCKED = "force_unlocked"
    SCHEDULED = "scheduled"

    @classmethod
    def from_column(cls, value: Optional[bool]) -> "LockOverride":
        """Map the nullable manual_lock_override column onto the three states."""
        if value is None:
            return cls.SCHEDULED
        return cls.FORCE_LOCKED if value else cls.FORCE_UNLOCKED


class LevelState(BaseModel):
    """What the evaluator needs to know about one level for one student."""

    level_id: int
    order: int
    days_to_unlock: Optional[int] = None
    manual_lock_override: Optional[bool] = None
    completed: bool = False


class LevelAvailability(BaseModel):
    """Unlock status of a level."""

    level_id: Optional[int] = None
    override: LockOverride
    days_required: int
    is_available: bool
    is_unlocked_by_time: bool
    is_unlocked_by_progress: bool
    is_stuck: bool
    is_manually_blocked: bool


class LevelUnlockEvaluator:
    """
    Evaluates level unlock gating.

    Levels without an explicit delay wait DEFAULT_DAYS_TO_UNLOCK days, except
    the first level which is open from day 0.
    """

    DEFAULT_DAYS_TO_UNLOCK = 7

    def __init__(self, default_days_to_unlock: Optional[int] = None):
        self.default_days_to_unlock = (
            self.DEFAULT_DAYS_TO_UNLOCK if default_days_to_unlock is None else default_days_to_unlock
        )

    def days_required(self, order: int, days_to_unlock: Optional[int]) -> int:
        if days_to_unlock is not None:
            return days_to_unlock
        return 0 if order <= 1 else self.default_days_to_unlock

    def evaluate(
        self,
        *,
        manual_lock_override: Optional[bool],
        order: int,
        days_to_unlock: Optional[int],
        days_elapsed: int,
        prerequisite_completed: bool,
        level_id: Optional[int] = None,
    ) -> LevelAvailability:
        """Evaluate a single level."""
        override = LockOverride.from_column(manual_lock_override)
        required = self.days_required(order, days_to_unlock)
        by_time = days_elapsed >= required
        by_progress = prerequisite_completed

        if override is LockOverride.FORCE_LOCKED:
            available = False
        elif override is LockOverride.FORCE_UNLOCKED:
            available = True
        else:
            available = by_time and by_progress

        return LevelAvailability(
            level_id=level_id,
            override=override,
            days_required=required,
            is_available=available,
            is_unlocked_by_time=by_time,
            is_unlocked_by_progress=by_progress,
            is_stuck=by_time and not by_progress and override is not LockOverride.FORCE_UNLOCKED,
            is_manually_blocked=override is LockOverride.FORCE_LOCKED,
        )

    def evaluate_module(self, levels: Iterable[LevelState], days_elapsed: int) -> List[LevelAvailability]:
        """
        Evaluate every level of a module in ascending order.

        Each level's prerequisite is the completion flag of the level before
        it, so the scan must be sequential.
        """
        results: List[LevelAvailability] = []
        previous_completed = True
        for level in sorted(levels, key=lambda lvl: lvl.order):
            results.append(
                self.evaluate(
                    manual_lock_override=level.manual_lock_override,
                    order=level.order,
                    days_to_unlock=level.days_to_unlock,
                    days_elapsed=days_elapsed,
                    prerequisite_completed=previous_completed,
                    level_id=level.level_id,
                )
            )
            previous_completed = level.completed
        return results
