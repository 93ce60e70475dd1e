"""
Daily goals and progress.

``DailyGoal`` is a closed sum type of three variants; consumers dispatch on it
with ``match`` rather than subclass hooks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from studyloop.core.models import DailySession

CATEGORY_FOCUS_TARGET = 5


@dataclass(frozen=True)
class QuestionCountGoal:
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Question count goal must be non-negative, got {self.count}")


@dataclass(frozen=True)
class TimeBasedMinutesGoal:
    minutes: int

    def __post_init__(self) -> None:
        if self.minutes < 0:
            raise ValueError(f"Minutes goal must be non-negative, got {self.minutes}")


@dataclass(frozen=True)
class CategoryFocusGoal:
    categories: tuple[str, ...] = field(default_factory=tuple)
    target: int = CATEGORY_FOCUS_TARGET


DailyGoal = Union[QuestionCountGoal, TimeBasedMinutesGoal, CategoryFocusGoal]


def target_value(goal: DailyGoal) -> int:
    """Numeric target for a goal."""
    match goal:
        case QuestionCountGoal(count=count):
            return count
        case TimeBasedMinutesGoal(minutes=minutes):
            return minutes
        case CategoryFocusGoal(target=target):
            return target
    raise TypeError(f"Unknown daily goal: {goal!r}")


def current_value(goal: DailyGoal, session: DailySession | None) -> int:
    """Progress a daily session has made toward ``goal``."""
    if session is None:
        return 0
    match goal:
        case QuestionCountGoal():
            return session.questions_completed
        case TimeBasedMinutesGoal():
            return int(session.time_spent // 60)
        case CategoryFocusGoal():
            return session.questions_completed
    raise TypeError(f"Unknown daily goal: {goal!r}")


def display_text(goal: DailyGoal) -> str:
    match goal:
        case QuestionCountGoal(count=count):
            return f"{count} questions per day"
        case TimeBasedMinutesGoal(minutes=minutes):
            return f"{minutes} minutes per day"
        case CategoryFocusGoal(categories=categories):
            if not categories:
                return "Focus on weak areas"
            return "Focus on " + ", ".join(categories)
    raise TypeError(f"Unknown daily goal: {goal!r}")


@dataclass(frozen=True)
class DailyProgress:
    """Progress toward today's goal, for progress displays."""

    current: int
    target: int

    @property
    def percentage(self) -> float:
        if self.target <= 0:
            return 0.0
        return min(1.0, self.current / self.target)

    @property
    def is_completed(self) -> bool:
        return self.current >= self.target

    @property
    def remaining(self) -> int:
        return max(0, self.target - self.current)

    @classmethod
    def for_goal(cls, goal: DailyGoal, session: DailySession | None) -> DailyProgress:
        return cls(current=current_value(goal, session), target=target_value(goal))
