"""
Streak Tracker.

Day-granularity state machine over goal-completion events.

Transitions on goal completion (gap = calendar days since last study date):
- no history  -> current = 1
- gap == 1    -> current + 1 (checked before the grace branch)
- gap <= grace (incl. same day, clock skew) -> unchanged
- gap > grace -> current = 1 (today's completion starts a new streak)
then longest = max(longest, current) and last study date = today.

The day-rollover check is the only path that lowers the streak to 0. It is
recomputed from the last study date and ``now`` on every call, so repeated or
out-of-order ticks cannot double-reset.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from loguru import logger

from config import get_settings
from studyloop.core.dates import gap_days, previous_day, start_of_day
from studyloop.core.models import StudyStreak


class StreakTracker:
    """Owns a StudyStreak and applies every mutation to it."""

    def __init__(
        self,
        streak: StudyStreak | None = None,
        recovery_window_days: int | None = None,
    ):
        """
        Args:
            streak: Existing streak state (default: fresh streak with the
                configured grace period)
            recovery_window_days: Largest gap for which recovery is offered (default 3)
        """
        settings = get_settings()
        self.streak = streak or StudyStreak(grace_period_days=settings.streak_grace_period_days)
        self.recovery_window_days = (
            settings.streak_recovery_window_days
            if recovery_window_days is None
            else recovery_window_days
        )

    @property
    def current_streak(self) -> int:
        return self.streak.current_streak

    @property
    def longest_streak(self) -> int:
        return self.streak.longest_streak

    def gap_from_last_study(self, now: date | datetime) -> int | None:
        """Calendar days since the last study date, clamped at 0; None without history."""
        if self.streak.last_study_date is None:
            return None
        return max(0, gap_days(self.streak.last_study_date, now))

    # ========================================
    # Queries
    # ========================================

    def is_streak_active(self, now: date | datetime) -> bool:
        gap = self.gap_from_last_study(now)
        if gap is None:
            return False
        return gap <= self.streak.grace_period_days

    def should_offer_streak_recovery(self, now: date | datetime) -> bool:
        """
        True iff grace < gap <= recovery window and there is a streak to save.

        A break is only bridged once: no offer is made while an accepted
        recovery is still waiting for a goal completion.
        """
        gap = self.gap_from_last_study(now)
        if gap is None or self.streak.recovery_date is not None:
            return False
        return (
            self.streak.grace_period_days < gap <= self.recovery_window_days
            and self.streak.current_streak > 0
        )

    # ========================================
    # Transitions
    # ========================================

    def record_goal_completion(self, now: date | datetime) -> StudyStreak:
        """
        Apply today's goal completion.

        Same-day repeats are no-ops; the caller is still expected to trigger
        this only on the first completion of a day.
        """
        today = start_of_day(now)
        before = self.streak.current_streak
        last = self.streak.last_study_date

        if last is None:
            self.streak.current_streak = 1
        else:
            gap = gap_days(last, today)
            if gap == 1:
                self.streak.current_streak += 1
            elif gap <= self.streak.grace_period_days:
                # Same day, inside grace, or clock moved backwards
                pass
            else:
                self.streak.current_streak = 1

        self.streak.longest_streak = max(self.streak.longest_streak, self.streak.current_streak)
        if last is None or today > last:
            self.streak.last_study_date = today
        self.streak.recovery_date = None

        if self.streak.current_streak != before:
            logger.info(
                f"Streak {before} -> {self.streak.current_streak} "
                f"(longest {self.streak.longest_streak})"
            )
        return self.streak

    def check_day_rollover(self, now: date | datetime, hold_for_recovery: bool = False) -> bool:
        """
        Zero the streak once the gap exceeds the grace period.

        Args:
            now: Current time from the external scheduler
            hold_for_recovery: Defer the reset while a recovery offer is open

        Returns:
            True if the streak was reset by this call
        """
        today = start_of_day(now)
        if self.streak.recovery_date == today:
            return False

        gap = self.gap_from_last_study(today)
        if gap is None or gap <= self.streak.grace_period_days:
            return False

        if hold_for_recovery and self.should_offer_streak_recovery(today):
            logger.debug(f"Holding streak reset for recovery (gap {gap} days)")
            return False

        if self.streak.current_streak == 0:
            return False

        logger.info(
            f"Streak of {self.streak.current_streak} broken after {gap} days without study"
        )
        self.streak.current_streak = 0
        self.streak.recovery_date = None
        return True

    def accept_streak_recovery(self, now: date | datetime) -> bool:
        """
        Bridge a missed gap so the streak survives.

        The last study date moves to yesterday, which makes today's completion
        count as consecutive.

        Returns:
            True if a recovery offer was open and has been applied
        """
        if not self.should_offer_streak_recovery(now):
            return False

        today = start_of_day(now)
        self.streak.last_study_date = previous_day(today)
        self.streak.recovery_date = today
        logger.info(f"Streak recovery accepted; streak of {self.streak.current_streak} kept")
        return True

    def decline_streak_recovery(self, now: date | datetime) -> bool:
        """Apply the held reset immediately."""
        return self.check_day_rollover(now, hold_for_recovery=False)


def reconstruct_streak(
    study_days: Iterable[date | datetime],
    today: date | datetime,
    grace_period_days: int = 1,
) -> StudyStreak:
    """
    Derive a streak from raw activity days.

    Current streak counts back over consecutive days ending today; longest
    is the longest run of consecutive days anywhere in the history.

    Args:
        study_days: Days (or timestamps) with any study activity
        today: Reference day
        grace_period_days: Carried onto the returned streak

    Returns:
        StudyStreak rebuilt from the history
    """
    days = sorted({start_of_day(d) for d in study_days}, reverse=True)
    if not days:
        return StudyStreak(grace_period_days=grace_period_days)

    reference = start_of_day(today)
    current = 0
    for day in days:
        if gap_days(day, reference) == current:
            current += 1
        else:
            break

    longest = 0
    run = 0
    previous: date | None = None
    for day in reversed(days):
        if previous is not None and gap_days(previous, day) == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    return StudyStreak(
        current_streak=current,
        longest_streak=max(longest, current),
        last_study_date=days[0],
        grace_period_days=grace_period_days,
    )
