"""
Reminder Planner.

Decides which reminder payloads the notification collaborator should
schedule. Delivery, permissions and OS scheduling stay outside the core.

Payloads:
- DAILY: next preferred reminder time on a day whose goal is not yet met
- FOLLOW_UP: nudge when today's goal is partially done past the reminder time
- STREAK_RECOVERY: immediate offer while a broken streak can still be saved
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from loguru import logger

from studyloop.core.goals import DailyProgress, display_text
from studyloop.core.models import DailyRegimen
from studyloop.regimen.streak_tracker import StreakTracker

FOLLOW_UP_DELAY = timedelta(hours=2)
OPEN_QUIZ_ACTION = "openQuiz"


class ReminderKind(str, Enum):
    DAILY = "daily"
    FOLLOW_UP = "follow_up"
    STREAK_RECOVERY = "streak_recovery"


@dataclass(frozen=True)
class ReminderPayload:
    """A notification the scheduling collaborator may deliver."""

    kind: ReminderKind
    title: str
    body: str
    fire_at: datetime
    user_info: dict[str, str] = field(default_factory=lambda: {"action": OPEN_QUIZ_ACTION})


class ReminderPlanner:
    """Pure decision logic over regimen, progress and streak state."""

    def plan(
        self,
        regimen: DailyRegimen,
        progress: DailyProgress,
        streak_tracker: StreakTracker,
        now: datetime,
    ) -> list[ReminderPayload]:
        """
        Decide the reminders to schedule as of ``now``.

        Args:
            regimen: Active regimen with reminder settings
            progress: Today's goal progress
            streak_tracker: Streak state for recovery offers
            now: Current local time

        Returns:
            Payloads ordered by fire time
        """
        settings = regimen.reminder_settings
        if not regimen.is_enabled or not settings.is_enabled:
            return []

        payloads = [self._daily(regimen, progress, now)]

        follow_up = self._follow_up(regimen, progress, now)
        if follow_up is not None:
            payloads.append(follow_up)

        if settings.streak_recovery_enabled and streak_tracker.should_offer_streak_recovery(now):
            payloads.append(self._recovery(streak_tracker, now))
            logger.warning(
                f"Offering streak recovery for a {streak_tracker.current_streak}-day streak"
            )

        return sorted(payloads, key=lambda p: p.fire_at)

    def _daily(
        self,
        regimen: DailyRegimen,
        progress: DailyProgress,
        now: datetime,
    ) -> ReminderPayload:
        preferred = regimen.reminder_settings.preferred_time
        fire_at = datetime.combine(now.date(), preferred, tzinfo=now.tzinfo)
        if progress.is_completed or fire_at <= now:
            fire_at += timedelta(days=1)

        return ReminderPayload(
            kind=ReminderKind.DAILY,
            title="Daily Quiz",
            body=f"Time for your daily study session: {display_text(regimen.daily_goal)}.",
            fire_at=fire_at,
        )

    def _follow_up(
        self,
        regimen: DailyRegimen,
        progress: DailyProgress,
        now: datetime,
    ) -> ReminderPayload | None:
        settings = regimen.reminder_settings
        if not settings.allow_follow_up or progress.is_completed or progress.current <= 0:
            return None

        preferred = datetime.combine(now.date(), settings.preferred_time, tzinfo=now.tzinfo)
        fire_at = now + FOLLOW_UP_DELAY
        if now < preferred or fire_at.date() != now.date():
            return None

        return ReminderPayload(
            kind=ReminderKind.FOLLOW_UP,
            title="Almost There",
            body=f"Only {progress.remaining} to go to reach today's goal.",
            fire_at=fire_at,
        )

    def _recovery(self, streak_tracker: StreakTracker, now: datetime) -> ReminderPayload:
        return ReminderPayload(
            kind=ReminderKind.STREAK_RECOVERY,
            title="Save Your Streak",
            body=(
                f"Your {streak_tracker.current_streak}-day streak can still be recovered. "
                f"Complete today's goal to keep it going."
            ),
            fire_at=now,
        )
