"""
Learner Profile.

Explicitly constructed context for the single active learner. Owns the only
mutable aggregates (streak, daily sessions, insights) and serializes every
write behind one lock, so goal-completion transitions for a day can never
race. Analytic reads (proficiency, recommendations) run over snapshots and
do not take the lock for their computation.

The hourly day-rollover check is exposed as ``tick(now)`` for an external
scheduler or test harness to drive.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, time

from loguru import logger

from studyloop.adaptive.insight_engine import InsightEngine
from studyloop.adaptive.recommendation_engine import RecommendationEngine
from studyloop.core.dates import start_of_day
from studyloop.core.goals import DailyGoal, DailyProgress, display_text
from studyloop.core.models import (
    AnswerRecord,
    CategoryPerformance,
    DailyRegimen,
    DailySession,
    QuizEvaluationResult,
    StudyInsight,
    StudyRecommendation,
    StudyStreak,
    Taxonomy,
)
from studyloop.regimen.daily_goal_tracker import DailyGoalTracker, ProgressUpdate
from studyloop.regimen.reminders import ReminderPayload, ReminderPlanner
from studyloop.regimen.streak_tracker import StreakTracker
from studyloop.study.proficiency_calculator import ProficiencyCalculator

Clock = Callable[[], datetime]


class LearnerProfile:
    """
    Single-writer facade over the regimen state of one learner.

    Usage:
        profile = LearnerProfile()
        profile.enable_regimen(QuestionCountGoal(5))
        profile.record_progress(evaluation)
        profile.tick()                      # hourly, from the scheduler
        profile.todays_progress()
    """

    def __init__(
        self,
        regimen: DailyRegimen | None = None,
        streak: StudyStreak | None = None,
        sessions: list[DailySession] | None = None,
        insights: Sequence[StudyInsight] = (),
        clock: Clock | None = None,
        insight_engine: InsightEngine | None = None,
        recommendation_engine: RecommendationEngine | None = None,
        proficiency_calculator: ProficiencyCalculator | None = None,
        reminder_planner: ReminderPlanner | None = None,
    ):
        """
        Args:
            regimen: Daily regimen (default: disabled until enabled)
            streak: Persisted streak state
            sessions: Persisted daily sessions, newest first
            insights: Persisted insights, newest first
            clock: Source of "now" (default: local wall clock)
        """
        self._lock = threading.RLock()
        self.clock = clock or datetime.now

        self._regimen = regimen or DailyRegimen(is_enabled=False)
        self.streak_tracker = StreakTracker(streak)
        self.goal_tracker = DailyGoalTracker(self._regimen, self.streak_tracker, sessions)
        self._insights: list[StudyInsight] = list(insights)
        self._recommendations: list[StudyRecommendation] = []

        self.insight_engine = insight_engine or InsightEngine()
        self.recommendation_engine = recommendation_engine or RecommendationEngine()
        self.proficiency_calculator = proficiency_calculator or ProficiencyCalculator()
        self.reminder_planner = reminder_planner or ReminderPlanner()

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock()

    # ========================================
    # Snapshots
    # ========================================

    @property
    def regimen(self) -> DailyRegimen:
        with self._lock:
            return copy.deepcopy(self._regimen)

    @property
    def streak(self) -> StudyStreak:
        with self._lock:
            return copy.copy(self.streak_tracker.streak)

    @property
    def recent_sessions(self) -> list[DailySession]:
        with self._lock:
            return copy.deepcopy(self.goal_tracker.sessions)

    @property
    def insights(self) -> list[StudyInsight]:
        with self._lock:
            return list(self._insights)

    @property
    def recommendations(self) -> list[StudyRecommendation]:
        with self._lock:
            return list(self._recommendations)

    # ========================================
    # Regimen configuration
    # ========================================

    def enable_regimen(
        self,
        goal: DailyGoal,
        reminder_time: time | None = None,
        now: datetime | None = None,
    ) -> DailyRegimen:
        """Start a new regimen with ``goal``."""
        regimen = DailyRegimen(daily_goal=goal, start_date=start_of_day(self._now(now)))
        if reminder_time is not None:
            regimen.reminder_settings.preferred_time = reminder_time
        self.update_regimen(regimen)
        logger.info(f"Daily regimen enabled with goal: {display_text(goal)}")
        return copy.deepcopy(regimen)

    def disable_regimen(self) -> None:
        with self._lock:
            self._regimen.is_enabled = False
        logger.info("Daily regimen disabled")

    def update_regimen(self, regimen: DailyRegimen) -> None:
        with self._lock:
            self._regimen = regimen
            self.goal_tracker.regimen = regimen

    # ========================================
    # Writes
    # ========================================

    def record_progress(
        self,
        evaluation: QuizEvaluationResult,
        now: datetime | None = None,
        performances: Sequence[CategoryPerformance] = (),
    ) -> ProgressUpdate | None:
        """
        Record a graded quiz session, advance the streak and refresh insights.

        Callers resolve grading failures before calling this.
        """
        now = self._now(now)
        with self._lock:
            update = self.goal_tracker.record_progress(evaluation, now)
            if update is None:
                return None

            for insight in update.insights:
                self._insights.insert(0, insight)
            self._insights = self.insight_engine.generate(
                self.goal_tracker.sessions,
                self._insights,
                now,
                performances,
            )
            return update

    def tick(self, now: datetime | None = None) -> bool:
        """
        Periodic day-rollover check; safe to run any number of times.

        Returns:
            True if the streak was reset by this tick
        """
        now = self._now(now)
        with self._lock:
            hold = self._regimen.reminder_settings.streak_recovery_enabled
            reset = self.streak_tracker.check_day_rollover(now, hold_for_recovery=hold)
            self._insights = self.insight_engine.prune(self._insights, now)
            return reset

    def accept_streak_recovery(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self.streak_tracker.accept_streak_recovery(self._now(now))

    def decline_streak_recovery(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self.streak_tracker.decline_streak_recovery(self._now(now))

    def refresh_recommendations(
        self,
        taxonomy: Taxonomy,
        answers: Iterable[AnswerRecord],
        now: datetime | None = None,
    ) -> list[StudyRecommendation]:
        """Recompute recommendations from a history snapshot and store them."""
        performances = self.proficiency_calculator.calculate_all_category_performances(
            taxonomy, answers, self._now(now)
        )
        recommendations = self.recommendation_engine.generate(performances, taxonomy)
        with self._lock:
            self._recommendations = recommendations
        return list(recommendations)

    # ========================================
    # Reads
    # ========================================

    def todays_session(self, now: datetime | None = None) -> DailySession | None:
        with self._lock:
            session = self.goal_tracker.todays_session(self._now(now))
            return copy.deepcopy(session)

    def todays_progress(self, now: datetime | None = None) -> DailyProgress:
        with self._lock:
            return self.goal_tracker.todays_progress(self._now(now))

    def is_streak_active(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self.streak_tracker.is_streak_active(self._now(now))

    def should_offer_streak_recovery(self, now: datetime | None = None) -> bool:
        with self._lock:
            return self.streak_tracker.should_offer_streak_recovery(self._now(now))

    def streak_recovery_status(self, now: datetime | None = None) -> tuple[bool, int]:
        """(can_recover, days_to_recover); days is the recovery window when offered."""
        can_recover = self.should_offer_streak_recovery(now)
        days = self.streak_tracker.recovery_window_days if can_recover else 0
        return can_recover, days

    def reminders(self, now: datetime | None = None) -> list[ReminderPayload]:
        now = self._now(now)
        with self._lock:
            return self.reminder_planner.plan(
                self._regimen,
                self.goal_tracker.todays_progress(now),
                self.streak_tracker,
                now,
            )
