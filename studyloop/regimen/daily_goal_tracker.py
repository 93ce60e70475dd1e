"""
Daily Goal Tracker.

Aggregates same-day quiz activity into a running DailySession and evaluates
goal completion. The first not-completed -> completed transition of a day
drives the StreakTracker and may emit a streak-milestone insight.

Session history is kept newest first; a new day's session supersedes the
previous one at index 0 rather than replacing it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from config import get_settings
from studyloop.core.dates import start_of_day
from studyloop.core.goals import DailyProgress, display_text
from studyloop.core.models import (
    DailyRegimen,
    DailySession,
    InsightType,
    QuizEvaluationResult,
    StudyInsight,
)
from studyloop.regimen.streak_tracker import StreakTracker


@dataclass
class ProgressUpdate:
    """Outcome of recording one quiz session."""

    session: DailySession
    progress: DailyProgress
    goal_just_completed: bool = False
    insights: list[StudyInsight] = field(default_factory=list)


def merge_average(
    old_average: float,
    old_total: int,
    new_score: float,
    new_total: int,
) -> float:
    """Question-weighted running average; 0 when no questions were counted."""
    combined = old_total + new_total
    if combined <= 0:
        return 0.0
    return (old_average * old_total + new_score * new_total) / combined


class DailyGoalTracker:
    """
    Running daily-session accumulator.

    Not thread-safe on its own; LearnerProfile serializes writers.
    """

    def __init__(
        self,
        regimen: DailyRegimen,
        streak_tracker: StreakTracker,
        sessions: list[DailySession] | None = None,
        recent_sessions_limit: int | None = None,
    ):
        """
        Args:
            regimen: Active daily regimen (goal + enablement)
            streak_tracker: Receives the goal-completion transition
            sessions: Existing history, newest first
            recent_sessions_limit: Sessions retained (default 30)
        """
        self.regimen = regimen
        self.streak_tracker = streak_tracker
        self.sessions = sessions if sessions is not None else []
        self.recent_sessions_limit = (
            get_settings().recent_sessions_limit
            if recent_sessions_limit is None
            else recent_sessions_limit
        )

    def todays_session(self, now: datetime) -> DailySession | None:
        """Today's session, if progress has been recorded today."""
        today = start_of_day(now)
        for session in self.sessions:
            if session.date == today:
                return session
        return None

    def todays_progress(self, now: datetime) -> DailyProgress:
        """Progress toward the active goal, zero if nothing was recorded today."""
        return DailyProgress.for_goal(self.regimen.daily_goal, self.todays_session(now))

    def is_todays_goal_achieved(self, now: datetime) -> bool:
        return self.todays_progress(now).is_completed

    def record_progress(
        self,
        evaluation: QuizEvaluationResult,
        now: datetime,
    ) -> ProgressUpdate | None:
        """
        Merge a graded quiz session into today's DailySession.

        Args:
            evaluation: Graded session from the grading collaborator
            now: Current time; defines "today"

        Returns:
            ProgressUpdate, or None if the regimen is disabled or the quiz
            was not started today
        """
        if not self.regimen.is_enabled:
            logger.debug("Daily regimen disabled; progress not recorded")
            return None

        today = start_of_day(now)
        if start_of_day(evaluation.started_at) != today:
            logger.debug(
                f"Ignoring quiz session {evaluation.session_id} started on "
                f"{start_of_day(evaluation.started_at)} (today is {today})"
            )
            return None

        session = self._get_or_create_session(now)
        self._merge(session, evaluation)

        update = ProgressUpdate(session=session, progress=self.todays_progress(now))
        if not session.goal_achieved and update.progress.is_completed:
            update.goal_just_completed = True
            update.insights.extend(self._complete_goal(session, now))

        logger.info(
            f"Recorded {evaluation.total_questions} questions "
            f"({update.progress.current}/{update.progress.target} toward "
            f"'{display_text(self.regimen.daily_goal)}')"
        )
        return update

    # ========================================
    # Internals
    # ========================================

    def _get_or_create_session(self, now: datetime) -> DailySession:
        session = self.todays_session(now)
        if session is not None:
            return session

        session = DailySession(
            date=start_of_day(now),
            streak_day=self.streak_tracker.current_streak,
        )
        self.sessions.insert(0, session)
        del self.sessions[self.recent_sessions_limit:]
        return session

    @staticmethod
    def _merge(session: DailySession, evaluation: QuizEvaluationResult) -> None:
        new_total = evaluation.total_questions

        session.average_score = merge_average(
            session.average_score,
            session.total_questions,
            evaluation.overall_score,
            new_total,
        )
        session.questions_completed += new_total
        session.time_spent += max(0.0, evaluation.duration_seconds)
        session.correct_answers += evaluation.correct_answers
        session.total_questions += new_total

        session.categories_studied.update(evaluation.categories_in_session)
        session.categories_studied.update(
            r.category_id for r in evaluation.individual_results if r.category_id
        )
        session.quiz_session_ids.append(evaluation.session_id)
        session.improvement_areas = list(evaluation.areas_for_improvement)

    def _complete_goal(self, session: DailySession, now: datetime) -> list[StudyInsight]:
        session.goal_achieved = True
        streak = self.streak_tracker.record_goal_completion(now)
        logger.info(f"Daily goal achieved! Streak: {streak.current_streak}")

        if streak.current_streak <= 1:
            return []
        return [
            StudyInsight(
                type=InsightType.STREAK_MILESTONE,
                title="Streak Continues!",
                description=(
                    f"You've maintained your study streak for {streak.current_streak} days!"
                ),
                created_at=now,
            )
        ]
