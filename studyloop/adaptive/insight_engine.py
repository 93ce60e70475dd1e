"""
Insight Engine.

Rule-based feedback derived from recent daily sessions and category rollups.

Every rule follows the same contract:
- Skip unless enough daily sessions exist (trend rules)
- Suppress if an insight of the same type was created within the dedup window
- New insights are inserted at index 0 (most recent first)
- Insights older than the retention window are dropped after each pass
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from config import get_settings
from studyloop.core.dates import elapsed_seconds
from studyloop.core.models import (
    CategoryPerformance,
    DailySession,
    InsightType,
    StudyInsight,
)


@dataclass
class InsightContext:
    """Read-only inputs for one generation pass."""

    sessions: Sequence[DailySession]  # newest first
    performances: Sequence[CategoryPerformance]
    now: datetime


InsightRule = Callable[[InsightContext], "StudyInsight | None"]

# Decimal places kept when comparing averages against thresholds
ACCURACY_PRECISION = 9


class InsightEngine:
    """
    Generate study insights.

    Rules:
    - Strong performance: mean accuracy over the last 7 sessions > 80%
    - Consistency: goal achieved on every one of the last 7 (>= 5) sessions
    - Decline: latest 3 sessions >= 15 points below the rest of the window
    - Weak area: a category below 50% proficiency with >= 2 attempts
    """

    def __init__(
        self,
        min_sessions: int | None = None,
        trend_window: int | None = None,
        strong_accuracy: float | None = None,
        decline_drop: float | None = None,
        dedup_days: int | None = None,
        retention_days: int | None = None,
        weak_category_threshold: float | None = None,
        weak_category_min_attempts: int | None = None,
    ):
        settings = get_settings()
        defaults = settings.get_insight_config()
        self.min_sessions = min_sessions or defaults["min_sessions"]
        self.trend_window = trend_window or defaults["trend_window"]
        self.strong_accuracy = (
            defaults["strong_accuracy"] if strong_accuracy is None else strong_accuracy
        )
        self.decline_drop = defaults["decline_drop"] if decline_drop is None else decline_drop
        self.dedup_days = defaults["dedup_days"] if dedup_days is None else dedup_days
        self.retention_days = retention_days or defaults["retention_days"]
        self.weak_category_threshold = (
            settings.weak_category_threshold
            if weak_category_threshold is None
            else weak_category_threshold
        )
        self.weak_category_min_attempts = (
            settings.weak_category_min_attempts
            if weak_category_min_attempts is None
            else weak_category_min_attempts
        )

        self.trend_rules: list[InsightRule] = [
            self.strong_performance_rule,
            self.consistency_rule,
            self.decline_rule,
        ]
        self.rollup_rules: list[InsightRule] = [self.weak_area_rule]

    def generate(
        self,
        sessions: Sequence[DailySession],
        existing: Sequence[StudyInsight],
        now: datetime,
        performances: Sequence[CategoryPerformance] = (),
    ) -> list[StudyInsight]:
        """
        Run one generation pass.

        Args:
            sessions: Daily sessions, newest first
            existing: Current insights, newest first
            now: Evaluation time
            performances: Optional category rollups for rollup rules

        Returns:
            New insight list (new insights first, expired ones removed);
            ``existing`` is not mutated
        """
        insights = list(existing)
        context = InsightContext(sessions=sessions, performances=performances, now=now)

        rules: list[InsightRule] = list(self.rollup_rules)
        if len(sessions) >= self.min_sessions:
            rules = self.trend_rules + rules
        else:
            logger.debug(
                f"Only {len(sessions)} daily sessions; trend insights need {self.min_sessions}"
            )

        for rule in rules:
            insight = rule(context)
            if insight is None:
                continue
            if self.is_duplicate(insight.type, insights, now):
                logger.debug(f"Suppressing duplicate {insight.type.value} insight")
                continue
            insights.insert(0, insight)
            logger.info(f"New insight: {insight.title}")

        return self.prune(insights, now)

    def is_duplicate(
        self,
        insight_type: InsightType,
        insights: Sequence[StudyInsight],
        now: datetime,
    ) -> bool:
        """Same-type insight created within the dedup window."""
        window = timedelta(days=self.dedup_days).total_seconds()
        return any(
            i.type == insight_type and elapsed_seconds(i.created_at, now) < window
            for i in insights
        )

    def prune(self, insights: Sequence[StudyInsight], now: datetime) -> list[StudyInsight]:
        """Drop insights older than the retention window."""
        cutoff = timedelta(days=self.retention_days).total_seconds()
        return [i for i in insights if elapsed_seconds(i.created_at, now) <= cutoff]

    # ========================================
    # Rules
    # ========================================

    def _window(self, context: InsightContext) -> Sequence[DailySession]:
        return context.sessions[: self.trend_window]

    def strong_performance_rule(self, context: InsightContext) -> StudyInsight | None:
        window = self._window(context)
        if not window:
            return None
        average = round(sum(s.accuracy for s in window) / len(window), ACCURACY_PRECISION)
        if average <= self.strong_accuracy:
            return None
        return StudyInsight(
            type=InsightType.CATEGORY_IMPROVEMENT,
            title="Strong Performance",
            description=(
                f"Your accuracy has been consistently above "
                f"{int(self.strong_accuracy * 100)}% this week!"
            ),
            created_at=context.now,
        )

    def consistency_rule(self, context: InsightContext) -> StudyInsight | None:
        window = self._window(context)
        if len(window) < 5 or not all(s.goal_achieved for s in window):
            return None
        return StudyInsight(
            type=InsightType.CONSISTENCY_TREND,
            title="Consistent Study Habit",
            description=f"You've hit your daily goal on each of your last {len(window)} study days.",
            created_at=context.now,
        )

    def decline_rule(self, context: InsightContext) -> StudyInsight | None:
        window = self._window(context)
        recent, earlier = window[:3], window[3:]
        if len(recent) < 3 or not earlier:
            return None
        recent_avg = sum(s.accuracy for s in recent) / len(recent)
        earlier_avg = sum(s.accuracy for s in earlier) / len(earlier)
        if round(earlier_avg - recent_avg, ACCURACY_PRECISION) < self.decline_drop:
            return None
        return StudyInsight(
            type=InsightType.PERFORMANCE_DECLINE,
            title="Accuracy Dropping",
            description=(
                f"Your recent accuracy ({int(recent_avg * 100)}%) is below your earlier "
                f"average ({int(earlier_avg * 100)}%). Consider reviewing missed topics."
            ),
            created_at=context.now,
            actionable=True,
        )

    def weak_area_rule(self, context: InsightContext) -> StudyInsight | None:
        weak = [
            p
            for p in context.performances
            if p.overall_proficiency < self.weak_category_threshold
            and p.questions_attempted >= self.weak_category_min_attempts
        ]
        if not weak:
            return None
        weakest = min(weak, key=lambda p: p.overall_proficiency)
        return StudyInsight(
            type=InsightType.WEAK_AREA_DETECTED,
            title=f"Weak Area: {weakest.category.name}",
            description=(
                f"{weakest.category.name} is at {int(weakest.overall_proficiency * 100)}% "
                f"proficiency and needs attention."
            ),
            created_at=context.now,
            actionable=True,
        )
