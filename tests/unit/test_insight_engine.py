"""
Unit tests for InsightEngine.

Sessions are built newest first, matching DailyGoalTracker history.
"""

from datetime import date, timedelta

import pytest

from studyloop.adaptive.insight_engine import InsightEngine
from studyloop.core.models import (
    Category,
    CategoryPerformance,
    DailySession,
    InsightType,
    StudyInsight,
)


def sessions_with(accuracies, goal_achieved=False):
    """Daily sessions newest first with the given accuracies (10 questions each)."""
    return [
        DailySession(
            date=date(2024, 6, 15) - timedelta(days=i),
            correct_answers=round(accuracy * 10),
            total_questions=10,
            questions_completed=10,
            goal_achieved=goal_achieved,
        )
        for i, accuracy in enumerate(accuracies)
    ]


def insight(insight_type, created_at):
    return StudyInsight(type=insight_type, title="t", description="d", created_at=created_at)


@pytest.fixture
def engine():
    return InsightEngine()


class TestTrendGate:
    def test_needs_three_sessions(self, engine, now):
        assert engine.generate(sessions_with([0.9, 0.9]), [], now) == []

    def test_strong_performance(self, engine, now):
        result = engine.generate(sessions_with([0.9, 0.9, 0.9]), [], now)

        assert [i.type for i in result] == [InsightType.CATEGORY_IMPROVEMENT]
        assert result[0].created_at == now

    def test_exactly_threshold_is_not_strong(self, engine, now):
        assert engine.generate(sessions_with([0.8, 0.8, 0.8]), [], now) == []

    def test_mixed_scores_averaging_to_threshold_are_not_strong(self, engine, now):
        # 0.7 + 0.9 + 0.8 sums to slightly above 2.4 in binary floating point
        assert engine.generate(sessions_with([0.7, 0.9, 0.8]), [], now) == []

    def test_only_last_seven_sessions_count(self, engine, now):
        accuracies = [0.9] * 7 + [0.0] * 5
        result = engine.generate(sessions_with(accuracies), [], now)
        assert InsightType.CATEGORY_IMPROVEMENT in [i.type for i in result]


class TestDedupAndRetention:
    def test_recent_duplicate_suppressed(self, engine, now):
        existing = [insight(InsightType.CATEGORY_IMPROVEMENT, now - timedelta(days=2))]
        result = engine.generate(sessions_with([0.9, 0.9, 0.9]), existing, now)
        assert result == existing

    def test_older_duplicate_allowed(self, engine, now):
        existing = [insight(InsightType.CATEGORY_IMPROVEMENT, now - timedelta(days=4))]
        result = engine.generate(sessions_with([0.9, 0.9, 0.9]), existing, now)

        assert len(result) == 2
        assert result[0].created_at == now
        assert result[1] is existing[0]

    def test_expired_insights_pruned(self, engine, now):
        kept = insight(InsightType.STREAK_MILESTONE, now - timedelta(days=14))
        dropped = insight(InsightType.STREAK_MILESTONE, now - timedelta(days=15))
        assert engine.prune([kept, dropped], now) == [kept]

    def test_existing_not_mutated(self, engine, now):
        existing = [insight(InsightType.STREAK_MILESTONE, now - timedelta(days=1))]
        engine.generate(sessions_with([0.9, 0.9, 0.9]), existing, now)
        assert len(existing) == 1


class TestSupplementalRules:
    def test_consistency(self, engine, now):
        result = engine.generate(sessions_with([0.6] * 5, goal_achieved=True), [], now)
        assert [i.type for i in result] == [InsightType.CONSISTENCY_TREND]

    def test_consistency_needs_five_sessions(self, engine, now):
        result = engine.generate(sessions_with([0.6] * 4, goal_achieved=True), [], now)
        assert result == []

    def test_decline(self, engine, now):
        result = engine.generate(sessions_with([0.5, 0.5, 0.5, 0.9, 0.9]), [], now)

        assert [i.type for i in result] == [InsightType.PERFORMANCE_DECLINE]
        assert result[0].actionable is True

    def test_drop_exactly_at_threshold_is_decline(self, engine, now):
        # Earlier average 0.75, recent 0.6: a 15 point drop
        result = engine.generate(sessions_with([0.6, 0.6, 0.6, 0.7, 0.8]), [], now)
        assert [i.type for i in result] == [InsightType.PERFORMANCE_DECLINE]

    def test_small_dip_is_not_decline(self, engine, now):
        assert engine.generate(sessions_with([0.6, 0.6, 0.6, 0.7, 0.7]), [], now) == []

    def test_weak_area_without_sessions(self, engine, now):
        weak = CategoryPerformance(
            category=Category("networking", "Networking"),
            topic_proficiencies=[],
            overall_proficiency=0.3,
            questions_attempted=4,
            correct_answers=1,
            average_time=0.0,
            last_activity=None,
        )
        result = engine.generate([], [], now, performances=[weak])

        assert [i.type for i in result] == [InsightType.WEAK_AREA_DETECTED]
        assert "Networking" in result[0].title

    def test_weak_area_needs_attempts(self, engine, now):
        barely_tried = CategoryPerformance(
            category=Category("networking", "Networking"),
            topic_proficiencies=[],
            overall_proficiency=0.1,
            questions_attempted=1,
            correct_answers=0,
            average_time=0.0,
            last_activity=None,
        )
        assert engine.generate([], [], now, performances=[barely_tried]) == []

    def test_new_insights_first(self, engine, now):
        result = engine.generate(sessions_with([0.9] * 5, goal_achieved=True), [], now)
        # Rules run in order and each new insight is inserted at the front
        assert [i.type for i in result] == [
            InsightType.CONSISTENCY_TREND,
            InsightType.CATEGORY_IMPROVEMENT,
        ]


class TestConfiguredDefaults:
    def test_defaults_come_from_insight_config(self, engine):
        assert engine.retention_days == 14
        assert engine.dedup_days == 3
        assert engine.min_sessions == 3
        assert engine.trend_window == 7
        assert engine.strong_accuracy == pytest.approx(0.8)
        assert engine.decline_drop == pytest.approx(0.15)

    def test_environment_overrides_reach_engine(self, monkeypatch):
        monkeypatch.setenv("STUDYLOOP_INSIGHT_RETENTION_DAYS", "21")
        assert InsightEngine().retention_days == 21
