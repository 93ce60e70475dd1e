"""
Unit tests for daily goals, DailyProgress and model helpers.
"""

from datetime import date

import pytest

from studyloop.core.goals import (
    CategoryFocusGoal,
    DailyProgress,
    QuestionCountGoal,
    TimeBasedMinutesGoal,
    current_value,
    display_text,
    target_value,
)
from studyloop.core.models import DailySession, PerformanceLevel, ProficiencyStatus


@pytest.fixture
def session():
    return DailySession(date=date(2024, 6, 15), questions_completed=7, time_spent=754.0)


class TestGoalVariants:
    @pytest.mark.parametrize(
        "goal,target,current",
        [
            (QuestionCountGoal(10), 10, 7),
            (TimeBasedMinutesGoal(15), 15, 12),
            (CategoryFocusGoal(("basics",)), 5, 7),
        ],
    )
    def test_target_and_current(self, session, goal, target, current):
        assert target_value(goal) == target
        assert current_value(goal, session) == current

    def test_no_session_is_zero(self):
        assert current_value(QuestionCountGoal(5), None) == 0

    def test_negative_targets_rejected(self):
        with pytest.raises(ValueError):
            QuestionCountGoal(-1)
        with pytest.raises(ValueError):
            TimeBasedMinutesGoal(-5)

    def test_display_text(self):
        assert display_text(QuestionCountGoal(5)) == "5 questions per day"
        assert display_text(TimeBasedMinutesGoal(20)) == "20 minutes per day"
        assert display_text(CategoryFocusGoal()) == "Focus on weak areas"
        assert display_text(CategoryFocusGoal(("basics", "advanced"))) == "Focus on basics, advanced"


class TestDailyProgress:
    def test_percentage_capped(self):
        assert DailyProgress(7, 5).percentage == 1.0
        assert DailyProgress(2, 5).percentage == pytest.approx(0.4)

    def test_zero_target(self):
        progress = DailyProgress(0, 0)
        assert progress.percentage == 0.0
        assert progress.is_completed is True

    def test_remaining(self):
        assert DailyProgress(2, 5).remaining == 3
        assert DailyProgress(9, 5).remaining == 0

    def test_for_goal(self, session):
        progress = DailyProgress.for_goal(QuestionCountGoal(5), session)
        assert progress == DailyProgress(7, 5)
        assert progress.is_completed is True


class TestBands:
    @pytest.mark.parametrize(
        "level,status",
        [
            (0.0, ProficiencyStatus.NOT_STARTED),
            (0.2, ProficiencyStatus.STRUGGLING),
            (0.5, ProficiencyStatus.DEVELOPING),
            (0.7, ProficiencyStatus.PROFICIENT),
            (0.9, ProficiencyStatus.EXPERT),
        ],
    )
    def test_proficiency_status(self, level, status):
        assert ProficiencyStatus.from_level(level) == status

    @pytest.mark.parametrize(
        "score,level",
        [
            (0.95, PerformanceLevel.EXCELLENT),
            (0.85, PerformanceLevel.GOOD),
            (0.65, PerformanceLevel.FAIR),
            (0.45, PerformanceLevel.NEEDS_IMPROVEMENT),
            (0.1, PerformanceLevel.POOR),
        ],
    )
    def test_performance_level(self, score, level):
        assert PerformanceLevel.from_score(score) == level

    def test_session_formatting(self, session):
        assert session.formatted_time_spent == "12:34"
        assert session.accuracy == 0.0

    def test_quiz_evaluation_display(self):
        from datetime import datetime

        from studyloop.core.models import QuizEvaluationResult

        evaluation = QuizEvaluationResult(
            overall_score=0.85, total_questions=20, correct_answers=17, started_at=datetime(2024, 6, 15)
        )
        assert evaluation.score_percentage == 85
        assert evaluation.performance_level == PerformanceLevel.GOOD
        assert evaluation.performance_level.display_name == "Good"
