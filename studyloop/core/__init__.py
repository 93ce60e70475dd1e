"""
Core domain layer.

Components:
- models: answer history, taxonomy, derived analytics and regimen state
- goals: DailyGoal sum type and DailyProgress
- dates: calendar-day arithmetic
- exceptions: StudyLoopError hierarchy
"""
from studyloop.core.exceptions import NoQuestionsAvailable, StudyLoopError
from studyloop.core.goals import (
    CategoryFocusGoal,
    DailyGoal,
    DailyProgress,
    QuestionCountGoal,
    TimeBasedMinutesGoal,
)
from studyloop.core.models import (
    AnswerRecord,
    Category,
    CategoryPerformance,
    DailyRegimen,
    DailySession,
    InsightType,
    PerformanceLevel,
    ProficiencyStatus,
    Question,
    QuestionEvaluationResult,
    QuizEvaluationResult,
    RecommendationKind,
    RecommendationPriority,
    ReminderSettings,
    StudyInsight,
    StudyRecommendation,
    StudyStreak,
    Taxonomy,
    Topic,
    TopicProficiency,
)

__all__ = [
    "StudyLoopError",
    "NoQuestionsAvailable",
    "DailyGoal",
    "QuestionCountGoal",
    "TimeBasedMinutesGoal",
    "CategoryFocusGoal",
    "DailyProgress",
    "AnswerRecord",
    "QuestionEvaluationResult",
    "QuizEvaluationResult",
    "Topic",
    "Category",
    "Question",
    "Taxonomy",
    "TopicProficiency",
    "CategoryPerformance",
    "ProficiencyStatus",
    "PerformanceLevel",
    "DailySession",
    "StudyStreak",
    "DailyRegimen",
    "ReminderSettings",
    "InsightType",
    "StudyInsight",
    "RecommendationPriority",
    "RecommendationKind",
    "StudyRecommendation",
]
