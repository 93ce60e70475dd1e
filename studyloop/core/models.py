"""
Core Data Models.

Records shared by the study, regimen and adaptive packages.

Design:
- AnswerRecord / QuizEvaluationResult: read-only inputs from collaborators
- Topic / Category / Question / Taxonomy: read-only taxonomy graph
- TopicProficiency / CategoryPerformance: derived, recomputed on demand
- DailySession / StudyStreak: the only mutable aggregates
- StudyInsight / StudyRecommendation: rule-engine outputs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from uuid import UUID, uuid4

from studyloop.core.goals import DailyGoal, QuestionCountGoal


# =============================================================================
# Enumerations
# =============================================================================


class ProficiencyStatus(str, Enum):
    """Proficiency band for a topic."""

    NOT_STARTED = "not_started"  # <20%
    STRUGGLING = "struggling"  # 20-49%
    DEVELOPING = "developing"  # 50-69%
    PROFICIENT = "proficient"  # 70-89%
    EXPERT = "expert"  # 90-100%

    @classmethod
    def from_level(cls, level: float) -> ProficiencyStatus:
        """
        Convert a 0-1 proficiency level to a band.

        Args:
            level: Proficiency level between 0 and 1

        Returns:
            Corresponding ProficiencyStatus
        """
        if level >= 0.9:
            return cls.EXPERT
        elif level >= 0.7:
            return cls.PROFICIENT
        elif level >= 0.5:
            return cls.DEVELOPING
        elif level >= 0.2:
            return cls.STRUGGLING
        else:
            return cls.NOT_STARTED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            ProficiencyStatus.NOT_STARTED: "dim",
            ProficiencyStatus.STRUGGLING: "red",
            ProficiencyStatus.DEVELOPING: "yellow",
            ProficiencyStatus.PROFICIENT: "blue",
            ProficiencyStatus.EXPERT: "green",
        }[self]


class PerformanceLevel(str, Enum):
    """Display band for a quiz evaluation score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_IMPROVEMENT = "needs_improvement"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> PerformanceLevel:
        if score >= 0.9:
            return cls.EXCELLENT
        elif score >= 0.8:
            return cls.GOOD
        elif score >= 0.6:
            return cls.FAIR
        elif score >= 0.4:
            return cls.NEEDS_IMPROVEMENT
        return cls.POOR

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class InsightType(str, Enum):
    """Kinds of study insight."""

    STREAK_MILESTONE = "streak_milestone"
    CATEGORY_IMPROVEMENT = "category_improvement"
    CONSISTENCY_TREND = "consistency_trend"
    WEAK_AREA_DETECTED = "weak_area_detected"
    PERFORMANCE_DECLINE = "performance_decline"
    OPTIMAL_TIME_DETECTED = "optimal_time_detected"


class RecommendationPriority(str, Enum):
    """Recommendation urgency. Declaration order is ranking order."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {
            RecommendationPriority.HIGH: 0,
            RecommendationPriority.MEDIUM: 1,
            RecommendationPriority.LOW: 2,
        }[self]

    @property
    def color(self) -> str:
        return {
            RecommendationPriority.HIGH: "red",
            RecommendationPriority.MEDIUM: "yellow",
            RecommendationPriority.LOW: "blue",
        }[self]


class RecommendationKind(str, Enum):
    """What a recommendation asks the learner to do."""

    FOCUS = "focus"
    ACKNOWLEDGE = "acknowledge"
    REVIEW = "review"
    PRACTICE = "practice"
    LEARN = "learn"


# =============================================================================
# Collaborator inputs
# =============================================================================


@dataclass(frozen=True)
class AnswerRecord:
    """A single graded answer, owned by the persistence collaborator."""

    question_id: str
    topic_id: str
    was_correct: bool
    answered_at: datetime | None = None
    time_spent: float = 0.0  # seconds
    was_skipped: bool = False
    was_partial: bool = False
    category_id: str | None = None


@dataclass(frozen=True)
class QuestionEvaluationResult:
    """Grading outcome for one question of a quiz session."""

    question_index: int
    is_correct: bool
    is_skipped: bool = False
    question_id: str | None = None
    category_id: str | None = None


@dataclass
class QuizEvaluationResult:
    """Graded quiz session supplied by the AI-grading collaborator."""

    overall_score: float  # 0.0 to 1.0
    total_questions: int
    correct_answers: int
    started_at: datetime
    duration_seconds: float = 0.0
    skipped_questions: int = 0
    individual_results: list[QuestionEvaluationResult] = field(default_factory=list)
    categories_in_session: list[str] = field(default_factory=list)
    areas_for_improvement: list[str] = field(default_factory=list)
    session_id: UUID = field(default_factory=uuid4)

    @property
    def score_percentage(self) -> int:
        return int(self.overall_score * 100)

    @property
    def performance_level(self) -> PerformanceLevel:
        return PerformanceLevel.from_score(self.overall_score)


# =============================================================================
# Taxonomy
# =============================================================================


@dataclass
class Topic:
    """A topic node in the taxonomy graph."""

    id: str
    name: str
    category_ids: set[str] = field(default_factory=set)
    prerequisites: set[str] = field(default_factory=set)
    estimated_minutes: int = 15
    sort_order: int = 0


@dataclass
class Category:
    """A category grouping one or more topics."""

    id: str
    name: str
    topic_ids: list[str] = field(default_factory=list)
    sort_order: int = 0


@dataclass(frozen=True)
class Question:
    """A question in the bank; only the taxonomy links matter here."""

    id: str
    topic_id: str
    category_id: str


@dataclass
class Taxonomy:
    """
    Read-only taxonomy graph.

    Prerequisites are held as an adjacency map keyed by topic id. The graph
    is not guaranteed to be acyclic; traversals must bound themselves.
    """

    topics: dict[str, Topic] = field(default_factory=dict)
    categories: dict[str, Category] = field(default_factory=dict)
    questions: list[Question] = field(default_factory=list)

    def prerequisites_of(self, topic_id: str) -> set[str]:
        topic = self.topics.get(topic_id)
        return set(topic.prerequisites) if topic else set()

    def questions_in_topic(self, topic_id: str) -> list[Question]:
        return [q for q in self.questions if q.topic_id == topic_id]

    def topics_in_category(self, category_id: str) -> list[Topic]:
        category = self.categories.get(category_id)
        if category is None:
            return []
        return [self.topics[t] for t in category.topic_ids if t in self.topics]

    def ordered_topics(self) -> list[Topic]:
        return sorted(self.topics.values(), key=lambda t: (t.sort_order, t.id))

    def ordered_categories(self) -> list[Category]:
        return sorted(self.categories.values(), key=lambda c: (c.sort_order, c.id))


# =============================================================================
# Derived analytics
# =============================================================================


@dataclass
class TopicProficiency:
    """Derived mastery estimate for a topic."""

    topic: Topic
    proficiency_level: float  # 0.0 to 1.0
    questions_attempted: int
    correct_answers: int
    average_time: float
    last_attempt: datetime | None
    needs_review: bool

    @property
    def accuracy(self) -> float:
        if self.questions_attempted <= 0:
            return 0.0
        return self.correct_answers / self.questions_attempted

    @property
    def status(self) -> ProficiencyStatus:
        return ProficiencyStatus.from_level(self.proficiency_level)


@dataclass
class CategoryPerformance:
    """Rollup of topic proficiencies for one category."""

    category: Category
    topic_proficiencies: list[TopicProficiency]
    overall_proficiency: float
    questions_attempted: int
    correct_answers: int
    average_time: float
    last_activity: datetime | None

    @property
    def accuracy(self) -> float:
        if self.questions_attempted <= 0:
            return 0.0
        return self.correct_answers / self.questions_attempted

    @property
    def weakest_topics(self) -> list[TopicProficiency]:
        attempted = [p for p in self.topic_proficiencies if p.questions_attempted > 0]
        return sorted(attempted, key=lambda p: p.proficiency_level)[:3]

    @property
    def strongest_topics(self) -> list[TopicProficiency]:
        attempted = [p for p in self.topic_proficiencies if p.questions_attempted > 0]
        return sorted(attempted, key=lambda p: p.proficiency_level, reverse=True)[:3]


# =============================================================================
# Regimen state
# =============================================================================


@dataclass
class DailySession:
    """Accumulator for one calendar day of study."""

    date: date
    questions_completed: int = 0
    time_spent: float = 0.0  # seconds
    categories_studied: set[str] = field(default_factory=set)
    average_score: float = 0.0
    correct_answers: int = 0
    total_questions: int = 0
    goal_achieved: bool = False
    streak_day: int = 0
    quiz_session_ids: list[UUID] = field(default_factory=list)
    improvement_areas: list[str] = field(default_factory=list)

    @property
    def accuracy(self) -> float:
        if self.total_questions <= 0:
            return 0.0
        return self.correct_answers / self.total_questions

    @property
    def formatted_time_spent(self) -> str:
        minutes, seconds = divmod(int(self.time_spent), 60)
        return f"{minutes}:{seconds:02d}"


@dataclass
class StudyStreak:
    """Consecutive-day study streak. Mutated only by StreakTracker."""

    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: date | None = None
    grace_period_days: int = 1
    recovery_date: date | None = None  # day a streak recovery was accepted


@dataclass
class ReminderSettings:
    is_enabled: bool = True
    preferred_time: time = time(19, 0)
    allow_follow_up: bool = True
    streak_recovery_enabled: bool = True


@dataclass
class DailyRegimen:
    """Learner-configured daily study plan."""

    daily_goal: DailyGoal = field(default_factory=lambda: QuestionCountGoal(5))
    is_enabled: bool = True
    reminder_settings: ReminderSettings = field(default_factory=ReminderSettings)
    start_date: date | None = None
    id: UUID = field(default_factory=uuid4)


# =============================================================================
# Rule-engine outputs
# =============================================================================


@dataclass(frozen=True)
class StudyInsight:
    """Human-readable feedback derived from recent activity."""

    type: InsightType
    title: str
    description: str
    created_at: datetime
    actionable: bool = False
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class StudyRecommendation:
    """A ranked suggestion of what to study next."""

    priority: RecommendationPriority
    kind: RecommendationKind
    title: str
    description: str
    action_text: str = ""
    categories: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    estimated_minutes: int = 15
    id: UUID = field(default_factory=uuid4)
