"""
Proficiency Calculator.

Turns raw answer history into a 0-1 mastery estimate per topic and a rollup
per category. Blends three signals:
- Accuracy (correct / attempted)
- Completion (attempted / questions in topic)
- Recency (step decay by days since the last attempt)

Pure: no side effects, safe to call concurrently over the same snapshot.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from loguru import logger

from config import get_settings
from studyloop.core.dates import days_since, wall_time
from studyloop.core.models import (
    AnswerRecord,
    Category,
    CategoryPerformance,
    Taxonomy,
    Topic,
    TopicProficiency,
)

# (upper bound in days, factor); anything older falls through to STALE_FACTOR
RECENCY_STEPS: tuple[tuple[float, float], ...] = (
    (1.0, 1.0),
    (3.0, 0.8),
    (7.0, 0.6),
    (14.0, 0.4),
    (30.0, 0.2),
)
STALE_FACTOR = 0.1


def latest_by_question(answers: Iterable[AnswerRecord]) -> dict[str, AnswerRecord]:
    """
    Reduce history to the most recent record per question.

    Records without a timestamp never displace a timestamped one.
    """
    latest: dict[str, AnswerRecord] = {}
    for answer in answers:
        current = latest.get(answer.question_id)
        if current is None:
            latest[answer.question_id] = answer
        elif answer.answered_at is not None and (
            current.answered_at is None
            or wall_time(answer.answered_at) >= wall_time(current.answered_at)
        ):
            latest[answer.question_id] = answer
    return latest


class ProficiencyCalculator:
    """
    Calculates topic proficiency and category rollups.

    Thresholds:
    - Review trigger: accuracy <70% OR last attempt >7 days ago
    - Weights: 60% accuracy, 30% completion, 10% recency
    """

    def __init__(
        self,
        accuracy_weight: float | None = None,
        completion_weight: float | None = None,
        recency_weight: float | None = None,
        review_accuracy_threshold: float | None = None,
        review_stale_days: float | None = None,
    ):
        """
        Initialize calculator with configurable weights and thresholds.

        Args:
            accuracy_weight: Weight of accuracy (default 0.6)
            completion_weight: Weight of topic coverage (default 0.3)
            recency_weight: Weight of recency decay (default 0.1)
            review_accuracy_threshold: Below this triggers review (default 0.7)
            review_stale_days: Older than this triggers review (default 7)
        """
        settings = get_settings()
        weights = settings.get_proficiency_weights()
        self.accuracy_weight = weights["accuracy"] if accuracy_weight is None else accuracy_weight
        self.completion_weight = (
            weights["completion"] if completion_weight is None else completion_weight
        )
        self.recency_weight = weights["recency"] if recency_weight is None else recency_weight
        self.review_accuracy_threshold = (
            settings.review_accuracy_threshold
            if review_accuracy_threshold is None
            else review_accuracy_threshold
        )
        self.review_stale_days = (
            settings.review_stale_days if review_stale_days is None else review_stale_days
        )

    @staticmethod
    def recency_factor(last_attempt: datetime | None, now: datetime) -> float:
        """
        Step decay by days since the last attempt.

        Returns:
            1.0 within a day, down to 0.1 beyond 30 days; 0.0 if never attempted
        """
        if last_attempt is None:
            return 0.0

        elapsed = days_since(last_attempt, now)
        for upper, factor in RECENCY_STEPS:
            if elapsed <= upper:
                return factor
        return STALE_FACTOR

    def needs_review(
        self,
        accuracy: float,
        attempted: int,
        last_attempt: datetime | None,
        now: datetime,
    ) -> bool:
        """
        Low accuracy or staleness flags a topic; untouched topics are never flagged.

        Staleness is only judged when some answer carries a timestamp.
        """
        if attempted == 0:
            return False
        if accuracy < self.review_accuracy_threshold:
            return True
        return last_attempt is not None and days_since(last_attempt, now) > self.review_stale_days

    def calculate_topic_proficiency(
        self,
        topic: Topic,
        answers: Iterable[AnswerRecord],
        total_questions: int,
        now: datetime,
    ) -> TopicProficiency:
        """
        Calculate proficiency for one topic.

        Args:
            topic: Topic being scored
            answers: Answer history for the topic's questions
            total_questions: Questions the taxonomy holds for the topic
            now: Evaluation time

        Returns:
            TopicProficiency with level clamped to [0, 1]
        """
        history = list(answers)
        latest = latest_by_question(history)

        attempted = len(latest)
        correct = sum(1 for a in latest.values() if a.was_correct)
        total_time = sum(a.time_spent for a in history)
        average_time = total_time / attempted if attempted else 0.0

        timestamps = [a.answered_at for a in history if a.answered_at is not None]
        last_attempt = max(timestamps, key=wall_time) if timestamps else None

        accuracy = correct / attempted if attempted else 0.0
        completion = attempted / total_questions if total_questions > 0 else 0.0
        recency = self.recency_factor(last_attempt, now)

        level = (
            accuracy * self.accuracy_weight
            + completion * self.completion_weight
            + recency * self.recency_weight
        )
        level = min(max(level, 0.0), 1.0)

        return TopicProficiency(
            topic=topic,
            proficiency_level=level,
            questions_attempted=attempted,
            correct_answers=correct,
            average_time=average_time,
            last_attempt=last_attempt,
            needs_review=self.needs_review(accuracy, attempted, last_attempt, now),
        )

    @staticmethod
    def calculate_category_performance(
        category: Category,
        proficiencies: list[TopicProficiency],
    ) -> CategoryPerformance:
        """Roll topic proficiencies up into a category score (mean of levels)."""
        count = len(proficiencies)
        overall = sum(p.proficiency_level for p in proficiencies) / count if count else 0.0
        average_time = sum(p.average_time for p in proficiencies) / count if count else 0.0
        activity = [p.last_attempt for p in proficiencies if p.last_attempt is not None]

        return CategoryPerformance(
            category=category,
            topic_proficiencies=proficiencies,
            overall_proficiency=overall,
            questions_attempted=sum(p.questions_attempted for p in proficiencies),
            correct_answers=sum(p.correct_answers for p in proficiencies),
            average_time=average_time,
            last_activity=max(activity, key=wall_time) if activity else None,
        )

    def calculate_all_topic_proficiencies(
        self,
        taxonomy: Taxonomy,
        answers: Iterable[AnswerRecord],
        now: datetime,
    ) -> dict[str, TopicProficiency]:
        """Score every topic in the taxonomy, keyed by topic id."""
        by_topic: dict[str, list[AnswerRecord]] = defaultdict(list)
        for answer in answers:
            by_topic[answer.topic_id].append(answer)

        results = {}
        for topic in taxonomy.ordered_topics():
            results[topic.id] = self.calculate_topic_proficiency(
                topic,
                by_topic.get(topic.id, []),
                len(taxonomy.questions_in_topic(topic.id)),
                now,
            )

        logger.debug(f"Calculated proficiency for {len(results)} topics")
        return results

    def calculate_all_category_performances(
        self,
        taxonomy: Taxonomy,
        answers: Iterable[AnswerRecord],
        now: datetime,
    ) -> list[CategoryPerformance]:
        """Score every category in taxonomy order."""
        topic_scores = self.calculate_all_topic_proficiencies(taxonomy, answers, now)
        performances = []
        for category in taxonomy.ordered_categories():
            proficiencies = [
                topic_scores[topic.id]
                for topic in taxonomy.topics_in_category(category.id)
                if topic.id in topic_scores
            ]
            performances.append(self.calculate_category_performance(category, proficiencies))
        return performances
