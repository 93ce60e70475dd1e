"""
Recommendation Engine.

Rule-based study suggestions from proficiency rollups and the taxonomy
prerequisite graph.

Rules:
1. Weakness  - worst category <50% (>= 2 attempts): HIGH focus on its 3 weakest topics
2. Strength  - best category >=80% (>= 3 attempts): LOW acknowledgment
3. Review    - topics flagged needs_review: one MEDIUM review recommendation
4. Practice  - up to 3 struggling/developing topics: MEDIUM practice each
5. New topic - untried topics whose whole prerequisite chain is expert (>=90%),
   at most 2 per run

The prerequisite graph may contain cycles; traversal keeps a visited set and
a depth bound, and anything it cannot resolve is treated as not eligible.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from loguru import logger

from config import get_settings
from studyloop.core.models import (
    CategoryPerformance,
    ProficiencyStatus,
    RecommendationKind,
    RecommendationPriority,
    StudyRecommendation,
    Taxonomy,
    Topic,
    TopicProficiency,
)

PRACTICE_LIMIT = 3
REVIEW_MINUTES_PER_TOPIC = 5


class PrerequisiteCycleError(Exception):
    """Raised internally when prerequisite traversal cannot terminate safely."""
    pass


def collect_prerequisites(
    topic_id: str,
    prerequisites: Mapping[str, set[str]] | Taxonomy,
    max_depth: int,
) -> set[str]:
    """
    Transitive prerequisites of a topic.

    Args:
        topic_id: Starting topic
        prerequisites: Adjacency map (topic id -> direct prerequisites) or a Taxonomy
        max_depth: Longest chain followed

    Returns:
        Every topic reachable through prerequisite edges

    Raises:
        PrerequisiteCycleError: On a cycle back onto the current chain, or
            when the chain is deeper than ``max_depth``
    """
    if isinstance(prerequisites, Taxonomy):
        lookup = prerequisites.prerequisites_of
    else:
        def lookup(tid: str) -> set[str]:
            return set(prerequisites.get(tid, ()))

    found: set[str] = set()
    finished: set[str] = set()

    def visit(current: str, chain: tuple[str, ...]) -> None:
        if len(chain) - 1 > max_depth:
            raise PrerequisiteCycleError(
                f"Prerequisite chain deeper than {max_depth}: {' -> '.join(chain)}"
            )
        for prereq in sorted(lookup(current)):
            if prereq in chain:
                raise PrerequisiteCycleError(
                    f"Prerequisite cycle: {' -> '.join(chain + (prereq,))}"
                )
            found.add(prereq)
            if prereq not in finished:
                visit(prereq, chain + (prereq,))
        finished.add(current)

    visit(topic_id, (topic_id,))
    return found


class RecommendationEngine:
    """Generate ranked study recommendations."""

    def __init__(
        self,
        weak_threshold: float | None = None,
        weak_min_attempts: int | None = None,
        strong_threshold: float | None = None,
        strong_min_attempts: int | None = None,
        expert_threshold: float | None = None,
        max_new_topics: int | None = None,
        max_prerequisite_depth: int | None = None,
    ):
        settings = get_settings()
        self.weak_threshold = (
            settings.weak_category_threshold if weak_threshold is None else weak_threshold
        )
        self.weak_min_attempts = (
            settings.weak_category_min_attempts if weak_min_attempts is None else weak_min_attempts
        )
        self.strong_threshold = (
            settings.strong_category_threshold if strong_threshold is None else strong_threshold
        )
        self.strong_min_attempts = (
            settings.strong_category_min_attempts
            if strong_min_attempts is None
            else strong_min_attempts
        )
        self.expert_threshold = (
            settings.expert_threshold if expert_threshold is None else expert_threshold
        )
        self.max_new_topics = (
            settings.max_new_topic_suggestions if max_new_topics is None else max_new_topics
        )
        self.max_prerequisite_depth = (
            max_prerequisite_depth or settings.prerequisite_max_depth
        )

    def generate(
        self,
        performances: Sequence[CategoryPerformance],
        taxonomy: Taxonomy,
    ) -> list[StudyRecommendation]:
        """
        Run every rule and rank the output by priority (stable within a priority).

        Args:
            performances: Category rollups from ProficiencyCalculator
            taxonomy: Taxonomy graph for prerequisite gating

        Returns:
            Recommendations, HIGH first
        """
        topic_scores = self._topic_scores(performances)

        recommendations: list[StudyRecommendation] = []
        for rec in (
            self.weakness_rule(performances),
            self.strength_rule(performances),
            self.review_rule(topic_scores),
        ):
            if rec is not None:
                recommendations.append(rec)
        recommendations.extend(self.practice_rule(topic_scores))
        recommendations.extend(self.new_topic_rule(topic_scores, taxonomy))

        ranked = sorted(recommendations, key=lambda r: r.priority.rank)
        logger.debug(f"Generated {len(ranked)} recommendations")
        return ranked

    @staticmethod
    def _topic_scores(
        performances: Sequence[CategoryPerformance],
    ) -> dict[str, TopicProficiency]:
        # A topic in several categories appears once
        scores: dict[str, TopicProficiency] = {}
        for performance in performances:
            for proficiency in performance.topic_proficiencies:
                scores.setdefault(proficiency.topic.id, proficiency)
        return scores

    # ========================================
    # Rules
    # ========================================

    def weakness_rule(
        self,
        performances: Sequence[CategoryPerformance],
    ) -> StudyRecommendation | None:
        weak = [
            p
            for p in performances
            if p.overall_proficiency < self.weak_threshold
            and p.questions_attempted >= self.weak_min_attempts
        ]
        if not weak:
            return None

        worst = min(weak, key=lambda p: p.overall_proficiency)
        topics = worst.weakest_topics
        names = ", ".join(t.topic.name for t in topics)
        return StudyRecommendation(
            priority=RecommendationPriority.HIGH,
            kind=RecommendationKind.FOCUS,
            title=f"Focus on {worst.category.name}",
            description=(
                f"This category needs attention - only "
                f"{int(worst.overall_proficiency * 100)}% proficiency."
                + (f" Start with: {names}." if names else "")
            ),
            action_text="Start focused quiz",
            categories=(worst.category.id,),
            topics=tuple(t.topic.id for t in topics),
            estimated_minutes=sum(t.topic.estimated_minutes for t in topics) or 15,
        )

    def strength_rule(
        self,
        performances: Sequence[CategoryPerformance],
    ) -> StudyRecommendation | None:
        strong = [
            p
            for p in performances
            if p.overall_proficiency >= self.strong_threshold
            and p.questions_attempted >= self.strong_min_attempts
        ]
        if not strong:
            return None

        best = max(strong, key=lambda p: p.overall_proficiency)
        return StudyRecommendation(
            priority=RecommendationPriority.LOW,
            kind=RecommendationKind.ACKNOWLEDGE,
            title=f"Strong in {best.category.name}",
            description=(
                f"You're at {int(best.overall_proficiency * 100)}% proficiency in this category. "
                f"Keep it fresh with an occasional review."
            ),
            action_text="Keep it up",
            categories=(best.category.id,),
            estimated_minutes=10,
        )

    def review_rule(
        self,
        topic_scores: Mapping[str, TopicProficiency],
    ) -> StudyRecommendation | None:
        due = [p for p in topic_scores.values() if p.needs_review]
        if not due:
            return None

        return StudyRecommendation(
            priority=RecommendationPriority.MEDIUM,
            kind=RecommendationKind.REVIEW,
            title="Review Time",
            description=(
                f"{len(due)} topics are ready for review to maintain proficiency."
            ),
            action_text="Start review",
            categories=tuple(sorted({c for p in due for c in p.topic.category_ids})),
            topics=tuple(p.topic.id for p in due),
            estimated_minutes=len(due) * REVIEW_MINUTES_PER_TOPIC,
        )

    def practice_rule(
        self,
        topic_scores: Mapping[str, TopicProficiency],
    ) -> list[StudyRecommendation]:
        struggling = [
            p
            for p in topic_scores.values()
            if p.questions_attempted > 0
            and p.status in (ProficiencyStatus.STRUGGLING, ProficiencyStatus.DEVELOPING)
        ]
        struggling.sort(key=lambda p: p.proficiency_level)

        return [
            StudyRecommendation(
                priority=RecommendationPriority.MEDIUM,
                kind=RecommendationKind.PRACTICE,
                title=f"Practice {p.topic.name}",
                description=(
                    f"Your proficiency is at {int(p.proficiency_level * 100)}%. "
                    f"Practice more questions to improve."
                ),
                action_text="Practice",
                categories=tuple(sorted(p.topic.category_ids)),
                topics=(p.topic.id,),
                estimated_minutes=p.topic.estimated_minutes,
            )
            for p in struggling[:PRACTICE_LIMIT]
        ]

    def new_topic_rule(
        self,
        topic_scores: Mapping[str, TopicProficiency],
        taxonomy: Taxonomy,
    ) -> list[StudyRecommendation]:
        suggestions: list[StudyRecommendation] = []
        for topic in taxonomy.ordered_topics():
            if len(suggestions) >= self.max_new_topics:
                break
            score = topic_scores.get(topic.id)
            if score is not None and score.questions_attempted > 0:
                continue
            if not self.prerequisites_met(topic, topic_scores, taxonomy):
                continue

            suggestions.append(
                StudyRecommendation(
                    priority=RecommendationPriority.LOW,
                    kind=RecommendationKind.LEARN,
                    title=f"Learn {topic.name}",
                    description="You're ready to learn this topic based on your current progress.",
                    action_text="Start learning",
                    categories=tuple(sorted(topic.category_ids)),
                    topics=(topic.id,),
                    estimated_minutes=topic.estimated_minutes,
                )
            )
        return suggestions

    def prerequisites_met(
        self,
        topic: Topic,
        topic_scores: Mapping[str, TopicProficiency],
        taxonomy: Taxonomy,
    ) -> bool:
        """
        Every reachable prerequisite is at expert level.

        A cycle or an over-deep chain means not eligible.
        """
        try:
            chain = collect_prerequisites(topic.id, taxonomy, self.max_prerequisite_depth)
        except PrerequisiteCycleError as exc:
            logger.warning(f"Topic {topic.id} not eligible: {exc}")
            return False

        for prereq_id in chain:
            score = topic_scores.get(prereq_id)
            if score is None or score.proficiency_level < self.expert_threshold:
                return False
        return True
