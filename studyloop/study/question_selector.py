"""
Question Pool Selector.

Builds a quiz from the taxonomy-backed question bank:
1. Clamp the requested count to the configured bounds
2. Filter to the active categories (all categories if none are active)
3. Partition into eligible / ineligible via RetryEligibilityEvaluator
4. Sample from eligible, or from the whole filtered pool when eligible
   questions cannot fill the quiz

Read-only; safe to call from any thread.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar

from loguru import logger

from config import get_settings
from studyloop.core.exceptions import NoQuestionsAvailable
from studyloop.core.models import AnswerRecord, Question, Taxonomy
from studyloop.study.proficiency_calculator import latest_by_question
from studyloop.study.retry_eligibility import RetryEligibilityEvaluator

T = TypeVar("T")


class Sampler(Protocol):
    """Anything with ``random.Random.sample`` semantics."""

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


@dataclass
class QuestionPartition:
    """Filtered question pool split by retry eligibility."""

    eligible: list[Question] = field(default_factory=list)
    ineligible: list[Question] = field(default_factory=list)

    @property
    def all(self) -> list[Question]:
        return self.eligible + self.ineligible


class QuestionPoolSelector:
    """Select quiz questions honoring spaced-repetition eligibility."""

    def __init__(
        self,
        taxonomy: Taxonomy,
        answers: Iterable[AnswerRecord] = (),
        evaluator: RetryEligibilityEvaluator | None = None,
        sampler: Sampler | None = None,
        min_questions: int | None = None,
        max_questions: int | None = None,
        default_questions: int | None = None,
    ):
        """
        Args:
            taxonomy: Question bank and taxonomy graph
            answers: Answer history snapshot
            evaluator: Retry rule (default 48h window)
            sampler: Random source; inject a seeded ``random.Random`` for tests
            min_questions / max_questions / default_questions: Quiz size bounds
        """
        settings = get_settings()
        self.taxonomy = taxonomy
        self.latest_answers = latest_by_question(answers)
        self.evaluator = evaluator or RetryEligibilityEvaluator()
        self.sampler = sampler or random.Random()
        quiz = settings.get_quiz_config()
        self.min_questions = min_questions or quiz["min_questions"]
        self.max_questions = max_questions or quiz["max_questions"]
        self.default_questions = default_questions or quiz["default_questions"]

    def clamp_count(self, count: int | None) -> int:
        """Clamp a requested quiz size into ``[min_questions, max_questions]``."""
        if count is None:
            count = self.default_questions
        return max(self.min_questions, min(self.max_questions, count))

    def filter_questions(self, categories: Iterable[str] | None) -> list[Question]:
        """Restrict the bank to ``categories``; an empty filter means all categories."""
        active = set(categories or ())
        if not active:
            logger.warning(
                "No categories enabled; selecting from all categories (degraded selection)"
            )
            return list(self.taxonomy.questions)
        return [q for q in self.taxonomy.questions if q.category_id in active]

    def partition(self, questions: Iterable[Question], now: datetime) -> QuestionPartition:
        result = QuestionPartition()
        for question in questions:
            last = self.latest_answers.get(question.id)
            if self.evaluator.is_eligible(last, now):
                result.eligible.append(question)
            else:
                result.ineligible.append(question)
        return result

    def select_quiz_questions(
        self,
        count: int | None = None,
        categories: Iterable[str] | None = None,
        now: datetime | None = None,
    ) -> list[str]:
        """
        Select question ids for a new quiz.

        Args:
            count: Requested size (clamped to [1, 10]; default 5)
            categories: Active category ids (None/empty = all)
            now: Evaluation time (default: current local time)

        Returns:
            Question ids, at most ``count`` long

        Raises:
            NoQuestionsAvailable: If the filtered pool is empty
        """
        now = now or datetime.now()
        requested = self.clamp_count(count)
        category_list = list(categories or ())

        pool = self.filter_questions(category_list)
        if not pool:
            raise NoQuestionsAvailable(category_list)

        split = self.partition(pool, now)
        if len(split.eligible) >= requested:
            source = split.eligible
        else:
            logger.info(
                f"Only {len(split.eligible)} eligible questions for a quiz of {requested}; "
                f"falling back to the full pool of {len(pool)}"
            )
            source = split.all

        chosen = self.sampler.sample(source, min(requested, len(source)))
        logger.debug(
            f"Selected {len(chosen)} questions "
            f"(eligible={len(split.eligible)}, ineligible={len(split.ineligible)})"
        )
        return [q.id for q in chosen]
