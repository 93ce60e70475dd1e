"""
Retry Eligibility for spaced repetition.

A question answered correctly (and fully) stays out of rotation until the
retry window has elapsed. Incorrect, partial or skipped answers are
immediately eligible again.
"""

from __future__ import annotations

from datetime import datetime

from config import get_settings
from studyloop.core.dates import hours_since
from studyloop.core.models import AnswerRecord


class RetryEligibilityEvaluator:
    """Decides whether a single question may be re-selected for a quiz."""

    def __init__(self, threshold_hours: float | None = None):
        """
        Args:
            threshold_hours: Retry window for correct answers (default 48)
        """
        if threshold_hours is None:
            threshold_hours = get_settings().get_quiz_config()["retry_threshold_hours"]
        self.threshold_hours = threshold_hours

    def is_eligible(self, last_answer: AnswerRecord | None, now: datetime) -> bool:
        """
        Check eligibility from a question's most recent answer.

        Args:
            last_answer: Latest AnswerRecord for the question, if any
            now: Evaluation time

        Returns:
            False only while a correct, non-partial answer is inside the window.
            Exactly ``threshold_hours`` after the answer the question is eligible.
        """
        if last_answer is None or last_answer.answered_at is None:
            return True

        elapsed = hours_since(last_answer.answered_at, now)
        if (
            elapsed < self.threshold_hours
            and last_answer.was_correct
            and not last_answer.was_partial
        ):
            return False
        return True

    def hours_until_eligible(self, last_answer: AnswerRecord | None, now: datetime) -> float:
        """Hours remaining in the retry window (0 when already eligible)."""
        if self.is_eligible(last_answer, now):
            return 0.0
        return self.threshold_hours - hours_since(last_answer.answered_at, now)
