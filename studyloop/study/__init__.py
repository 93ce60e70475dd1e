"""
Study Module.

Provides the read-only study analytics:
- Topic proficiency estimation and category rollups
- Spaced-repetition retry eligibility
- Quiz question selection
"""

from studyloop.study.proficiency_calculator import ProficiencyCalculator
from studyloop.study.question_selector import QuestionPoolSelector
from studyloop.study.retry_eligibility import RetryEligibilityEvaluator

__all__ = [
    "ProficiencyCalculator",
    "RetryEligibilityEvaluator",
    "QuestionPoolSelector",
]
