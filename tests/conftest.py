"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import os
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402
from studyloop.core.models import (  # noqa: E402
    AnswerRecord,
    Category,
    Question,
    QuizEvaluationResult,
    Taxonomy,
    Topic,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep STUDYLOOP_* variables from the shell out of tests."""
    for key in list(os.environ):
        if key.startswith("STUDYLOOP_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def now():
    """Fixed evaluation time: Saturday 2024-06-15 12:00 local."""
    return datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def taxonomy():
    """
    Two categories, four topics, three questions per topic.

    Prerequisites: generics -> optionals, concurrency -> generics.
    """
    topics = {
        "variables": Topic("variables", "Variables", {"basics"}, sort_order=1),
        "optionals": Topic("optionals", "Optionals", {"basics"}, sort_order=2),
        "generics": Topic(
            "generics", "Generics", {"advanced"}, prerequisites={"optionals"}, sort_order=3
        ),
        "concurrency": Topic(
            "concurrency",
            "Concurrency",
            {"advanced"},
            prerequisites={"generics"},
            estimated_minutes=25,
            sort_order=4,
        ),
    }
    categories = {
        "basics": Category("basics", "Swift Basics", ["variables", "optionals"], sort_order=1),
        "advanced": Category("advanced", "Advanced Swift", ["generics", "concurrency"], sort_order=2),
    }
    questions = [
        Question(f"{topic.id}-{n}", topic.id, next(iter(topic.category_ids)))
        for topic in topics.values()
        for n in range(1, 4)
    ]
    return Taxonomy(topics=topics, categories=categories, questions=questions)


@pytest.fixture
def make_answer(now):
    """Factory for AnswerRecords answered ``hours_ago`` before ``now``."""

    def _make(question_id, correct=True, hours_ago=1.0, partial=False, time_spent=30.0):
        topic_id = question_id.rsplit("-", 1)[0]
        return AnswerRecord(
            question_id=question_id,
            topic_id=topic_id,
            was_correct=correct,
            answered_at=now - timedelta(hours=hours_ago),
            time_spent=time_spent,
            was_partial=partial,
        )

    return _make


@pytest.fixture
def make_evaluation(now):
    """Factory for graded quiz sessions started at ``now``."""

    def _make(total=5, correct=4, score=None, started_at=None, duration=300.0, categories=()):
        return QuizEvaluationResult(
            overall_score=score if score is not None else (correct / total if total else 0.0),
            total_questions=total,
            correct_answers=correct,
            started_at=started_at or now,
            duration_seconds=duration,
            categories_in_session=list(categories),
        )

    return _make
