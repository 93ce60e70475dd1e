"""
Unit tests for QuestionPoolSelector.

Sampling goes through an injected ``random.Random`` so results are
reproducible.
"""

import random

import pytest

from studyloop.core.exceptions import NoQuestionsAvailable, StudyLoopError
from studyloop.study.question_selector import QuestionPoolSelector


class FirstKSampler:
    """Deterministic sampler that records the population it was given."""

    def __init__(self):
        self.populations = []

    def sample(self, population, k):
        self.populations.append(list(population))
        return list(population)[:k]


class TestClampCount:
    @pytest.mark.parametrize("requested,expected", [(15, 10), (0, 1), (-3, 1), (None, 5), (7, 7)])
    def test_bounds(self, taxonomy, requested, expected):
        assert QuestionPoolSelector(taxonomy).clamp_count(requested) == expected

    def test_oversized_request_returns_max(self, taxonomy, now):
        selector = QuestionPoolSelector(taxonomy, sampler=random.Random(1))
        assert len(selector.select_quiz_questions(15, None, now)) == 10

    def test_bounds_come_from_quiz_config(self, taxonomy):
        selector = QuestionPoolSelector(taxonomy)
        assert selector.min_questions == 1
        assert selector.default_questions == 5
        assert selector.max_questions == 10

    def test_environment_overrides_bounds(self, taxonomy, monkeypatch):
        monkeypatch.setenv("STUDYLOOP_QUIZ_MAX_QUESTIONS", "8")
        assert QuestionPoolSelector(taxonomy).clamp_count(15) == 8


class TestCategoryFilter:
    def test_restricts_to_categories(self, taxonomy, now):
        selector = QuestionPoolSelector(taxonomy, sampler=random.Random(3))
        ids = selector.select_quiz_questions(6, ["basics"], now)

        assert len(ids) == 6
        assert all(i.startswith(("variables", "optionals")) for i in ids)

    def test_empty_filter_uses_whole_bank(self, taxonomy, now):
        selector = QuestionPoolSelector(taxonomy, sampler=FirstKSampler())
        selector.select_quiz_questions(10, [], now)
        assert len(selector.sampler.populations[0]) == 12

    def test_no_questions_raises(self, taxonomy, now):
        selector = QuestionPoolSelector(taxonomy)
        with pytest.raises(NoQuestionsAvailable) as exc_info:
            selector.select_quiz_questions(5, ["networking"], now)

        assert exc_info.value.categories == ["networking"]
        assert isinstance(exc_info.value, StudyLoopError)


class TestEligibility:
    @pytest.fixture
    def answers(self, make_answer):
        # Only variables-1 and variables-2 remain eligible in basics
        return [
            make_answer("variables-1", correct=False),
            make_answer("variables-3", correct=True),
            make_answer("optionals-1", correct=True),
            make_answer("optionals-2", correct=True),
            make_answer("optionals-3", correct=True, hours_ago=12),
        ]

    def test_prefers_eligible_questions(self, taxonomy, answers, now):
        selector = QuestionPoolSelector(taxonomy, answers, sampler=random.Random(5))
        ids = selector.select_quiz_questions(2, ["basics"], now)
        assert set(ids) == {"variables-1", "variables-2"}

    def test_falls_back_to_full_pool(self, taxonomy, answers, now):
        sampler = FirstKSampler()
        selector = QuestionPoolSelector(taxonomy, answers, sampler=sampler)
        ids = selector.select_quiz_questions(5, ["basics"], now)

        assert len(ids) == 5
        assert len(sampler.populations[0]) == 6

    def test_returns_whole_pool_when_smaller_than_request(self, taxonomy, now):
        selector = QuestionPoolSelector(taxonomy, sampler=random.Random(2))
        ids = selector.select_quiz_questions(10, ["basics"], now)
        assert sorted(ids) == sorted(q.id for q in taxonomy.questions[:6])

    def test_partition(self, taxonomy, answers, now):
        selector = QuestionPoolSelector(taxonomy, answers)
        split = selector.partition(selector.filter_questions(["basics"]), now)

        assert [q.id for q in split.eligible] == ["variables-1", "variables-2"]
        assert len(split.ineligible) == 4
        assert len(split.all) == 6


class TestReproducibility:
    def test_same_seed_same_quiz(self, taxonomy, now):
        first = QuestionPoolSelector(taxonomy, sampler=random.Random(42))
        second = QuestionPoolSelector(taxonomy, sampler=random.Random(42))

        assert first.select_quiz_questions(5, None, now) == second.select_quiz_questions(
            5, None, now
        )

    def test_no_duplicates(self, taxonomy, now):
        ids = QuestionPoolSelector(taxonomy).select_quiz_questions(10, None, now)
        assert len(ids) == len(set(ids))
