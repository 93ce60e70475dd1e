"""
History snapshot schema for the CLI.

A snapshot is a JSON document holding the taxonomy, the answer history and
optionally recorded daily sessions. It is validated with Pydantic and
converted into core dataclasses; the core itself never reads files.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from studyloop.core.models import (
    AnswerRecord,
    Category,
    DailySession,
    Question,
    Taxonomy,
    Topic,
)


class CategoryModel(BaseModel):
    id: str
    name: str
    topic_ids: list[str] = Field(default_factory=list)
    sort_order: int = 0


class TopicModel(BaseModel):
    id: str
    name: str
    category_ids: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    estimated_minutes: int = Field(default=15, ge=0)
    sort_order: int = 0


class QuestionModel(BaseModel):
    id: str
    topic_id: str
    category_id: str


class AnswerModel(BaseModel):
    question_id: str
    topic_id: str
    was_correct: bool
    answered_at: datetime | None = None
    time_spent: float = Field(default=0.0, ge=0)
    was_skipped: bool = False
    was_partial: bool = False
    category_id: str | None = None


class DailySessionModel(BaseModel):
    date: date
    questions_completed: int = Field(default=0, ge=0)
    time_spent: float = Field(default=0.0, ge=0)
    correct_answers: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    average_score: float = Field(default=0.0, ge=0, le=1)
    goal_achieved: bool = False
    categories_studied: list[str] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Validated history snapshot."""

    categories: list[CategoryModel] = Field(default_factory=list)
    topics: list[TopicModel] = Field(default_factory=list)
    questions: list[QuestionModel] = Field(default_factory=list)
    answers: list[AnswerModel] = Field(default_factory=list)
    sessions: list[DailySessionModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_references(self) -> Snapshot:
        topic_ids = {t.id for t in self.topics}
        for question in self.questions:
            if question.topic_id not in topic_ids:
                raise ValueError(
                    f"Question {question.id} references unknown topic {question.topic_id}"
                )
        return self

    @classmethod
    def load(cls, path: Path) -> Snapshot:
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def to_taxonomy(self) -> Taxonomy:
        topics = {
            t.id: Topic(
                id=t.id,
                name=t.name,
                category_ids=set(t.category_ids),
                prerequisites=set(t.prerequisites),
                estimated_minutes=t.estimated_minutes,
                sort_order=t.sort_order,
            )
            for t in self.topics
        }
        categories = {
            c.id: Category(id=c.id, name=c.name, topic_ids=list(c.topic_ids), sort_order=c.sort_order)
            for c in self.categories
        }
        # Topics may declare membership from either side of the edge
        for topic in topics.values():
            for category_id in topic.category_ids:
                category = categories.get(category_id)
                if category is not None and topic.id not in category.topic_ids:
                    category.topic_ids.append(topic.id)
        for category in categories.values():
            for topic_id in category.topic_ids:
                if topic_id in topics:
                    topics[topic_id].category_ids.add(category.id)

        questions = [
            Question(id=q.id, topic_id=q.topic_id, category_id=q.category_id)
            for q in self.questions
        ]
        return Taxonomy(topics=topics, categories=categories, questions=questions)

    def to_answers(self) -> list[AnswerRecord]:
        return [AnswerRecord(**a.model_dump()) for a in self.answers]

    def to_sessions(self) -> list[DailySession]:
        """Daily sessions, newest first."""
        sessions = [
            DailySession(
                date=s.date,
                questions_completed=s.questions_completed,
                time_spent=s.time_spent,
                correct_answers=s.correct_answers,
                total_questions=s.total_questions,
                average_score=s.average_score,
                goal_achieved=s.goal_achieved,
                categories_studied=set(s.categories_studied),
            )
            for s in self.sessions
        ]
        return sorted(sessions, key=lambda s: s.date, reverse=True)
