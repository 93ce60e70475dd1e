"""
Configuration settings for the StudyLoop adaptive-learning core.

Uses Pydantic Settings for environment variable management with .env file support.
Every threshold the analytic components use is tunable here; components take
these values as constructor defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STUDYLOOP_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    # ========================================
    # Quiz Selection
    # ========================================
    quiz_min_questions: int = Field(
        default=1,
        ge=1,
        description="Smallest quiz that can be requested",
    )
    quiz_default_questions: int = Field(
        default=5,
        ge=1,
        description="Quiz size when none is requested",
    )
    quiz_max_questions: int = Field(
        default=10,
        ge=1,
        description="Largest quiz that can be requested",
    )
    retry_threshold_hours: float = Field(
        default=48.0,
        ge=0,
        description="Hours a correctly answered question stays out of rotation",
    )

    # ========================================
    # Proficiency
    # ========================================
    proficiency_accuracy_weight: float = Field(
        default=0.6,
        ge=0,
        le=1,
        description="Weight of accuracy in the proficiency blend",
    )
    proficiency_completion_weight: float = Field(
        default=0.3,
        ge=0,
        le=1,
        description="Weight of topic coverage in the proficiency blend",
    )
    proficiency_recency_weight: float = Field(
        default=0.1,
        ge=0,
        le=1,
        description="Weight of recency decay in the proficiency blend",
    )
    review_accuracy_threshold: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Topics below this accuracy are flagged for review",
    )
    review_stale_days: float = Field(
        default=7.0,
        ge=0,
        description="Topics untouched for longer than this are flagged for review",
    )

    # ========================================
    # Streaks & Daily Goals
    # ========================================
    streak_grace_period_days: int = Field(
        default=1,
        ge=0,
        description="Missed days tolerated before a streak is broken",
    )
    streak_recovery_window_days: int = Field(
        default=3,
        ge=1,
        description="Largest gap for which streak recovery is offered",
    )
    recent_sessions_limit: int = Field(
        default=30,
        ge=1,
        description="Number of daily sessions retained",
    )

    # ========================================
    # Insights
    # ========================================
    insight_retention_days: int = Field(
        default=14,
        ge=1,
        description="Insights older than this are dropped",
    )
    insight_dedup_days: int = Field(
        default=3,
        ge=0,
        description="Suppress a repeated insight type within this window",
    )
    insight_min_sessions: int = Field(
        default=3,
        ge=1,
        description="Daily sessions required before trend insights are generated",
    )
    insight_trend_window: int = Field(
        default=7,
        ge=1,
        description="Number of recent sessions considered for trends",
    )
    insight_strong_accuracy: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Mean accuracy above which strong performance is reported",
    )
    insight_decline_drop: float = Field(
        default=0.15,
        ge=0,
        le=1,
        description="Accuracy drop that counts as a performance decline",
    )

    # ========================================
    # Recommendations
    # ========================================
    expert_threshold: float = Field(
        default=0.9,
        ge=0,
        le=1,
        description="Prerequisite proficiency required before a new topic is suggested",
    )
    weak_category_threshold: float = Field(
        default=0.5,
        ge=0,
        le=1,
        description="Categories below this proficiency are weak",
    )
    weak_category_min_attempts: int = Field(
        default=2,
        ge=0,
        description="Attempts required before a category can be called weak",
    )
    strong_category_threshold: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Categories at or above this proficiency are strong",
    )
    strong_category_min_attempts: int = Field(
        default=3,
        ge=0,
        description="Attempts required before a category can be called strong",
    )
    max_new_topic_suggestions: int = Field(
        default=2,
        ge=0,
        description="Untried topics suggested per run",
    )
    prerequisite_max_depth: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum prerequisite chain depth before traversal gives up",
    )

    @model_validator(mode="after")
    def _check_quiz_bounds(self) -> Settings:
        if not (
            self.quiz_min_questions
            <= self.quiz_default_questions
            <= self.quiz_max_questions
        ):
            raise ValueError(
                "quiz_min_questions <= quiz_default_questions <= quiz_max_questions must hold"
            )
        return self

    def get_quiz_config(self) -> dict[str, float | int]:
        """Get quiz selection configuration as a dictionary."""
        return {
            "min_questions": self.quiz_min_questions,
            "default_questions": self.quiz_default_questions,
            "max_questions": self.quiz_max_questions,
            "retry_threshold_hours": self.retry_threshold_hours,
        }

    def get_proficiency_weights(self) -> dict[str, float]:
        """Get the proficiency blend weights."""
        return {
            "accuracy": self.proficiency_accuracy_weight,
            "completion": self.proficiency_completion_weight,
            "recency": self.proficiency_recency_weight,
        }

    def get_insight_config(self) -> dict[str, float | int]:
        """Get insight engine configuration as a dictionary."""
        return {
            "retention_days": self.insight_retention_days,
            "dedup_days": self.insight_dedup_days,
            "min_sessions": self.insight_min_sessions,
            "trend_window": self.insight_trend_window,
            "strong_accuracy": self.insight_strong_accuracy,
            "decline_drop": self.insight_decline_drop,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
