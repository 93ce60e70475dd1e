"""
Adaptive Feedback Engine.

Components:
- InsightEngine: Rule-based insights from recent daily sessions
- RecommendationEngine: Ranked study suggestions with prerequisite gating
"""
from studyloop.adaptive.insight_engine import InsightEngine
from studyloop.adaptive.recommendation_engine import (
    RecommendationEngine,
    collect_prerequisites,
)

__all__ = [
    "InsightEngine",
    "RecommendationEngine",
    "collect_prerequisites",
]
