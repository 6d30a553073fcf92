"""
Mood Analytics Module.

Mood record models, the store contract and its backends, owner-scoped CRUD,
and the statistics/trend aggregation engine.
"""

from .aggregation import MoodAnalytics, compute_stats, compute_trends, stability_score
from .models import (
    AIAnalysisResult,
    Emotion,
    MoodCreate,
    MoodMetadata,
    MoodRecord,
    MoodStats,
    MoodTrend,
    MoodUpdate,
)
from .service import MoodService
from .store import InMemoryMoodStore, MoodNotFound, MoodStore, SqliteMoodStore

__all__ = [
    "MoodAnalytics",
    "compute_stats",
    "compute_trends",
    "stability_score",
    "AIAnalysisResult",
    "Emotion",
    "MoodCreate",
    "MoodMetadata",
    "MoodRecord",
    "MoodStats",
    "MoodTrend",
    "MoodUpdate",
    "MoodService",
    "InMemoryMoodStore",
    "MoodNotFound",
    "MoodStore",
    "SqliteMoodStore",
]
