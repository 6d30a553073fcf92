"""
Mood record data models.

Defines the persisted MoodRecord shape, its embedded AI analysis value
object, and the computed statistics/trend models. Field names serialize
to the camelCase wire contract consumed by the dashboard.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Sentiment = Literal["positive", "negative", "neutral"]
RiskLevel = Literal["low", "medium", "high"]


class Emotion(str, Enum):
    """Closed set of emotions a mood record can carry."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    CALM = "calm"
    ANXIOUS = "anxious"
    EXCITED = "excited"
    NEUTRAL = "neutral"
    FRUSTRATED = "frustrated"
    CONFIDENT = "confident"
    LONELY = "lonely"


MAX_KEYWORDS = 5


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AIAnalysisResult(BaseModel):
    """AI analysis embedded in a mood record."""

    model_config = ConfigDict(populate_by_name=True)

    detected_emotion: str = Field(alias="detectedEmotion")
    confidence: float = Field(ge=0, le=1)
    sentiment: Sentiment
    keywords: List[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    suggestions: List[str] = Field(default_factory=list)
    risk_level: RiskLevel = Field(alias="riskLevel")


class MoodMetadata(BaseModel):
    """Free-form context captured alongside a check-in."""

    weather: Optional[str] = None
    location: Optional[str] = None
    activities: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)


class MoodFields(BaseModel):
    """Fields shared by mood creation payloads and stored records."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    emotion: Emotion
    intensity: int = Field(ge=1, le=10)
    notes: Optional[str] = None
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    transcription: Optional[str] = None
    ai_analysis: Optional[AIAnalysisResult] = Field(default=None, alias="aiAnalysis")
    metadata: Optional[MoodMetadata] = None


class MoodCreate(MoodFields):
    """Payload for a new mood check-in. Timestamp defaults to now."""

    timestamp: Optional[datetime] = None

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class MoodUpdate(BaseModel):
    """Partial update of a mood record. Unset fields are left untouched."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    emotion: Optional[Emotion] = None
    intensity: Optional[int] = Field(default=None, ge=1, le=10)
    notes: Optional[str] = None
    audio_url: Optional[str] = Field(default=None, alias="audioUrl")
    transcription: Optional[str] = None
    ai_analysis: Optional[AIAnalysisResult] = Field(default=None, alias="aiAnalysis")
    metadata: Optional[MoodMetadata] = None
    timestamp: Optional[datetime] = None

    @field_validator("timestamp")
    @classmethod
    def _timestamp_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value) if value is not None else None


class MoodRecord(MoodFields):
    """A stored mood observation owned by a single user."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str = Field(alias="userId", min_length=1)
    timestamp: datetime
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    @field_validator("timestamp", "created_at", "updated_at")
    @classmethod
    def _datetimes_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def apply(self, patch: MoodUpdate, now: Optional[datetime] = None) -> "MoodRecord":
        """
        Return a new record with the patch applied.

        The merged record is re-validated so range and enum invariants
        hold after updates as well as at creation.
        """
        changes = patch.model_dump(exclude_unset=True)
        merged = self.model_dump()
        merged.update(changes)
        merged["id"] = self.id
        merged["user_id"] = self.user_id
        merged["created_at"] = self.created_at
        merged["updated_at"] = now or utc_now()
        return MoodRecord.model_validate(merged)


class MoodStats(BaseModel):
    """Aggregated statistics over a user's lookback window."""

    model_config = ConfigDict(populate_by_name=True)

    total_moods: int = Field(alias="totalMoods")
    emotion_frequency: dict[str, int] = Field(alias="emotionFrequency")
    average_intensity: float = Field(alias="averageIntensity")
    sentiment_distribution: dict[str, int] = Field(alias="sentimentDistribution")
    most_frequent_emotion: Optional[str] = Field(alias="mostFrequentEmotion")
    mood_stability: int = Field(alias="moodStability", ge=0, le=100)


class MoodTrend(BaseModel):
    """One calendar day's aggregated mood summary."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    avg_intensity: float = Field(alias="avgIntensity")
    dominant_emotion: str = Field(alias="dominantEmotion")
    mood_count: int = Field(alias="moodCount")
