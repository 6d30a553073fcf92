"""
Mood record service.

CRUD over mood records on top of a MoodStore. Each call is scoped to the
calling user: a record owned by someone else is reported as not found.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .models import (
    AIAnalysisResult,
    Emotion,
    MoodCreate,
    MoodRecord,
    MoodUpdate,
    utc_now,
)
from .store import MoodNotFound, MoodStore

logger = logging.getLogger(__name__)

RECENT_LIMIT = 50
VOICE_TRANSCRIPTION_FALLBACK = "Voice analyzed successfully."


def intensity_from_confidence(confidence: Optional[float]) -> int:
    """Map an analysis confidence (0-1) onto the 1-10 intensity scale."""
    value = 0.7 if confidence is None else confidence
    return min(10, max(1, int(value * 10 + 0.5)))


class MoodService:
    """Owner-scoped mood record operations."""

    def __init__(self, store: MoodStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def create(self, user_id: str, payload: MoodCreate) -> MoodRecord:
        now = self.clock()
        record = MoodRecord(
            user_id=user_id,
            emotion=payload.emotion,
            intensity=payload.intensity,
            notes=payload.notes,
            audio_url=payload.audio_url,
            transcription=payload.transcription,
            ai_analysis=payload.ai_analysis,
            metadata=payload.metadata,
            timestamp=payload.timestamp or now,
            created_at=now,
            updated_at=now,
        )
        self.store.insert(record)
        logger.info(f"[MOODS] Created {record.emotion}/{record.intensity} for {user_id}")
        return record

    def find_all(
        self,
        user_id: str,
        emotion: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[MoodRecord]:
        return self.store.find_by_user(user_id, emotion=emotion, limit=limit)

    def recent(self, user_id: str, limit: int = RECENT_LIMIT) -> List[MoodRecord]:
        return self.store.find_by_user(user_id, limit=limit)

    def get(self, user_id: str, mood_id: str) -> MoodRecord:
        record = self.store.find_by_id(mood_id)
        if record.user_id != user_id:
            raise MoodNotFound(mood_id)
        return record

    def update(self, user_id: str, mood_id: str, patch: MoodUpdate) -> MoodRecord:
        self.get(user_id, mood_id)
        return self.store.update(mood_id, patch, now=self.clock())

    def delete(self, user_id: str, mood_id: str) -> MoodRecord:
        """Delete a record and return it as it was before removal."""
        record = self.get(user_id, mood_id)
        self.store.delete(mood_id)
        logger.info(f"[MOODS] Deleted {mood_id} for {user_id}")
        return record

    def record_voice_analysis(
        self,
        user_id: str,
        analysis: dict,
        audio_url: Optional[str] = None,
    ) -> MoodRecord:
        """
        Persist a completed voice analysis as a mood check-in.

        Args:
            user_id: Owner of the new record
            analysis: The `data` payload of a successful voice analysis
            audio_url: Optional location of the stored recording

        Returns:
            The created MoodRecord
        """
        emotion = analysis.get("emotion")
        if emotion not in {e.value for e in Emotion}:
            emotion = Emotion.NEUTRAL.value

        confidence = analysis.get("confidence")
        payload = MoodCreate(
            emotion=emotion,
            intensity=intensity_from_confidence(confidence),
            audio_url=audio_url,
            transcription=analysis.get("transcription") or VOICE_TRANSCRIPTION_FALLBACK,
            ai_analysis=AIAnalysisResult(
                detected_emotion=emotion,
                confidence=0.7 if confidence is None else confidence,
                sentiment=analysis.get("sentiment") or "neutral",
                keywords=list(analysis.get("keywords") or [])[:5],
                suggestions=list(analysis.get("suggestions") or []),
                risk_level=analysis.get("riskLevel") or "low",
            ),
        )
        return self.create(user_id, payload)
