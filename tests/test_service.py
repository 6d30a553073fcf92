"""
Unit tests for owner-scoped mood record operations.

Usage:
    pytest tests/test_service.py -v
"""
from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW, fixed_clock, make_record
from mood_analytics import InMemoryMoodStore, MoodCreate, MoodNotFound, MoodService, MoodUpdate
from mood_analytics.service import VOICE_TRANSCRIPTION_FALLBACK, intensity_from_confidence


@pytest.fixture
def service():
    return MoodService(InMemoryMoodStore(), clock=fixed_clock)


# ============================================================================
# Validation
# ============================================================================


class TestMoodValidation:
    """Invalid check-ins are rejected before they reach a store."""

    def test_intensity_above_range_rejected(self):
        with pytest.raises(ValidationError):
            MoodCreate(emotion="happy", intensity=11)

    def test_intensity_below_range_rejected(self):
        with pytest.raises(ValidationError):
            MoodCreate(emotion="happy", intensity=0)

    def test_unknown_emotion_rejected(self):
        with pytest.raises(ValidationError):
            MoodCreate(emotion="ecstatic", intensity=5)

    def test_ai_analysis_keyword_cap(self):
        with pytest.raises(ValidationError):
            MoodCreate(
                emotion="happy",
                intensity=5,
                aiAnalysis={
                    "detectedEmotion": "happy",
                    "confidence": 0.9,
                    "sentiment": "positive",
                    "keywords": ["a", "b", "c", "d", "e", "f"],
                    "riskLevel": "low",
                },
            )

    def test_ai_analysis_confidence_range(self):
        with pytest.raises(ValidationError):
            MoodCreate(
                emotion="happy",
                intensity=5,
                aiAnalysis={
                    "detectedEmotion": "happy",
                    "confidence": 1.2,
                    "sentiment": "positive",
                    "riskLevel": "low",
                },
            )

    def test_accepts_camel_case_wire_names(self):
        payload = MoodCreate.model_validate(
            {"emotion": "calm", "intensity": 4, "audioUrl": "https://cdn.example/a.webm"}
        )

        assert payload.audio_url == "https://cdn.example/a.webm"


# ============================================================================
# CRUD
# ============================================================================


class TestMoodService:
    """Test CRUD scoped to the calling user."""

    def test_create_defaults_timestamp_to_now(self, service):
        record = service.create("user-1", MoodCreate(emotion="happy", intensity=7))

        assert record.user_id == "user-1"
        assert record.timestamp == NOW
        assert record.created_at == NOW
        assert service.get("user-1", record.id).id == record.id

    def test_create_keeps_explicit_timestamp(self, service):
        payload = MoodCreate.model_validate(
            {"emotion": "sad", "intensity": 3, "timestamp": "2025-06-01T08:00:00+02:00"}
        )

        record = service.create("user-1", payload)

        assert record.timestamp.isoformat() == "2025-06-01T06:00:00+00:00"

    def test_get_other_users_record_is_not_found(self, service):
        record = service.create("alice", MoodCreate(emotion="happy", intensity=7))

        with pytest.raises(MoodNotFound):
            service.get("bob", record.id)

    def test_update_stamps_clock_time(self, service):
        record = service.create("user-1", MoodCreate(emotion="sad", intensity=3))
        later = NOW + timedelta(minutes=30)
        service.clock = lambda: later

        updated = service.update("user-1", record.id, MoodUpdate(intensity=6))

        assert updated.created_at == NOW
        assert updated.updated_at == later

    def test_update_other_users_record_is_not_found(self, service):
        record = service.create("alice", MoodCreate(emotion="happy", intensity=7))

        with pytest.raises(MoodNotFound):
            service.update("bob", record.id, MoodUpdate(intensity=1))

        assert service.get("alice", record.id).intensity == 7

    def test_delete_returns_removed_record(self, service):
        record = service.create("user-1", MoodCreate(emotion="happy", intensity=7))

        removed = service.delete("user-1", record.id)

        assert removed.id == record.id
        with pytest.raises(MoodNotFound):
            service.get("user-1", record.id)

    def test_delete_other_users_record_is_not_found(self, service):
        record = service.create("alice", MoodCreate(emotion="happy", intensity=7))

        with pytest.raises(MoodNotFound):
            service.delete("bob", record.id)

    def test_recent_is_capped(self, service):
        for _ in range(60):
            service.store.insert(make_record("calm"))

        assert len(service.recent("user-1")) == 50
        assert len(service.recent("user-1", limit=10)) == 10

    def test_find_all_filters_by_emotion(self, service):
        service.create("user-1", MoodCreate(emotion="happy", intensity=7))
        service.create("user-1", MoodCreate(emotion="sad", intensity=2))

        assert [r.emotion for r in service.find_all("user-1", emotion="sad")] == ["sad"]


# ============================================================================
# Voice check-ins
# ============================================================================


class TestRecordVoiceAnalysis:
    """Test persisting a voice analysis as a mood record."""

    def test_intensity_from_confidence(self):
        assert intensity_from_confidence(0.9) == 9
        assert intensity_from_confidence(0.86) == 9
        assert intensity_from_confidence(0.44) == 4
        assert intensity_from_confidence(None) == 7
        assert intensity_from_confidence(0.0) == 1
        assert intensity_from_confidence(1.0) == 10

    def test_records_analysis(self, service):
        analysis = {
            "transcription": "I had a lovely day",
            "sentiment": "positive",
            "emotion": "happy",
            "confidence": 0.9,
            "keywords": ["lovely day"],
            "suggestions": ["Keep spreading positivity!"],
            "riskLevel": "low",
        }

        record = service.record_voice_analysis("user-1", analysis, audio_url="https://cdn.example/a.webm")

        assert record.emotion == "happy"
        assert record.intensity == 9
        assert record.transcription == "I had a lovely day"
        assert record.audio_url == "https://cdn.example/a.webm"
        assert record.ai_analysis.detected_emotion == "happy"
        assert record.ai_analysis.keywords == ["lovely day"]
        assert service.get("user-1", record.id).id == record.id

    def test_missing_fields_fall_back(self, service):
        record = service.record_voice_analysis("user-1", {"emotion": "calm", "sentiment": "neutral"})

        assert record.intensity == 7
        assert record.transcription == VOICE_TRANSCRIPTION_FALLBACK
        assert record.ai_analysis.confidence == 0.7
        assert record.ai_analysis.risk_level == "low"

    def test_unknown_emotion_stored_as_neutral(self, service):
        record = service.record_voice_analysis("user-1", {"emotion": "bewildered", "confidence": 0.5})

        assert record.emotion == "neutral"
