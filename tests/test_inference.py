"""
Unit tests for the Emotion Inference Engine.

These tests verify:
1. Sentiment to emotion mapping and suggestions
2. Risk classification thresholds and keyword precedence
3. Inference from transcription jobs and from free text

Usage:
    pytest tests/test_inference.py -v
"""
import pytest

from conftest import job_snapshot
from voice_analysis.inference import (
    GENERIC_SUGGESTION,
    SUGGESTIONS,
    classify_risk,
    emotion_for_sentiment,
    infer_from_text,
    infer_from_transcription,
    suggestions_for,
)


class TestEmotionMapping:
    """Sentiment maps onto exactly three emotions."""

    @pytest.mark.parametrize(
        "sentiment,emotion",
        [("positive", "happy"), ("negative", "sad"), ("neutral", "calm"), ("mixed", "calm")],
    )
    def test_mapping(self, sentiment, emotion):
        assert emotion_for_sentiment(sentiment) == emotion

    def test_known_emotions_have_two_suggestions(self):
        for emotion in ("happy", "sad", "calm"):
            assert suggestions_for(emotion) == SUGGESTIONS[emotion]
            assert len(suggestions_for(emotion)) == 2

    def test_unknown_emotion_gets_generic_suggestion(self):
        assert suggestions_for("angry") == [GENERIC_SUGGESTION]

    def test_suggestions_are_copies(self):
        suggestions_for("happy").append("mutated")

        assert "mutated" not in SUGGESTIONS["happy"]


class TestClassifyRisk:
    """Test risk classification."""

    def test_high_risk_keyword(self):
        assert classify_risk("neutral", 0.5, ["I want to die"]) == "high"

    def test_high_risk_dominates_positive_sentiment(self):
        assert classify_risk("positive", 0.99, ["suicide", "sunshine"]) == "high"

    def test_high_risk_beats_medium_keyword(self):
        assert classify_risk("negative", 0.5, ["anxious", "hurt"]) == "high"

    def test_medium_risk_keyword(self):
        assert classify_risk("positive", 0.9, ["feeling ALONE tonight"]) == "medium"

    def test_negative_confidence_boundary(self):
        assert classify_risk("negative", 0.80, []) == "low"
        assert classify_risk("negative", 0.81, []) == "medium"

    def test_positive_high_confidence_is_low(self):
        assert classify_risk("positive", 0.99, ["beach"]) == "low"

    def test_substring_matching(self):
        # Substring match is intentional: "harmony" contains "harm"
        assert classify_risk("positive", 0.5, ["harmony"]) == "high"


class TestInferFromTranscription:
    """Test inference from a completed transcription job."""

    def test_positive_job(self):
        analysis = infer_from_transcription(job_snapshot(sentiment="POSITIVE", confidence=0.93))

        assert analysis.sentiment == "positive"
        assert analysis.emotion == "happy"
        assert analysis.confidence == 0.93
        assert analysis.keywords == ["lovely day", "beach"]
        assert analysis.suggestions == SUGGESTIONS["happy"]
        assert analysis.risk_level == "low"

    def test_negative_confident_job_is_medium_risk(self):
        analysis = infer_from_transcription(
            job_snapshot(sentiment="NEGATIVE", confidence=0.95, highlights=("rough week",))
        )

        assert analysis.emotion == "sad"
        assert analysis.risk_level == "medium"

    def test_no_sentiment_results(self):
        analysis = infer_from_transcription(job_snapshot(sentiment=None))

        assert analysis.sentiment == "neutral"
        assert analysis.emotion == "calm"
        assert analysis.confidence == 0.7

    def test_missing_segment_confidence_defaults(self):
        analysis = infer_from_transcription(job_snapshot(sentiment="NEUTRAL", confidence=None))

        assert analysis.confidence == 0.7

    def test_keywords_capped_at_five(self):
        highlights = tuple(f"phrase {i}" for i in range(8))

        analysis = infer_from_transcription(job_snapshot(highlights=highlights))

        assert analysis.keywords == list(highlights[:5])

    def test_risk_from_highlight(self):
        analysis = infer_from_transcription(
            job_snapshot(sentiment="NEUTRAL", confidence=0.6, highlights=("want to kill time",))
        )

        assert analysis.risk_level == "high"

    def test_to_ai_analysis(self):
        result = infer_from_transcription(job_snapshot()).to_ai_analysis()

        dumped = result.model_dump(by_alias=True)
        assert dumped["detectedEmotion"] == "happy"
        assert dumped["riskLevel"] == "low"


class TestInferFromText:
    """Test keyword-count analysis of free text."""

    def test_positive_text(self):
        analysis = infer_from_text("I feel good and happy today")

        assert analysis.sentiment == "positive"
        assert analysis.emotion == "happy"
        assert analysis.confidence == 0.8
        assert analysis.risk_level == "low"

    def test_negative_text(self):
        analysis = infer_from_text("So tired and sad, everything is bad")

        assert analysis.sentiment == "negative"
        assert analysis.emotion == "sad"

    def test_balanced_text_is_neutral(self):
        analysis = infer_from_text("good but tired")

        assert analysis.sentiment == "neutral"
        assert analysis.emotion == "calm"

    def test_case_insensitive(self):
        assert infer_from_text("GREAT day").sentiment == "positive"

    def test_counts_words_present_not_occurrences(self):
        # "sad" three times still counts once, and ties with "good"
        assert infer_from_text("sad sad sad but good").sentiment == "neutral"

    def test_risk_words_ignored_on_text_path(self):
        assert infer_from_text("I want to die").risk_level == "low"
