"""
Emotion Inference Engine.

Maps raw provider output, or raw free text, onto a normalized emotion
analysis: emotion, sentiment, confidence, keywords, suggestions and a
risk level.

Known limitations:

- sentiment maps onto only three emotions (happy/sad/calm)
- risk keywords match by substring, so "harmony" matches "harm"
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from mood_analytics.models import MAX_KEYWORDS, AIAnalysisResult

from .providers import TranscriptionJob

SENTIMENT_TO_EMOTION: Dict[str, str] = {
    "positive": "happy",
    "negative": "sad",
    "neutral": "calm",
}

SUGGESTIONS: Dict[str, List[str]] = {
    "happy": ["Keep spreading positivity!", "Write 3 things you are grateful for."],
    "sad": ["Talk to someone you trust.", "A short walk or music can help."],
    "calm": ["Enjoy this peaceful moment.", "A short mindfulness session keeps it going."],
}
GENERIC_SUGGESTION = "Be kind to yourself today."

HIGH_RISK_WORDS = ("suicide", "hurt", "kill", "die", "harm")
MEDIUM_RISK_WORDS = ("depressed", "anxious", "stress", "worried", "alone")
NEGATIVE_CONFIDENCE_THRESHOLD = 0.8

POSITIVE_WORDS = ("good", "great", "love", "happy", "wonderful")
NEGATIVE_WORDS = ("sad", "angry", "tired", "bad", "hate")

DEFAULT_SEGMENT_CONFIDENCE = 0.7
TEXT_CONFIDENCE = 0.8


@dataclass
class EmotionAnalysis:
    """Normalized result shared by the transcription and text paths."""

    emotion: str
    sentiment: str
    confidence: float
    keywords: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    risk_level: str = "low"

    def to_ai_analysis(self) -> AIAnalysisResult:
        """Convert to the value object embedded in mood records."""
        return AIAnalysisResult(
            detected_emotion=self.emotion,
            confidence=self.confidence,
            sentiment=self.sentiment,
            keywords=self.keywords[:MAX_KEYWORDS],
            suggestions=self.suggestions,
            risk_level=self.risk_level,
        )


def emotion_for_sentiment(sentiment: str) -> str:
    return SENTIMENT_TO_EMOTION.get(sentiment, "calm")


def suggestions_for(emotion: str) -> List[str]:
    return list(SUGGESTIONS.get(emotion, [GENERIC_SUGGESTION]))


def _contains_any(keywords: Iterable[str], words: Iterable[str]) -> bool:
    words = tuple(words)
    return any(w in keyword.lower() for keyword in keywords for w in words)


def classify_risk(sentiment: str, confidence: float, keywords: List[str]) -> str:
    """
    Classify risk from keywords and sentiment.

    High-risk words dominate unconditionally. Medium is triggered by a
    medium-risk word, or by negative sentiment with confidence strictly
    above 0.8.
    """
    if _contains_any(keywords, HIGH_RISK_WORDS):
        return "high"
    if _contains_any(keywords, MEDIUM_RISK_WORDS):
        return "medium"
    if sentiment == "negative" and confidence > NEGATIVE_CONFIDENCE_THRESHOLD:
        return "medium"
    return "low"


def infer_from_transcription(job: TranscriptionJob) -> EmotionAnalysis:
    """Derive an analysis from a completed transcription job."""
    first = job.sentiment_segments[0] if job.sentiment_segments else None
    sentiment = first.sentiment if first else "neutral"
    confidence: Optional[float] = first.confidence if first else None
    if confidence is None:
        confidence = DEFAULT_SEGMENT_CONFIDENCE

    emotion = emotion_for_sentiment(sentiment)
    keywords = job.highlights[:MAX_KEYWORDS]

    return EmotionAnalysis(
        emotion=emotion,
        sentiment=sentiment,
        confidence=confidence,
        keywords=keywords,
        suggestions=suggestions_for(emotion),
        risk_level=classify_risk(sentiment, confidence, keywords),
    )


def infer_from_text(text: str) -> EmotionAnalysis:
    """
    Keyword-count sentiment for free text.

    Risk is always "low" on this path; risk keywords are only evaluated
    for voice transcriptions.
    """
    lower = text.lower()
    positive = sum(1 for w in POSITIVE_WORDS if w in lower)
    negative = sum(1 for w in NEGATIVE_WORDS if w in lower)

    if positive > negative:
        sentiment = "positive"
    elif negative > positive:
        sentiment = "negative"
    else:
        sentiment = "neutral"

    emotion = emotion_for_sentiment(sentiment)
    return EmotionAnalysis(
        emotion=emotion,
        sentiment=sentiment,
        confidence=TEXT_CONFIDENCE,
        suggestions=suggestions_for(emotion),
        risk_level="low",
    )
