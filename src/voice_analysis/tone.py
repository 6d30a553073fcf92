"""
Best-effort tone summary.

`summarize_tone` never raises: it returns a ToneOutcome whose failure
branch is turned into a fallback string by the caller via `unwrap_or`.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .inference import EmotionAnalysis
from .providers import CompletionClient

logger = logging.getLogger(__name__)

TONE_SYSTEM_PROMPT = "You are a kind mental-health coach. Be concise."
TONE_UNAVAILABLE = "Tone summary unavailable."
TONE_FAILED = "Unable to analyze tone right now."


@dataclass(frozen=True)
class ToneOutcome:
    """Result of a tone summary request: a summary or the error it hit."""

    summary: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, fallback: str) -> str:
        if not self.ok:
            return fallback
        return self.summary or TONE_UNAVAILABLE


def tone_prompt(text: str, analysis: EmotionAnalysis) -> str:
    return (
        f"Emotion={analysis.emotion}, Sentiment={analysis.sentiment}, "
        f"Confidence={analysis.confidence}. Text: \"\"\"{text}\"\"\""
    )


async def summarize_tone(
    client: Optional[CompletionClient],
    text: str,
    analysis: EmotionAnalysis,
) -> ToneOutcome:
    """Ask the completion provider for a short description of the tone."""
    if client is None or not client.configured:
        return ToneOutcome(summary=None)

    try:
        summary = await client.request_completion(
            tone_prompt(text, analysis),
            TONE_SYSTEM_PROMPT,
            max_tokens=200,
            temperature=0.7,
        )
    except Exception as e:
        logger.warning(f"[TONE] Tone summary failed: {e}")
        return ToneOutcome(error=e)

    return ToneOutcome(summary=summary.strip() if summary else None)
