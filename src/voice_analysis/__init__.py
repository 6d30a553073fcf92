"""
Voice Analysis Module.

Turns recorded audio (or free text) into a normalized emotion analysis via
an external transcription provider, with an optional LLM tone summary.
"""

from .errors import (
    AnalysisCancelled,
    AnalysisError,
    InvalidInput,
    ProviderAuthError,
    ProviderError,
    ProviderResponseError,
    ProviderUnavailable,
    TranscriptionFailed,
    TranscriptionTimeout,
)
from .inference import EmotionAnalysis, classify_risk, infer_from_text, infer_from_transcription
from .orchestrator import AnalysisOutcome, PipelineStage, VoiceAnalysisOrchestrator
from .polling import AsyncioWaiter, CancellationToken, PollPolicy, poll_until
from .providers import CompletionClient, TranscriptionClient, TranscriptionJob

__all__ = [
    "AnalysisCancelled",
    "AnalysisError",
    "InvalidInput",
    "ProviderAuthError",
    "ProviderError",
    "ProviderResponseError",
    "ProviderUnavailable",
    "TranscriptionFailed",
    "TranscriptionTimeout",
    "EmotionAnalysis",
    "classify_risk",
    "infer_from_text",
    "infer_from_transcription",
    "AnalysisOutcome",
    "PipelineStage",
    "VoiceAnalysisOrchestrator",
    "AsyncioWaiter",
    "CancellationToken",
    "PollPolicy",
    "poll_until",
    "CompletionClient",
    "TranscriptionClient",
    "TranscriptionJob",
]
