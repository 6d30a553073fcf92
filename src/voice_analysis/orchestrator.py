"""
Voice Analysis Orchestrator.

Runs one voice analysis request end to end:

    UPLOADING -> JOB_CREATED -> POLLING -> DONE
                                        -> PROVIDER_ERROR
                                        -> TIMEOUT
                                        -> CANCELLED

The pipeline has exactly two exit shapes: a success result carrying the
analysis payload, or a failure result carrying a client-safe message.
Only InvalidInput escapes as an exception, so the HTTP layer can answer
it with a 4xx.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import (
    AnalysisCancelled,
    AnalysisError,
    InvalidInput,
    TranscriptionFailed,
    TranscriptionTimeout,
)
from .inference import EmotionAnalysis, infer_from_transcription, infer_from_text
from .polling import CancellationToken, PollingTimeout, PollPolicy, Waiter, poll_until
from .providers import CompletionClient, TranscriptionClient, TranscriptionJob
from .tone import TONE_FAILED, TONE_UNAVAILABLE, summarize_tone

logger = logging.getLogger(__name__)

VOICE_SUCCESS_MESSAGE = "Voice analyzed successfully"
TEXT_SUCCESS_MESSAGE = "Text analyzed successfully."
GENERIC_FAILURE_MESSAGE = "Voice analysis failed. Please try again."

# Acoustic features are not computed
ACOUSTIC_PLACEHOLDER = {"avgPitch": "—", "avgEnergy": "—"}


class PipelineStage(str, Enum):
    """Stage of a voice analysis run."""

    UPLOADING = "uploading"
    JOB_CREATED = "job_created"
    POLLING = "polling"
    DONE = "done"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


TERMINAL_STAGES = frozenset(
    {PipelineStage.DONE, PipelineStage.PROVIDER_ERROR, PipelineStage.TIMEOUT, PipelineStage.CANCELLED}
)


@dataclass
class AnalysisOutcome:
    """Uniform result of an analysis call."""

    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    stage: Optional[PipelineStage] = None

    def to_dict(self) -> dict:
        result = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        return result


@dataclass
class PipelineRun:
    """Per-request state: the job being tracked and the stage history."""

    stage: PipelineStage = PipelineStage.UPLOADING
    job_id: Optional[str] = None
    polls: int = 0
    history: List[Tuple[PipelineStage, float]] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)

    def __post_init__(self):
        self.history.append((self.stage, 0.0))

    def advance(self, stage: PipelineStage) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"Run already finished in stage {self.stage.value}")
        self.stage = stage
        self.history.append((stage, time.monotonic() - self.started))
        logger.info(f"[VOICE] Stage -> {stage.value} (job={self.job_id})")


def build_voice_payload(
    job: TranscriptionJob,
    analysis: EmotionAnalysis,
    tone_summary: str,
) -> Dict[str, Any]:
    return {
        "transcription": job.result_text or "",
        "sentiment": analysis.sentiment,
        "emotion": analysis.emotion,
        "confidence": analysis.confidence,
        "toneSummary": tone_summary,
        "acoustic": dict(ACOUSTIC_PLACEHOLDER),
        "keywords": analysis.keywords,
        "suggestions": analysis.suggestions,
        "riskLevel": analysis.risk_level,
    }


class VoiceAnalysisOrchestrator:
    """
    Coordinates upload, transcription polling, inference and tone summary.

    Instances hold only collaborators and policy; every `analyze_voice`
    call gets its own PipelineRun, so one orchestrator can serve
    concurrent requests.

    Args:
        transcription: Transcription provider client
        completion: Optional completion client for tone summaries
        policy: Polling interval and attempt cap
        waiter: Timed-wait implementation for polling (injectable)
    """

    def __init__(
        self,
        transcription: TranscriptionClient,
        completion: Optional[CompletionClient] = None,
        policy: PollPolicy = PollPolicy(),
        waiter: Optional[Waiter] = None,
    ):
        self.transcription = transcription
        self.completion = completion
        self.policy = policy
        self.waiter = waiter

    async def analyze_voice(
        self,
        audio: Optional[bytes],
        token: Optional[CancellationToken] = None,
    ) -> AnalysisOutcome:
        """
        Analyze one audio recording.

        Raises:
            InvalidInput: if the audio payload is missing or empty

        Returns:
            AnalysisOutcome; never raises for provider or internal failures
        """
        if not audio:
            raise InvalidInput("No valid audio file uploaded.")

        token = token or CancellationToken()
        run = PipelineRun()

        try:
            data = await self._run(run, audio, token)
        except AnalysisError as e:
            self._fail(run, e)
            logger.error(f"[VOICE] Analysis failed in {run.stage.value}: {e}")
            return AnalysisOutcome(False, e.user_message, stage=run.stage)
        except Exception as e:
            self._fail(run, e)
            logger.exception(f"[VOICE] Unexpected failure in {run.stage.value}: {e}")
            return AnalysisOutcome(False, GENERIC_FAILURE_MESSAGE, stage=run.stage)

        return AnalysisOutcome(True, VOICE_SUCCESS_MESSAGE, data=data, stage=run.stage)

    def _fail(self, run: PipelineRun, error: Exception) -> None:
        if run.stage in TERMINAL_STAGES:
            return
        if isinstance(error, TranscriptionTimeout):
            run.advance(PipelineStage.TIMEOUT)
        elif isinstance(error, AnalysisCancelled):
            run.advance(PipelineStage.CANCELLED)
        else:
            run.advance(PipelineStage.PROVIDER_ERROR)

    async def _run(self, run: PipelineRun, audio: bytes, token: CancellationToken) -> Dict[str, Any]:
        logger.info(f"[VOICE] Uploading {len(audio)} bytes of audio")
        token.raise_if_cancelled()
        upload_url = await self.transcription.upload_audio(audio)

        token.raise_if_cancelled()
        run.job_id = await self.transcription.create_transcription_job(upload_url)
        run.advance(PipelineStage.JOB_CREATED)

        job = await self._poll(run, token)
        if job.status == "error":
            raise TranscriptionFailed(job.error)

        analysis = infer_from_transcription(job)
        tone_summary = await self._tone_summary(job, analysis)

        run.advance(PipelineStage.DONE)
        return build_voice_payload(job, analysis, tone_summary)

    async def _poll(self, run: PipelineRun, token: CancellationToken) -> TranscriptionJob:
        run.advance(PipelineStage.POLLING)

        def observe(attempt: int, job: TranscriptionJob) -> None:
            run.polls = attempt
            logger.info(f"[POLL] {run.job_id} attempt {attempt}: {job.status}")

        try:
            return await poll_until(
                lambda: self.transcription.poll_transcription_job(run.job_id),
                lambda job: job.is_terminal,
                policy=self.policy,
                waiter=self.waiter,
                token=token,
                on_attempt=observe,
            )
        except PollingTimeout as e:
            raise TranscriptionTimeout(
                f"Job {run.job_id} not finished after {e.attempts} polls"
            ) from e

    async def _tone_summary(self, job: TranscriptionJob, analysis: EmotionAnalysis) -> str:
        if self.completion is None or not self.completion.configured:
            return TONE_UNAVAILABLE
        outcome = await summarize_tone(self.completion, job.result_text or "", analysis)
        return outcome.unwrap_or(TONE_FAILED)

    async def analyze_text(self, text: Any) -> AnalysisOutcome:
        """
        Keyword-based analysis for free text.

        Raises:
            InvalidInput: if `text` is missing, empty or not a string
        """
        if not isinstance(text, str) or not text:
            raise InvalidInput("Invalid request: missing text")

        analysis = infer_from_text(text)
        return AnalysisOutcome(
            True,
            TEXT_SUCCESS_MESSAGE,
            data={
                "sentiment": analysis.sentiment,
                "emotion": analysis.emotion,
                "confidence": analysis.confidence,
                "suggestions": analysis.suggestions,
                "riskLevel": analysis.risk_level,
            },
        )
