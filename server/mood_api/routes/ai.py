"""Voice and text emotion analysis API routes."""
import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from mood_analytics import MoodService
from voice_analysis import CancellationToken, InvalidInput, VoiceAnalysisOrchestrator

from ..dependencies import get_current_user, get_mood_service, get_orchestrator
from ..models.analysis import AnalysisResponse, TextAnalyzeRequest

log = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["AI Analysis"])

DISCONNECT_CHECK_SECONDS = 1.0


def _invalid(e: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "message": e.user_message})


async def _watch_disconnect(request: Request, token: CancellationToken) -> None:
    """Cancel the token once the client has gone away."""
    while not token.cancelled:
        if await request.is_disconnected():
            log.info("[VOICE] Client disconnected; cancelling analysis")
            token.cancel("client disconnected")
            return
        await asyncio.sleep(DISCONNECT_CHECK_SECONDS)


@router.post("/voice/analyze", response_model=AnalysisResponse, response_model_exclude_none=True)
async def analyze_voice(
    request: Request,
    audio: Optional[UploadFile] = File(default=None),
    record: bool = Form(default=False),
    user_id: str = Depends(get_current_user),
    orchestrator: VoiceAnalysisOrchestrator = Depends(get_orchestrator),
    moods: MoodService = Depends(get_mood_service),
):
    """
    Transcribe an audio recording and infer emotion, sentiment and risk.

    With `record=true`, a successful analysis is also saved as a mood
    check-in for the caller.
    """
    data = await audio.read() if audio is not None else b""

    token = CancellationToken()
    watcher = asyncio.create_task(_watch_disconnect(request, token))
    try:
        outcome = await orchestrator.analyze_voice(data, token=token)
    except InvalidInput as e:
        return _invalid(e)
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    if outcome.success and record:
        try:
            saved = moods.record_voice_analysis(user_id, outcome.data)
        except ValidationError as e:
            log.warning(f"[VOICE] Could not record analysis for {user_id}: {e.error_count()} invalid field(s)")
        else:
            outcome.data["moodId"] = saved.id

    return outcome.to_dict()


@router.post("/text/analyze", response_model=AnalysisResponse, response_model_exclude_none=True)
async def analyze_text(
    body: TextAnalyzeRequest,
    user_id: str = Depends(get_current_user),
    orchestrator: VoiceAnalysisOrchestrator = Depends(get_orchestrator),
):
    """Keyword-based sentiment and emotion for free text."""
    try:
        outcome = await orchestrator.analyze_text(body.text)
    except InvalidInput as e:
        return _invalid(e)
    return outcome.to_dict()
