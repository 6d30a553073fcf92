"""Chat companion API route."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from voice_analysis import ProviderAuthError, ProviderError

from ..database import Services
from ..dependencies import get_current_user, get_services
from ..models.chat import ChatRequest, ChatResponse

log = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])

CHAT_SYSTEM_PROMPT = (
    "You are Diya, a kind, emotionally intelligent mental wellness companion. "
    "Respond naturally and empathetically. Keep messages short, calm, and comforting."
)
CHAT_MAX_TOKENS = 300
CHAT_TEMPERATURE = 0.8

# Friendly replies for provider failures the user can do something about
MODEL_RETIRED_REPLY = (
    "Oops, I just learned my old brain model was retired! "
    "Please try again, I'm now using a newer version."
)
FALLBACK_REPLIES = {
    400: "Hmm, I had trouble processing that. Could you rephrase?",
    401: "My AI key isn't authorized. Please check the API key.",
    429: "I'm thinking a bit too hard. Let's try again soon.",
}


def fallback_reply(error: ProviderError) -> Optional[str]:
    """Canned reply for a provider failure, or None if it should surface as an error."""
    if "model_decommissioned" in str(error):
        return MODEL_RETIRED_REPLY
    return FALLBACK_REPLIES.get(error.status_code)


@router.post("", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    user_id: str = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Reply to the user as an empathetic wellness companion."""
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    if not services.completion.configured:
        log.error("[CHAT] GROQ_API_KEY is not configured")
        raise HTTPException(status_code=500, detail="Chat service misconfigured")

    try:
        reply = await services.completion.request_completion(
            f"User mood: {body.mood}. Message: {body.message}",
            CHAT_SYSTEM_PROMPT,
            model=services.chat_model,
            max_tokens=CHAT_MAX_TOKENS,
            temperature=CHAT_TEMPERATURE,
        )
    except ProviderError as e:
        log.error(f"[CHAT] Completion failed ({e.status_code}): {e}")
        canned = fallback_reply(e)
        if canned is not None:
            return ChatResponse(reply=canned)
        if isinstance(e, ProviderAuthError):
            raise HTTPException(status_code=500, detail="Chat service misconfigured")
        raise HTTPException(status_code=502, detail="AI service error")

    if not reply or not reply.strip():
        log.error("[CHAT] Empty completion")
        raise HTTPException(status_code=502, detail="AI service returned an empty reply")

    return ChatResponse(reply=reply.strip())
