"""Request-scoped dependencies: caller identity and lifespan-owned services."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from mood_analytics import MoodAnalytics, MoodService
from voice_analysis import VoiceAnalysisOrchestrator

from .database import Services


async def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Resolve the calling user.

    Authentication happens upstream; the gateway forwards the verified
    user id in the X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_mood_service(services: Services = Depends(get_services)) -> MoodService:
    return services.moods


def get_analytics(services: Services = Depends(get_services)) -> MoodAnalytics:
    return services.analytics


def get_orchestrator(services: Services = Depends(get_services)) -> VoiceAnalysisOrchestrator:
    return services.orchestrator
