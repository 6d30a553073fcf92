"""Mood record and mood analytics API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from mood_analytics import (
    Emotion,
    MoodAnalytics,
    MoodCreate,
    MoodNotFound,
    MoodRecord,
    MoodService,
    MoodStats,
    MoodTrend,
    MoodUpdate,
)
from mood_analytics.aggregation import DEFAULT_LOOKBACK_DAYS
from mood_analytics.service import RECENT_LIMIT

from ..dependencies import get_analytics, get_current_user, get_mood_service

log = logging.getLogger(__name__)

router = APIRouter(prefix="/moods", tags=["Moods"])


def _not_found(e: MoodNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


# ============================================================================
# Analytics (declared before /{mood_id} so the paths are not shadowed)
# ============================================================================


@router.get("/stats", response_model=MoodStats)
async def get_mood_stats(
    days: int = Query(default=DEFAULT_LOOKBACK_DAYS, ge=1, le=365, description="Lookback window in days"),
    user_id: str = Depends(get_current_user),
    analytics: MoodAnalytics = Depends(get_analytics),
):
    """Frequency, sentiment distribution, average intensity and stability."""
    return analytics.get_stats(user_id, days)


@router.get("/trends", response_model=list[MoodTrend])
async def get_mood_trends(
    days: int = Query(default=DEFAULT_LOOKBACK_DAYS, ge=1, le=365, description="Lookback window in days"),
    user_id: str = Depends(get_current_user),
    analytics: MoodAnalytics = Depends(get_analytics),
):
    """Per-day (UTC) average intensity and dominant emotion."""
    return analytics.get_trends(user_id, days)


# ============================================================================
# Records
# ============================================================================


@router.post("", response_model=MoodRecord, status_code=201)
async def create_mood(
    payload: MoodCreate,
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    return moods.create(user_id, payload)


@router.get("", response_model=list[MoodRecord])
async def list_moods(
    emotion: Optional[Emotion] = Query(default=None),
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    """All of the caller's moods, newest first."""
    return moods.find_all(user_id, emotion=emotion.value if emotion else None, limit=limit)


@router.get("/recent", response_model=list[MoodRecord])
async def recent_moods(
    limit: int = Query(default=RECENT_LIMIT, ge=1, le=RECENT_LIMIT),
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    return moods.recent(user_id, limit)


@router.get("/{mood_id}", response_model=MoodRecord)
async def get_mood(
    mood_id: str,
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    try:
        return moods.get(user_id, mood_id)
    except MoodNotFound as e:
        raise _not_found(e)


@router.patch("/{mood_id}", response_model=MoodRecord)
async def update_mood(
    mood_id: str,
    patch: MoodUpdate,
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    try:
        return moods.update(user_id, mood_id, patch)
    except MoodNotFound as e:
        raise _not_found(e)
    except ValidationError as e:
        # e.g. an explicit null for a required field
        log.info(f"[MOODS] Rejected update of {mood_id}: {e.error_count()} error(s)")
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False, include_input=False))


@router.delete("/{mood_id}", response_model=MoodRecord)
async def delete_mood(
    mood_id: str,
    user_id: str = Depends(get_current_user),
    moods: MoodService = Depends(get_mood_service),
):
    try:
        return moods.delete(user_id, mood_id)
    except MoodNotFound as e:
        raise _not_found(e)
