"""
Pytest fixtures for Mood Tracker tests.
"""
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Ensure src/ and the project root are importable without an install.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from mood_analytics import (  # noqa: E402
    InMemoryMoodStore,
    MoodAnalytics,
    MoodRecord,
    MoodService,
    SqliteMoodStore,
)
from voice_analysis import (  # noqa: E402
    CompletionClient,
    PollPolicy,
    TranscriptionClient,
    TranscriptionJob,
    VoiceAnalysisOrchestrator,
)

# Load environment variables
load_dotenv()

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return NOW


# ============================================================================
# Mood record fixtures
# ============================================================================


def make_record(
    emotion: str = "happy",
    intensity: int = 5,
    *,
    user_id: str = "user-1",
    at: datetime = NOW,
    sentiment: str = None,
    **fields,
) -> MoodRecord:
    """Build a MoodRecord; `sentiment` adds a minimal AI analysis."""
    if sentiment is not None:
        fields["ai_analysis"] = {
            "detectedEmotion": emotion,
            "confidence": 0.8,
            "sentiment": sentiment,
            "riskLevel": "low",
        }
    return MoodRecord(
        user_id=user_id,
        emotion=emotion,
        intensity=intensity,
        timestamp=at,
        created_at=at,
        updated_at=at,
        **fields,
    )


@pytest.fixture
def memory_store():
    store = InMemoryMoodStore()
    yield store
    store.close()


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteMoodStore(str(tmp_path / "moods.db"))
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Parametrized fixture running a test against every store backend."""
    if request.param == "memory":
        backend = InMemoryMoodStore()
    else:
        backend = SqliteMoodStore(str(tmp_path / "moods.db"))
    yield backend
    backend.close()


# ============================================================================
# Voice pipeline fixtures
# ============================================================================


class InstantWaiter:
    """Waiter that returns immediately and records each requested wait."""

    def __init__(self, on_wait=None):
        self.waits = []
        self.on_wait = on_wait

    async def wait(self, seconds, token):
        self.waits.append(seconds)
        if self.on_wait is not None:
            self.on_wait(len(self.waits), token)
        token.raise_if_cancelled()


def job_snapshot(
    status: str = "completed",
    *,
    text: str = "I had a lovely day at the beach",
    sentiment: str = "POSITIVE",
    confidence=0.9,
    highlights=("lovely day", "beach"),
    error: str = None,
) -> TranscriptionJob:
    """A TranscriptionJob parsed from a provider-shaped payload."""
    payload = {"id": "job-1", "status": status}
    if status == "completed":
        payload["text"] = text
        payload["sentiment_analysis_results"] = (
            [{"text": text, "sentiment": sentiment, "confidence": confidence}] if sentiment else []
        )
        payload["auto_highlights_result"] = {
            "status": "success",
            "results": [{"text": h, "count": 1, "rank": 0.1} for h in highlights],
        }
    if error is not None:
        payload["error"] = error
    return TranscriptionJob.model_validate(payload)


@pytest.fixture
def transcription():
    """TranscriptionClient double that completes on the second poll."""
    client = MagicMock(spec=TranscriptionClient)
    client.configured = True
    client.upload_audio = AsyncMock(return_value="https://cdn.example/upload/abc")
    client.create_transcription_job = AsyncMock(return_value="job-1")
    client.poll_transcription_job = AsyncMock(
        side_effect=[job_snapshot("processing"), job_snapshot("completed")]
    )
    return client


@pytest.fixture
def completion():
    """CompletionClient double returning a fixed tone summary."""
    client = MagicMock(spec=CompletionClient)
    client.configured = True
    client.request_completion = AsyncMock(return_value="  Warm and upbeat.  ")
    return client


@pytest.fixture
def waiter():
    return InstantWaiter()


@pytest.fixture
def orchestrator(transcription, completion, waiter):
    return VoiceAnalysisOrchestrator(
        transcription,
        completion,
        policy=PollPolicy(interval=3.0, max_attempts=40),
        waiter=waiter,
    )


# ============================================================================
# API fixtures
# ============================================================================


@pytest.fixture
def services(orchestrator, completion):
    from server.mood_api.database import Services

    store = InMemoryMoodStore()
    return Services(
        store=store,
        moods=MoodService(store, clock=fixed_clock),
        analytics=MoodAnalytics(store, clock=fixed_clock),
        orchestrator=orchestrator,
        completion=completion,
        chat_model="llama-3.3-70b-versatile",
    )


@pytest.fixture
def client(services):
    """TestClient over an app wired to in-memory services and provider doubles."""
    from fastapi.testclient import TestClient
    from server.mood_api.config import Settings
    from server.mood_api.main import create_app

    settings = Settings(database_path=":memory:", environment="test")
    app = create_app(settings, services=services)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"X-User-Id": "user-1"}


def days_ago(days: float, base: datetime = NOW) -> datetime:
    return base - timedelta(days=days)
