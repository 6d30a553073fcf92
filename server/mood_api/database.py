"""Store factory and the service container owned by the application lifespan."""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from mood_analytics import InMemoryMoodStore, MoodAnalytics, MoodService, MoodStore, SqliteMoodStore
from voice_analysis import CompletionClient, PollPolicy, TranscriptionClient, VoiceAnalysisOrchestrator

from .config import Settings

log = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


def create_store(settings: Settings) -> MoodStore:
    """Open the configured mood store."""
    if settings.database_path == IN_MEMORY:
        log.info("[STORE] Using in-memory mood store")
        return InMemoryMoodStore()
    log.info(f"[STORE] Using SQLite mood store at {settings.database_path}")
    return SqliteMoodStore(settings.database_path)


@dataclass
class Services:
    """
    Everything a request handler needs, built once per application.

    Built in the application lifespan and exposed to handlers as
    `app.state.services`.
    """

    store: MoodStore
    moods: MoodService
    analytics: MoodAnalytics
    orchestrator: VoiceAnalysisOrchestrator
    completion: CompletionClient
    chat_model: str = "llama-3.3-70b-versatile"
    http_client: Optional[httpx.AsyncClient] = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
        self.store.close()


def build_services(settings: Settings) -> Services:
    store = create_store(settings)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.provider_timeout))

    transcription = TranscriptionClient(
        settings.assemblyai_api_key,
        base_url=settings.assemblyai_base_url,
        timeout=settings.provider_timeout,
        client=http_client,
    )
    completion = CompletionClient(
        settings.groq_api_key,
        base_url=settings.groq_base_url,
        model=settings.tone_model,
        timeout=settings.provider_timeout,
        client=http_client,
    )
    if not transcription.configured:
        log.warning("[STARTUP] ASSEMBLYAI_API_KEY not set; voice analysis will fail")
    if not completion.configured:
        log.warning("[STARTUP] GROQ_API_KEY not set; tone summaries and chat are disabled")

    orchestrator = VoiceAnalysisOrchestrator(
        transcription,
        completion,
        policy=PollPolicy(
            interval=settings.poll_interval_seconds,
            max_attempts=settings.poll_max_attempts,
        ),
    )

    return Services(
        store=store,
        moods=MoodService(store),
        analytics=MoodAnalytics(store),
        orchestrator=orchestrator,
        completion=completion,
        chat_model=settings.chat_model,
        http_client=http_client,
    )
