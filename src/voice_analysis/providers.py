"""
Provider Clients.

Thin async HTTP clients for the two external services the pipeline uses:

- TranscriptionClient: AssemblyAI-style upload / transcript / poll API
- CompletionClient: Groq (OpenAI-compatible) chat completions

Responses are validated into pydantic models here; untyped provider JSON
never leaves this module. Clients never retry; retry and polling policy
belong to the orchestrator.
"""

import logging
from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ProviderAuthError, ProviderResponseError, ProviderUnavailable

logger = logging.getLogger(__name__)

ASSEMBLYAI_BASE_URL = "https://api.assemblyai.com/v2"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_COMPLETION_MODEL = "llama-3.1-8b-instant"

# Feature selection for every transcription job. Not configurable per request.
TRANSCRIPTION_FEATURES: Dict[str, bool] = {
    "language_detection": True,
    "auto_highlights": True,
    "entity_detection": True,
    "iab_categories": False,
    "speaker_labels": False,
    "sentiment_analysis": True,
}

JobStatus = Literal["queued", "processing", "completed", "error"]
TERMINAL_STATUSES = frozenset({"completed", "error"})

ModelT = TypeVar("ModelT", bound=BaseModel)


# ============================================================================
# Provider response models
# ============================================================================


class UploadResponse(BaseModel):
    upload_url: str = Field(min_length=1)


class TranscriptCreated(BaseModel):
    id: str = Field(min_length=1)


class SentimentSegment(BaseModel):
    """One sentence-level sentiment annotation from the transcription."""

    text: str = ""
    sentiment: Literal["positive", "negative", "neutral"]
    confidence: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


class TranscriptionJob(BaseModel):
    """Snapshot of an in-flight transcription job. Never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="id")
    status: JobStatus
    result_text: Optional[str] = Field(default=None, alias="text")
    sentiment_segments: List[SentimentSegment] = Field(
        default_factory=list, alias="sentiment_analysis_results"
    )
    highlights: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _collect_highlights(cls, data: Any) -> Any:
        # Highlights arrive under auto_highlights_result, or under
        # auto_highlights when the provider nests them there
        if not isinstance(data, dict) or "highlights" in data:
            return data
        data = dict(data)
        block = data.get("auto_highlights_result")
        if not isinstance(block, dict):
            block = data.get("auto_highlights")
        results = block.get("results") if isinstance(block, dict) else None
        data["highlights"] = [
            item["text"] for item in (results or [])
            if isinstance(item, dict) and item.get("text")
        ]
        if "sentiment_analysis_results" in data and data["sentiment_analysis_results"] is None:
            data["sentiment_analysis_results"] = []
        return data

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class _CompletionMessage(BaseModel):
    content: Optional[str] = None


class _CompletionChoice(BaseModel):
    message: _CompletionMessage


class ChatCompletion(BaseModel):
    choices: List[_CompletionChoice] = Field(default_factory=list)

    @property
    def text(self) -> Optional[str]:
        if not self.choices:
            return None
        return self.choices[0].message.content


# ============================================================================
# HTTP plumbing
# ============================================================================


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of a provider's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or f"HTTP {response.status_code}"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message") or str(error)
        return f"{code}: {message}" if code else message
    if error:
        return str(error)
    return f"HTTP {response.status_code}"


class ProviderClient:
    """
    Shared request handling for provider clients.

    Args:
        api_key: Provider credential; requests fail fast when missing
        base_url: API root
        timeout: Per-request timeout in seconds
        client: Optional shared httpx.AsyncClient (a fresh one is used
            per call when omitted)
    """

    name = "provider"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _auth_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.api_key:
            raise ProviderAuthError(f"{self.name} API key not configured", provider=self.name)

        url = f"{self.base_url}{path}"
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}

        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderUnavailable(
                f"{self.name} request timed out: {method} {path}", provider=self.name
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnavailable(
                f"{self.name} request failed: {e}", provider=self.name
            ) from e

        self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if status < 400:
            return

        detail = _error_detail(response)
        logger.warning(f"[PROVIDER] {self.name} returned {status}: {detail}")

        if status in (401, 403):
            raise ProviderAuthError(detail, provider=self.name, status_code=status)
        if status == 429 or status >= 500:
            raise ProviderUnavailable(detail, provider=self.name, status_code=status)
        raise ProviderResponseError(detail, provider=self.name, status_code=status)

    def _parse(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderResponseError(
                f"{self.name} returned a non-JSON body", provider=self.name
            ) from e
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ProviderResponseError(
                f"{self.name} returned an invalid {model.__name__}: {e.error_count()} error(s)",
                provider=self.name,
            ) from e


# ============================================================================
# Clients
# ============================================================================


class TranscriptionClient(ProviderClient):
    """AssemblyAI transcription with sentiment analysis and highlights."""

    name = "assemblyai"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = ASSEMBLYAI_BASE_URL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, timeout, client)

    def _auth_headers(self) -> Dict[str, str]:
        # AssemblyAI expects the raw key, no "Bearer" prefix
        return {"Authorization": self.api_key or ""}

    async def upload_audio(self, data: bytes) -> str:
        """Upload raw audio bytes. Returns the provider-hosted upload URL."""
        response = await self._send(
            "POST",
            "/upload",
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return self._parse(response, UploadResponse).upload_url

    async def create_transcription_job(self, upload_url: str) -> str:
        """Create a transcription job for uploaded audio. Returns the job id."""
        body = {"audio_url": upload_url, **TRANSCRIPTION_FEATURES}
        response = await self._send("POST", "/transcript", json=body)
        return self._parse(response, TranscriptCreated).id

    async def poll_transcription_job(self, job_id: str) -> TranscriptionJob:
        """Fetch the current snapshot of a transcription job."""
        response = await self._send("GET", f"/transcript/{job_id}")
        return self._parse(response, TranscriptionJob)


class CompletionClient(ProviderClient):
    """Single-shot chat completions against Groq's OpenAI-compatible API."""

    name = "groq"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = GROQ_BASE_URL,
        model: str = DEFAULT_COMPLETION_MODEL,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(api_key, base_url, timeout, client)
        self.model = model

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        model: Optional[str] = None,
        max_tokens: int = 200,
        temperature: float = 0.7,
    ) -> Optional[str]:
        """Send a chat completion request and return the first choice's text."""
        body = {
            "model": model or self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        response = await self._send("POST", "/chat/completions", json=body)
        return self._parse(response, ChatCompletion).text

    async def request_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **options,
    ) -> Optional[str]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return await self.chat(messages, **options)
