"""Error taxonomy for the voice analysis pipeline."""

from typing import Optional


class AnalysisError(Exception):
    """
    Base class for analysis failures.

    `user_message` is safe to show to a client; the exception's own
    message may carry provider detail meant for server logs only.
    """

    user_message = "Voice analysis failed. Please try again."

    def __init__(self, detail: Optional[str] = None, user_message: Optional[str] = None):
        super().__init__(detail or user_message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class InvalidInput(AnalysisError):
    """Missing or malformed request payload. Never retried."""

    def __init__(self, message: str):
        super().__init__(message, user_message=message)


class ProviderError(AnalysisError):
    """Failure talking to an external provider."""

    def __init__(
        self,
        detail: Optional[str] = None,
        *,
        provider: str = "provider",
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(detail, user_message=user_message)
        self.provider = provider
        self.status_code = status_code


class ProviderAuthError(ProviderError):
    """Credentials missing or rejected by the provider."""

    user_message = "The analysis service is misconfigured. Please contact support."


class ProviderUnavailable(ProviderError):
    """Provider returned 5xx/429, timed out, or could not be reached."""

    user_message = "The analysis service is temporarily unavailable. Please try again later."


class ProviderResponseError(ProviderError):
    """Provider rejected the request or returned a payload we cannot use."""

    user_message = "The analysis service returned an unexpected response."


class TranscriptionTimeout(AnalysisError):
    """Transcription did not reach a terminal state within the polling cap."""

    user_message = "Transcription timeout."


class TranscriptionFailed(AnalysisError):
    """Provider reported the transcription job as failed."""

    def __init__(self, provider_message: Optional[str] = None):
        message = provider_message or "Transcription failed at the provider."
        super().__init__(message, user_message=message)


class AnalysisCancelled(AnalysisError):
    """The owning request was aborted before the pipeline finished."""

    user_message = "Voice analysis was cancelled."
