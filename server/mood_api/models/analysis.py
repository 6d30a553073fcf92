"""Voice and text analysis request/response models."""
from typing import Any, Optional

from pydantic import BaseModel


class TextAnalyzeRequest(BaseModel):
    """Body of a text analysis request. Type checking happens in the pipeline."""

    text: Any = None


class AnalysisResponse(BaseModel):
    """Uniform analysis envelope: success flag, message and optional payload."""

    success: bool
    message: str
    data: Optional[dict[str, Any]] = None
