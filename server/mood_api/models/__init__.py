"""Pydantic models for API requests and responses."""
from .analysis import AnalysisResponse, TextAnalyzeRequest
from .chat import ChatRequest, ChatResponse

__all__ = [
    "AnalysisResponse",
    "TextAnalyzeRequest",
    "ChatRequest",
    "ChatResponse",
]
