"""API route modules."""
from .ai import router as ai_router
from .chat import router as chat_router
from .health import router as health_router
from .moods import router as moods_router

__all__ = [
    "ai_router",
    "chat_router",
    "health_router",
    "moods_router",
]
