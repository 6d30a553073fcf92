"""Mood Tracker API - FastAPI application entry point."""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .database import Services, build_services
from .routes import ai, chat, health, moods

log = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (environment-derived when omitted)
        services: Prebuilt service container; built from settings at
            startup when omitted
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.services = services or build_services(settings)
        app.state.started_at = time.monotonic()
        log.info(f"[STARTUP] Mood API ready ({settings.environment})")
        yield
        await app.state.services.aclose()
        log.info("[SHUTDOWN] Mood API stopped")

    app = FastAPI(
        title="Mood Tracker API",
        description="Voice and text emotion analysis with mood analytics",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(moods.router)
    app.include_router(ai.router)
    app.include_router(chat.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "server.mood_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.environment == "development",
    )
