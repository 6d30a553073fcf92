"""Liveness and readiness endpoints."""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(request: Request):
    """Health check endpoint for the API, including the mood store."""
    store_up = request.app.state.services.store.ping()
    body = {
        "status": "healthy" if store_up else "unhealthy",
        "service": "mood-api",
        "checks": {"database": "up" if store_up else "down"},
    }
    return JSONResponse(status_code=200 if store_up else 503, content=body)


@router.get("/ping")
async def ping(request: Request):
    """Simple ping endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "environment": request.app.state.settings.environment,
    }
