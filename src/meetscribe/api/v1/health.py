"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready). Readiness
reports whether the pipeline services were built and which providers
have credentials configured.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.meetscribe.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No external dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: 200 when the pipeline is wired, 503 otherwise."""
    settings = get_settings()
    checks = {
        "summary_pipeline": "ok" if getattr(request.app.state, "summary_pipeline", None) else "missing",
        "segment_transcriber": "ok" if getattr(request.app.state, "segment_transcriber", None) else "missing",
        "litellm": "ok" if (settings.OPENAI_API_KEY or settings.ANTHROPIC_API_KEY) else "no_keys",
        "gmail_fallback": "ok" if settings.GMAIL_REFRESH_TOKEN else "not_configured",
    }
    ready = checks["summary_pipeline"] == "ok" and checks["segment_transcriber"] == "ok"

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
