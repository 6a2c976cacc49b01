"""Summary endpoint.

Accepts a finished transcript and runs the summary pipeline: summary
text, deadline extraction, calendar entries and the emailed PDF.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from src.meetscribe.config import get_settings
from src.meetscribe.summaries import (
    SummaryDepth,
    SummaryPipeline,
    SummaryPipelineError,
    SummaryRequest,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["summaries"])


# ── Request / Response Schemas ───────────────────────────────────────────────


class SummarizeBody(BaseModel):
    """Request body for POST /summarize.

    Fields are optional at the schema level so a missing transcript or
    recipient is answered with 400 by the pipeline rather than a 422.
    ``userEmail`` and ``accessToken`` are accepted for older clients.
    """

    model_config = ConfigDict(populate_by_name=True)

    transcript: str | None = None
    recipient: str | None = Field(
        None, validation_alias=AliasChoices("recipient", "userEmail")
    )
    delivery_credential: str | None = Field(
        None,
        validation_alias=AliasChoices("deliveryCredential", "accessToken", "delivery_credential"),
    )
    depth: SummaryDepth | None = None


class SummarizeResponse(BaseModel):
    message: str
    deadlines_added: int = Field(serialization_alias="deadlinesAdded")


# ── Helpers ──────────────────────────────────────────────────────────────────


def _get_pipeline(request: Request) -> SummaryPipeline:
    """Get SummaryPipeline from app.state or raise 503."""
    pipeline = getattr(request.app.state, "summary_pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Summary pipeline not initialized",
        )
    return pipeline


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.post("/summarize", response_model=SummarizeResponse)
async def summarize(body: SummarizeBody, request: Request) -> SummarizeResponse:
    """Summarize a transcript and deliver the result by email.

    The delivery credential comes from the body, else from an
    ``Authorization: Bearer`` header, else from the server's configured
    refresh token.
    """
    pipeline = _get_pipeline(request)
    settings = get_settings()

    summary_request = SummaryRequest(
        transcript=body.transcript or "",
        recipient=body.recipient or "",
        delivery_credential=body.delivery_credential or _bearer_token(request),
        depth=body.depth or SummaryDepth(settings.DEFAULT_SUMMARY_DEPTH),
    )

    try:
        result = await pipeline.run(
            summary_request,
            request_id=getattr(request.state, "request_id", None),
        )
    except SummaryPipelineError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return SummarizeResponse(message=result.message, deadlines_added=result.deadlines_added)
