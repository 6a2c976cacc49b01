"""Transcription endpoint for recorded audio segments."""

from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from pydantic import BaseModel

from src.meetscribe.services.transcription import SegmentTranscriber, TranscriptionError

router = APIRouter(prefix="/api/v1", tags=["transcription"])


class TranscribeResponse(BaseModel):
    transcript: str


def _get_transcriber(request: Request) -> SegmentTranscriber:
    """Get SegmentTranscriber from app.state or raise 503."""
    transcriber = getattr(request.app.state, "segment_transcriber", None)
    if transcriber is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Transcription service not initialized",
        )
    return transcriber


@router.post("/transcribe", response_model=TranscribeResponse)
async def transcribe(
    request: Request,
    audio: UploadFile | None = File(None),
) -> TranscribeResponse:
    """Transcribe one multipart audio segment (field ``audio``)."""
    if audio is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No audio file uploaded",
        )

    transcriber = _get_transcriber(request)
    content = await audio.read()

    try:
        text = await transcriber.transcribe_upload(audio.filename, content)
    except TranscriptionError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return TranscribeResponse(transcript=text)
