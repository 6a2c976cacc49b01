"""Server-side transcription of uploaded audio segments.

The upload is staged under a unique name that keeps the original file
extension, since the speech-to-text model infers the container format
from it. The staged file is removed on every exit path.
"""

from __future__ import annotations

import asyncio
import os
import uuid

import structlog

from src.meetscribe.core.monitoring import record_segment
from src.meetscribe.services.llm import LLMService

logger = structlog.get_logger(__name__)

DEFAULT_EXTENSION = ".webm"


class TranscriptionError(Exception):
    """The speech-to-text service failed for an uploaded segment."""


class SegmentTranscriber:
    """Transcribes one uploaded audio segment via the LLM service.

    Args:
        llm_service: Service exposing ``transcribe(file)``.
        upload_dir: Directory uploads are staged in.
    """

    def __init__(self, llm_service: LLMService, upload_dir: str) -> None:
        self._llm = llm_service
        self._upload_dir = upload_dir

    def staging_path(self, filename: str | None) -> str:
        extension = os.path.splitext(filename or "")[1] or DEFAULT_EXTENSION
        return os.path.join(self._upload_dir, f"segment-{uuid.uuid4().hex}{extension.lower()}")

    async def transcribe_upload(self, filename: str | None, content: bytes) -> str:
        """Stage, transcribe and delete one upload.

        Raises:
            TranscriptionError: If staging or the speech-to-text call fails.
        """
        path = self.staging_path(filename)
        try:
            await asyncio.to_thread(_write_bytes, path, content)
            with open(path, "rb") as audio_file:
                text = await self._llm.transcribe(audio_file)
        except Exception as exc:
            logger.error("segment_transcription_failed", filename=filename, error=str(exc))
            record_segment("failed", len(content))
            raise TranscriptionError("Failed to transcribe audio") from exc
        finally:
            if os.path.exists(path):
                os.remove(path)

        record_segment("transcribed", len(content))
        logger.info("segment_transcribed", bytes=len(content), chars=len(text))
        return text


def _write_bytes(path: str, content: bytes) -> None:
    with open(path, "wb") as f:
        f.write(content)
