"""Async HTTP client for the backend transcription endpoint.

Retries transient transport failures with tenacity (3 attempts,
exponential backoff 1-10s).
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = structlog.get_logger(__name__)

_transcribe_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


class TranscriptionClient:
    """Posts audio segments to ``POST /api/v1/transcribe``.

    Args:
        base_url: Backend base URL.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass a MockTransport).
    """

    TIMEOUT = 60.0

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}/api/v1/transcribe"
        self._timeout = timeout or self.TIMEOUT
        self._transport = transport

    @_transcribe_retry
    async def transcribe(
        self,
        audio: bytes,
        filename: str = "segment.wav",
        content_type: str = "audio/wav",
    ) -> str:
        """Transcribe one segment.

        Returns:
            The ``transcript`` field of the response.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx answer.
        """
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(
                self._url,
                files={"audio": (filename, audio, content_type)},
            )
            response.raise_for_status()
            data = response.json()
        logger.debug("segment_transcribed", filename=filename, bytes=len(audio))
        return data.get("transcript", "")
