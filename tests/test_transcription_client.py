"""Tests for the capture-side HTTP transcription client."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest
from tenacity import wait_none

from src.meetscribe.capture import TranscriptionClient


class TestTranscriptionClient:
    @pytest.mark.asyncio
    async def test_posts_multipart_audio(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"transcript": "hello"})

        client = TranscriptionClient("http://backend:8000/", transport=httpx.MockTransport(handler))

        text = await client.transcribe(b"RIFF....", filename="segment-4.wav")

        assert text == "hello"
        assert str(seen[0].url) == "http://backend:8000/api/v1/transcribe"
        body = seen[0].read()
        assert b'name="audio"' in body
        assert b'filename="segment-4.wav"' in body

    @pytest.mark.asyncio
    async def test_retries_connect_errors(self):
        attempts = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["n"] += 1
            if attempts["n"] < 3:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"transcript": "third time"})

        client = TranscriptionClient(transport=httpx.MockTransport(handler))

        with patch.object(TranscriptionClient.transcribe.retry, "wait", wait_none()):
            assert await client.transcribe(b"x") == "third time"
        assert attempts["n"] == 3

    @pytest.mark.asyncio
    async def test_server_error_raises_without_retry(self):
        attempts = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            attempts["n"] += 1
            return httpx.Response(500, json={"detail": "Failed to transcribe audio"})

        client = TranscriptionClient(transport=httpx.MockTransport(handler))

        with pytest.raises(httpx.HTTPStatusError):
            await client.transcribe(b"x")
        assert attempts["n"] == 1
