"""Chunked audio capture engine.

Records the microphone continuously and rotates to a new segment every
``SEGMENT_SECONDS``. Each segment above ``MIN_SEGMENT_BYTES`` is sent to
the speech-to-text service in its own task; smaller segments are treated
as silence and never leave the process. Returned text is appended to the
session through a SegmentLedger, in completion order unless strict
ordering is requested.

Everything runs on one asyncio event loop, so transcript mutation needs
no locking.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Protocol

import structlog

from src.meetscribe.capture.errors import MicrophoneUnavailableError
from src.meetscribe.capture.events import CaptureEvent, CaptureEventType, CaptureListener
from src.meetscribe.capture.ledger import AudioSegment, SegmentLedger
from src.meetscribe.capture.session import TranscriptSession

logger = structlog.get_logger(__name__)


class SegmentRecorder(Protocol):
    def start(self) -> None: ...

    def rotate(self) -> bytes: ...

    def stop(self) -> bytes: ...


class SegmentTranscriptionClient(Protocol):
    async def transcribe(self, audio: bytes, filename: str = ..., content_type: str = ...) -> str: ...


class AudioCaptureEngine:
    """Fills a TranscriptSession from rotating microphone segments.

    Args:
        session: Transcript the engine owns while active.
        recorder: MicrophoneRecorder (or compatible).
        transcriber: TranscriptionClient (or compatible).
        listener: Receives ``new_text`` and ``error`` events.
        ordered: Append in segment order instead of completion order.
        segment_seconds: Rotation period.
        min_segment_bytes: Segments below this size are silence.
        stop_timeout: Seconds ``stop()`` waits for in-flight segments.
    """

    SEGMENT_SECONDS = 15.0
    MIN_SEGMENT_BYTES = 1000
    STOP_TIMEOUT = 30.0
    SEPARATOR = " "

    def __init__(
        self,
        session: TranscriptSession,
        recorder: SegmentRecorder,
        transcriber: SegmentTranscriptionClient,
        listener: CaptureListener | None = None,
        ordered: bool = False,
        segment_seconds: float | None = None,
        min_segment_bytes: int | None = None,
        stop_timeout: float | None = None,
    ) -> None:
        self._session = session
        self._recorder = recorder
        self._transcriber = transcriber
        self._listener = listener
        self._ordered = ordered
        self.segment_seconds = segment_seconds or self.SEGMENT_SECONDS
        self.min_segment_bytes = (
            min_segment_bytes if min_segment_bytes is not None else self.MIN_SEGMENT_BYTES
        )
        self.stop_timeout = stop_timeout or self.STOP_TIMEOUT

        self._ledger = SegmentLedger(ordered=ordered)
        self._next_seq = 0
        self._generation = 0
        self._rotation_task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def is_active(self) -> bool:
        return self._rotation_task is not None

    async def start(self) -> None:
        """Clear the transcript and start recording.

        A previously active capture is stopped first.

        Raises:
            MicrophoneUnavailableError: If the recording device cannot be
                opened. An ``error`` event is emitted and capture stays
                inactive.
        """
        if self.is_active:
            await self.stop()

        self._session.begin()
        self._generation += 1
        self._ledger = SegmentLedger(ordered=self._ordered)
        self._next_seq = 0

        try:
            self._recorder.start()
        except MicrophoneUnavailableError as exc:
            self._session.end()
            self._emit(CaptureEventType.ERROR, str(exc))
            raise

        self._rotation_task = asyncio.create_task(self._rotate_forever())
        logger.info("audio_capture_started", segment_seconds=self.segment_seconds)

    async def stop(self) -> None:
        """Stop recording, flush the last segment and freeze the transcript.

        Waits up to ``stop_timeout`` seconds for in-flight transcriptions;
        anything completing later is dropped.
        """
        task, self._rotation_task = self._rotation_task, None
        if task is None:
            return
        task.cancel()
        try:
            with contextlib.suppress(asyncio.CancelledError):
                await task

            try:
                self._dispatch(self._recorder.stop())
            except Exception as exc:
                logger.error("audio_recorder_stop_failed", error=str(exc))
                self._emit(CaptureEventType.ERROR, f"Recording could not be finalised: {exc}")

            if self._inflight:
                _, pending = await asyncio.wait(set(self._inflight), timeout=self.stop_timeout)
                if pending:
                    logger.warning("audio_capture_stop_timeout", pending=len(pending))
        finally:
            self._session.end()
        logger.info("audio_capture_stopped", chars=len(self._session.text))

    async def _rotate_forever(self) -> None:
        while True:
            await asyncio.sleep(self.segment_seconds)
            try:
                self._dispatch(self._recorder.rotate())
            except Exception as exc:
                logger.error("audio_rotation_failed", seq=self._next_seq, error=str(exc))
                self._emit(CaptureEventType.ERROR, f"Recording segment {self._next_seq} was lost: {exc}")

    def _dispatch(self, audio: bytes) -> None:
        segment = AudioSegment(seq=self._next_seq, audio=audio)
        self._next_seq += 1

        if segment.size < self.min_segment_bytes:
            logger.debug("audio_segment_silent", seq=segment.seq, bytes=segment.size)
            self._append(self._ledger.resolve(segment.seq, None))
            return

        task = asyncio.create_task(self._transcribe(segment, self._generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _transcribe(self, segment: AudioSegment, generation: int) -> None:
        try:
            text = await self._transcriber.transcribe(
                segment.audio,
                filename=f"segment-{segment.seq}.wav",
                content_type="audio/wav",
            )
        except Exception as exc:
            if generation != self._generation:
                return
            logger.warning("audio_segment_failed", seq=segment.seq, error=str(exc))
            self._emit(CaptureEventType.ERROR, f"Transcription failed for segment {segment.seq}: {exc}")
            self._append(self._ledger.resolve(segment.seq, None))
            return

        # Segment from a previous capture that outlived stop()
        if generation != self._generation:
            return
        self._append(self._ledger.resolve(segment.seq, (text or "").strip() or None))

    def _append(self, texts: list[str]) -> None:
        for text in texts:
            if not self._session.is_active:
                logger.info("audio_segment_dropped_after_stop", chars=len(text))
                continue
            self._session.append(self.SEPARATOR + text)
            self._emit(CaptureEventType.NEW_TEXT, text)

    def _emit(self, event_type: CaptureEventType, payload: str) -> None:
        if self._listener is not None:
            self._listener(CaptureEvent(type=event_type, payload=payload))
