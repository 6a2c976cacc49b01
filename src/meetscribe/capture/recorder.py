"""Microphone recorder with rotating WAV segments.

Audio arrives on a PortAudio callback thread and is buffered as int16
PCM under a lock; ``rotate()`` hands the buffered audio over as one WAV
file and starts a fresh buffer without stopping the stream.
"""

from __future__ import annotations

import io
import threading
import wave
from typing import Any

import numpy as np
import structlog

from src.meetscribe.capture.errors import MicrophoneUnavailableError

logger = structlog.get_logger(__name__)


class MicrophoneRecorder:
    """Records the default (or named) input device via sounddevice.

    Args:
        samplerate: Sample rate in Hz.
        channels: Number of input channels.
        device: sounddevice device index or name; None for the default.
    """

    SAMPLE_WIDTH = 2  # int16

    def __init__(
        self,
        samplerate: int = 16_000,
        channels: int = 1,
        device: int | str | None = None,
    ) -> None:
        self.samplerate = samplerate
        self.channels = channels
        self.device = device
        self._stream: Any = None
        self._frames: list[np.ndarray] = []
        self._lock = threading.Lock()

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def start(self) -> None:
        """Open the input stream.

        Raises:
            MicrophoneUnavailableError: If PortAudio is missing or the
                device cannot be opened.
        """
        if self._stream is not None:
            return
        try:
            import sounddevice as sd

            stream = sd.InputStream(
                samplerate=self.samplerate,
                channels=self.channels,
                dtype="int16",
                device=self.device,
                callback=self._on_audio,
            )
            stream.start()
        except Exception as exc:
            logger.error("microphone_open_failed", device=self.device, error=str(exc))
            raise MicrophoneUnavailableError(f"Could not open microphone: {exc}") from exc

        with self._lock:
            self._frames = []
        self._stream = stream
        logger.info("microphone_started", samplerate=self.samplerate, channels=self.channels)

    def _on_audio(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug("microphone_status", status=str(status))
        with self._lock:
            self._frames.append(indata.copy())

    def rotate(self) -> bytes:
        """Return buffered audio as WAV bytes and start a new buffer."""
        with self._lock:
            frames, self._frames = self._frames, []
        return self._to_wav(frames)

    def stop(self) -> bytes:
        """Close the stream and return the final partial segment."""
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.stop()
            stream.close()
            logger.info("microphone_stopped")
        return self.rotate()

    def _to_wav(self, frames: list[np.ndarray]) -> bytes:
        if not frames:
            return b""
        pcm = np.concatenate(frames).astype(np.int16, copy=False)
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(self.channels)
            wav.setsampwidth(self.SAMPLE_WIDTH)
            wav.setframerate(self.samplerate)
            wav.writeframes(pcm.tobytes())
        return buffer.getvalue()
