"""Live transcript capture: caption observation and chunked audio."""

from src.meetscribe.capture.audio import AudioCaptureEngine
from src.meetscribe.capture.captions import CaptionCaptureEngine, CaptionFeed, CaptionSurface
from src.meetscribe.capture.errors import (
    CaptureError,
    CaptureSurfaceNotFoundError,
    MicrophoneUnavailableError,
    TranscriptFrozenError,
)
from src.meetscribe.capture.events import CaptureEvent, CaptureEventType
from src.meetscribe.capture.ledger import AudioSegment, SegmentLedger
from src.meetscribe.capture.recorder import MicrophoneRecorder
from src.meetscribe.capture.session import SessionState, TranscriptSession
from src.meetscribe.capture.transcription_client import TranscriptionClient

__all__ = [
    "AudioCaptureEngine",
    "AudioSegment",
    "CaptionCaptureEngine",
    "CaptionFeed",
    "CaptionSurface",
    "CaptureError",
    "CaptureEvent",
    "CaptureEventType",
    "CaptureSurfaceNotFoundError",
    "MicrophoneRecorder",
    "MicrophoneUnavailableError",
    "SegmentLedger",
    "SessionState",
    "TranscriptFrozenError",
    "TranscriptSession",
    "TranscriptionClient",
]
