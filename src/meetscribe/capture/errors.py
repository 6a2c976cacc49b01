"""Capture-side error types."""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for capture engine errors."""


class CaptureSurfaceNotFoundError(CaptureError):
    """The caption surface could not be located; captions may be disabled."""


class MicrophoneUnavailableError(CaptureError):
    """The recording device could not be opened (permission denied or absent)."""


class TranscriptFrozenError(CaptureError):
    """An append was attempted while no capture session is active."""
