"""Caption capture engine.

Observes a live caption surface and appends every new, non-duplicate
caption line to the session transcript. Duplicate suppression is a
bounded look-back over the transcript tail (see
``TranscriptSession.recently_contains``).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

import structlog

from src.meetscribe.capture.errors import CaptureSurfaceNotFoundError
from src.meetscribe.capture.events import CaptureEvent, CaptureEventType, CaptureListener
from src.meetscribe.capture.session import TranscriptSession

logger = structlog.get_logger(__name__)

CAPTION_SURFACE_MISSING = "Caption container not found. Are captions enabled?"


class CaptionSurface(Protocol):
    """A text-bearing surface whose nodes are appended or mutated over time."""

    def current_texts(self) -> list[str]:
        """Text of the nodes already present."""
        ...

    def observe(self, callback: Callable[[str], None]) -> None:
        """Call ``callback`` with the text of every added or mutated node."""
        ...

    def disconnect(self) -> None:
        """Stop delivering callbacks."""
        ...


CaptionLocator = Callable[[], "CaptionSurface | None"]


class CaptionFeed:
    """In-process caption surface that a browser bridge pushes nodes into."""

    def __init__(self, initial: list[str] | None = None) -> None:
        self._nodes: list[str] = list(initial or [])
        self._callback: Callable[[str], None] | None = None

    @property
    def is_observed(self) -> bool:
        return self._callback is not None

    def current_texts(self) -> list[str]:
        return list(self._nodes)

    def observe(self, callback: Callable[[str], None]) -> None:
        self._callback = callback

    def disconnect(self) -> None:
        self._callback = None

    def push(self, text: str) -> None:
        """Record a new or mutated node and notify the observer, if any."""
        self._nodes.append(text)
        if self._callback is not None:
            self._callback(text)


class CaptionCaptureEngine:
    """Fills a TranscriptSession from a caption surface.

    Args:
        session: Transcript the engine owns while active.
        locator: Returns the caption surface, or None if it is not present.
        listener: Receives ``new_text`` and ``error`` events.
    """

    SEPARATOR = " "

    def __init__(
        self,
        session: TranscriptSession,
        locator: CaptionLocator,
        listener: CaptureListener | None = None,
    ) -> None:
        self._session = session
        self._locator = locator
        self._listener = listener
        self._surface: CaptionSurface | None = None

    @property
    def is_active(self) -> bool:
        return self._surface is not None

    def start(self) -> bool:
        """Clear the transcript and begin observing.

        Safe to call while already active: the previous observation is
        disconnected first.

        Returns:
            False if the caption surface could not be located. An ``error``
            event is emitted and the engine stays idle.
        """
        self._disconnect()
        self._session.begin()

        surface = self._locator()
        if surface is None:
            self._session.end()
            exc = CaptureSurfaceNotFoundError(CAPTION_SURFACE_MISSING)
            logger.warning("caption_surface_not_found")
            self._emit(CaptureEventType.ERROR, str(exc))
            return False

        self._surface = surface
        for text in surface.current_texts():
            self._on_caption(text)
        surface.observe(self._on_caption)
        logger.info("caption_capture_started")
        return True

    def stop(self) -> None:
        """Stop observing; the transcript is kept and frozen."""
        self._disconnect()
        self._session.end()
        logger.info("caption_capture_stopped", chars=len(self._session.text))

    def _disconnect(self) -> None:
        if self._surface is not None:
            self._surface.disconnect()
            self._surface = None

    def _on_caption(self, raw: str) -> None:
        if not self._session.is_active:
            return
        text = (raw or "").strip()
        if not text or self._session.recently_contains(text):
            return
        self._session.append(text + self.SEPARATOR)
        self._emit(CaptureEventType.NEW_TEXT, text)

    def _emit(self, event_type: CaptureEventType, payload: str) -> None:
        if self._listener is not None:
            self._listener(CaptureEvent(type=event_type, payload=payload))
