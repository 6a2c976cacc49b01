"""TranscriptSession -- the append-only buffer a capture engine fills.

Lifecycle is explicit: ``idle -> active -> idle``. ``begin()`` clears the
buffer and activates it, ``end()`` freezes it. The text stays readable
while idle but cannot change until the next ``begin()``.
"""

from __future__ import annotations

from enum import Enum

from src.meetscribe.capture.errors import TranscriptFrozenError


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class TranscriptSession:
    """Ordered, append-only transcript with a bounded look-back window.

    Args:
        dedup_window: Number of trailing characters searched by
            ``recently_contains``.
    """

    DEDUP_WINDOW = 100

    def __init__(self, dedup_window: int | None = None) -> None:
        self.dedup_window = dedup_window if dedup_window is not None else self.DEDUP_WINDOW
        self._text = ""
        self._state = SessionState.IDLE

    @property
    def text(self) -> str:
        return self._text

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == SessionState.ACTIVE

    def begin(self) -> None:
        """Clear the transcript and accept appends."""
        self._text = ""
        self._state = SessionState.ACTIVE

    def end(self) -> None:
        """Freeze the transcript until the next ``begin()``."""
        self._state = SessionState.IDLE

    def append(self, text: str) -> None:
        if not self.is_active:
            raise TranscriptFrozenError("transcript is frozen; call begin() first")
        self._text += text

    def recently_contains(self, fragment: str) -> bool:
        """True if ``fragment`` occurs in the last ``dedup_window`` characters.

        A bounded look-back: repeats older than the window are admitted
        again, and short phrases that legitimately recur inside it are
        suppressed.
        """
        if self.dedup_window <= 0:
            return False
        return fragment in self._text[-self.dedup_window:]
