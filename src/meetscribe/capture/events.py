"""Events emitted by capture engines to the surrounding UI layer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class CaptureEventType(str, Enum):
    NEW_TEXT = "new_text"
    ERROR = "error"


@dataclass(frozen=True)
class CaptureEvent:
    """``{type, payload}`` message; payload is appended text or an error message."""

    type: CaptureEventType
    payload: str

    def to_dict(self) -> dict:
        return {"type": self.type.value, "payload": self.payload}


CaptureListener = Callable[[CaptureEvent], None]
