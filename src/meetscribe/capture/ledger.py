"""SegmentLedger -- sequence-numbered completion queue for audio segments.

Segment transcriptions finish in any order. By default results are
released in completion order (no reordering buffer, lowest latency).
With ``ordered=True`` results are held until every earlier segment has
resolved and then flushed in sequence order.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioSegment:
    """One rotated recording and its position in the capture."""

    seq: int
    audio: bytes

    @property
    def size(self) -> int:
        return len(self.audio)


class SegmentLedger:
    def __init__(self, ordered: bool = False) -> None:
        self.ordered = ordered
        self._next_seq = 0
        self._pending: dict[int, str | None] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def resolve(self, seq: int, text: str | None) -> list[str]:
        """Record the outcome of segment ``seq``.

        Args:
            seq: Segment sequence number.
            text: Transcribed text, or None for a silent or failed segment.

        Returns:
            Texts now ready to append, in release order.
        """
        if not self.ordered:
            return [text] if text else []

        self._pending[seq] = text
        ready: list[str] = []
        while self._next_seq in self._pending:
            released = self._pending.pop(self._next_seq)
            if released:
                ready.append(released)
            self._next_seq += 1
        return ready
