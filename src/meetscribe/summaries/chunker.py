"""Character-window text splitter for multi-pass summarization."""

from __future__ import annotations


def chunk_text(text: str, size: int, overlap: int) -> list[str]:
    """Split ``text`` into overlapping windows of at most ``size`` characters.

    Consecutive chunks share exactly ``overlap`` characters; only the last
    chunk may be shorter than ``size``. Together the chunks cover the whole
    input with no gaps.

    Args:
        text: Text to split.
        size: Maximum characters per chunk.
        overlap: Characters repeated at the start of each following chunk.

    Returns:
        Ordered chunks; empty for empty input, at least one otherwise.

    Raises:
        ValueError: If ``size`` is not positive or ``overlap`` is not in
            ``[0, size)``.
    """
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    if overlap < 0 or overlap >= size:
        raise ValueError(f"overlap must be in [0, {size}), got {overlap}")

    if not text:
        return []

    step = size - overlap
    chunks: list[str] = []
    start = 0
    while True:
        chunks.append(text[start:start + size])
        if start + size >= len(text):
            break
        start += step
    return chunks
