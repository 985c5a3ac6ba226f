"""Text chunker for the summarisation pipeline.

Strategy: fixed-size, non-overlapping character windows.  Boundaries ignore
words, sentences and paragraphs; the chunk prompt asks for facts rather than
prose continuity, so a chunk that starts or ends mid-sentence is fine.

The window size is counted in **characters** and only approximates the
provider's token budget.
"""

from __future__ import annotations

from backend.summarizer.models import Chunk

DEFAULT_CHUNK_SIZE = 6000


def chunk_text(text: str, max_size: int = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    """Split *text* into consecutive chunks of at most *max_size* characters.

    Args:
        text: The full chapter text.
        max_size: Window size in characters; every chunk but the last is
            exactly this long.

    Returns:
        Chunks indexed from 0.  Joining their ``text`` in order reproduces
        *text* exactly.  Returns ``[]`` for empty input.

    Raises:
        ValueError: If *max_size* is not positive.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    return [
        Chunk(index=i, text=text[start : start + max_size])
        for i, start in enumerate(range(0, len(text), max_size))
    ]
