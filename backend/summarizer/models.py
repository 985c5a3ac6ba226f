"""Value objects passed between the summarisation stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of the chapter text with its 0-based position."""

    index: int
    text: str


@dataclass(frozen=True)
class PartialSummary:
    """The LLM summary of exactly one :class:`Chunk` (same ``index``)."""

    index: int
    text: str


@dataclass(frozen=True)
class SummaryRun:
    """Everything produced by one pipeline run, in chunk order."""

    chunks: tuple[Chunk, ...]
    partials: tuple[PartialSummary, ...]
    summary: str


@dataclass(frozen=True)
class ChapterDigest:
    """A summarised chapter together with its navigation links."""

    url: str
    paragraph_count: int
    summary: str
    prev_chapter_url: str | None = None
    next_chapter_url: str | None = None
    partials: tuple[PartialSummary, ...] = field(default_factory=tuple)
