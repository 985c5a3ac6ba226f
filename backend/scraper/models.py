"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RawPage:
    """The raw HTML for a single chapter fetch."""

    url: str
    html: str
    status_code: int


@dataclass(frozen=True)
class ChapterPage:
    """Paragraph text and sibling-chapter links extracted from a :class:`RawPage`."""

    url: str
    paragraphs: tuple[str, ...] = field(default_factory=tuple)
    prev_chapter_url: str | None = None
    next_chapter_url: str | None = None

    @property
    def full_text(self) -> str:
        """Paragraphs flattened to a single newline-separated string."""
        return "\n".join(self.paragraphs)
