"""Content extraction: turns a :class:`RawPage` into a :class:`ChapterPage`."""

from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup

from backend.config import settings
from backend.errors import ExtractionError
from backend.scraper.models import ChapterPage, RawPage


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def has_chapter_content(html: str) -> bool:
    """Return ``True`` if *html* already contains the chapter content container.

    Used by the fetcher to decide whether a plain HTTP response is enough or
    the page must be rendered in a browser first.
    """
    soup = BeautifulSoup(html, "html.parser")
    return soup.select_one(settings.content_selector) is not None


def _extract_paragraphs(soup: BeautifulSoup) -> list[str]:
    """Return the trimmed, non-empty text of every ``<p>`` in the content container."""
    paragraphs: list[str] = []
    for p in soup.select(f"{settings.content_selector} p"):
        # <br> is a line break inside the paragraph, not a word joiner.
        for br in p.find_all("br"):
            br.replace_with("\n")
        text = p.get_text().strip()
        if text:
            paragraphs.append(text)
    return paragraphs


def _extract_chapter_links(soup: BeautifulSoup, base_url: str) -> tuple[str | None, str | None]:
    """Return absolute ``(prev, next)`` chapter URLs from the navigation anchors.

    Anchors are matched by ``id`` within ``settings.nav_link_selector``; a
    missing anchor or an empty ``href`` yields ``None``.
    """
    prev_url: str | None = None
    next_url: str | None = None
    for link in soup.select(settings.nav_link_selector):
        href = (link.get("href") or "").strip()
        if not href:
            continue
        if link.get("id") == settings.prev_link_id:
            prev_url = urljoin(base_url, href)
        elif link.get("id") == settings.next_link_id:
            next_url = urljoin(base_url, href)
    return prev_url, next_url


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_chapter(raw: RawPage) -> ChapterPage:
    """Extract paragraph text and chapter navigation links from *raw*.

    Raises:
        ExtractionError: If the page has no element matching
            ``settings.content_selector``.
    """
    soup = BeautifulSoup(raw.html, "html.parser")
    if soup.select_one(settings.content_selector) is None:
        raise ExtractionError(
            f"No element matching {settings.content_selector!r} found at {raw.url}"
        )

    paragraphs = _extract_paragraphs(soup)
    prev_url, next_url = _extract_chapter_links(soup, raw.url)

    return ChapterPage(
        url=raw.url,
        paragraphs=tuple(paragraphs),
        prev_chapter_url=prev_url,
        next_chapter_url=next_url,
    )
