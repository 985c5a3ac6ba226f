"""Chapter summarisation — URL variant.

``summarize_chapter`` orchestrates the whole request from a chapter URL to a
:class:`ChapterDigest`:

    validate URL → fetch → extract → join paragraphs → summarise
"""

from __future__ import annotations

from urllib.parse import urlparse

from backend.errors import InputError
from backend.scraper.fetcher import fetch_chapter
from backend.summarizer.llm import LLMClient
from backend.summarizer.models import ChapterDigest
from backend.summarizer.pipeline import run_pipeline


def validate_chapter_url(url: str | None) -> str:
    """Return *url* stripped, or raise :class:`InputError` if it is unusable."""
    if not url or not url.strip():
        raise InputError("URL missing. Use /scrape?url=CHAPTER_URL")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise InputError(f"Not an http(s) chapter URL: {url!r}")
    return url


async def summarize_chapter(url: str | None, llm: LLMClient | None = None) -> ChapterDigest:
    """Fetch the chapter at *url* and summarise its text.

    Args:
        url: Chapter page URL.
        llm: LLM capability forwarded to the pipeline.

    Returns:
        A :class:`ChapterDigest` with the summary, the paragraph count and
        the chapter links exactly as extracted.

    Raises:
        InputError: If *url* is unusable or the page yields no paragraphs.
        ExtractionError: If the page lacks the chapter content container.
        ProviderError: If summarisation fails.
    """
    url = validate_chapter_url(url)
    chapter = await fetch_chapter(url)

    if not chapter.paragraphs:
        raise InputError(f"No chapter text found at {url}")

    run = await run_pipeline(chapter.full_text, llm)

    return ChapterDigest(
        url=url,
        paragraph_count=len(chapter.paragraphs),
        summary=run.summary,
        prev_chapter_url=chapter.prev_chapter_url,
        next_chapter_url=chapter.next_chapter_url,
        partials=run.partials,
    )
