"""Chapter fetcher with a Playwright fallback for protected or JS-rendered pages."""

from __future__ import annotations

import httpx

from backend.config import settings
from backend.errors import ExtractionError
from backend.scraper.extractor import extract_chapter, has_chapter_content
from backend.scraper.models import ChapterPage, RawPage

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_DEFAULT_HEADERS = {
    "User-Agent": _BROWSER_UA,
    "Accept-Language": "en-US,en;q=0.9",
}

# Statuses that novel hosts return to scripted clients behind bot protection.
_BOT_BLOCK_STATUSES = {403, 429, 503}


async def _fetch_with_playwright(url: str) -> RawPage:
    """Render *url* in headless Chromium and return its HTML once content is present.

    Playwright is imported lazily so tests that don't exercise the browser
    path don't need a browser installed.

    Raises:
        ExtractionError: If the content container does not appear within
            ``settings.content_wait_timeout``.
    """
    from playwright.async_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415
    from playwright.async_api import async_playwright  # noqa: PLC0415

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(
            headless=settings.browser_headless,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
        )
        try:
            page = await browser.new_page(
                user_agent=_BROWSER_UA,
                extra_http_headers={"Accept-Language": _DEFAULT_HEADERS["Accept-Language"]},
            )
            page.set_default_navigation_timeout(settings.navigation_timeout * 1000)
            await page.goto(url, wait_until="domcontentloaded")
            try:
                await page.wait_for_selector(
                    settings.content_selector,
                    timeout=settings.content_wait_timeout * 1000,
                )
            except PlaywrightTimeoutError as exc:
                raise ExtractionError(
                    f"Chapter content {settings.content_selector!r} did not appear "
                    f"within {settings.content_wait_timeout:.0f}s at {url}"
                ) from exc
            html = await page.content()
        finally:
            await browser.close()

    return RawPage(url=url, html=html, status_code=200)


async def fetch_html(url: str) -> RawPage:
    """Fetch *url* with a plain HTTP GET.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
    """
    async with httpx.AsyncClient(
        headers=_DEFAULT_HEADERS,
        timeout=settings.request_timeout,
        follow_redirects=True,
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return RawPage(url=url, html=response.text, status_code=response.status_code)


async def fetch_chapter_html(url: str) -> RawPage:
    """Return the chapter HTML for *url* according to ``settings.fetch_mode``.

    ``http``
        Plain HTTP only.
    ``browser``
        Always render with Playwright.
    ``auto`` (default)
        Plain HTTP first; falls back to Playwright when the response lacks
        the content container or is blocked with a bot-protection status.
    """
    mode = settings.fetch_mode
    if mode == "browser":
        print(f"[FETCH] Rendering {url} in browser …")
        return await _fetch_with_playwright(url)

    try:
        raw = await fetch_html(url)
    except httpx.HTTPStatusError as exc:
        if mode == "auto" and exc.response.status_code in _BOT_BLOCK_STATUSES:
            print(
                f"[FETCH] HTTP {exc.response.status_code} for {url}; "
                "retrying in browser …"
            )
            return await _fetch_with_playwright(url)
        raise

    if mode == "auto" and not has_chapter_content(raw.html):
        print(f"[FETCH] No chapter content in HTTP response for {url}; rendering in browser …")
        return await _fetch_with_playwright(url)

    return raw


async def fetch_chapter(url: str) -> ChapterPage:
    """Fetch *url* and extract its paragraphs and chapter links."""
    raw = await fetch_chapter_html(url)
    chapter = extract_chapter(raw)
    print(f"[FETCH] {len(chapter.paragraphs)} paragraph(s) extracted from {url}")
    return chapter
