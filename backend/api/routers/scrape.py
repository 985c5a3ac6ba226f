"""Chapter scrape-and-summarise endpoint.

Routes
------
GET /scrape?url=<chapterUrl>    → summarize_chapter

Every outcome is returned with HTTP 200; ``success`` tells the browser
frontend which of the two body shapes it received.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from backend.summarizer.chapter import summarize_chapter

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ScrapeSuccess(BaseModel):
    success: bool = True
    count: int
    summary: str
    prevChapter: Optional[str] = None
    nextChapter: Optional[str] = None
    currentUrl: str


class ScrapeFailure(BaseModel):
    success: bool = False
    error: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/scrape", response_model=ScrapeSuccess | ScrapeFailure)
async def scrape_endpoint(request: Request, url: Optional[str] = None) -> dict[str, Any]:
    """Fetch a chapter page, summarise its text, and return its navigation links."""
    try:
        digest = await summarize_chapter(url, llm=request.app.state.llm)
    except Exception as exc:  # noqa: BLE001
        print(f"[SCRAPE] ✗ {url!r}: {exc}")
        return ScrapeFailure(error=str(exc)).model_dump()

    return ScrapeSuccess(
        count=digest.paragraph_count,
        summary=digest.summary,
        prevChapter=digest.prev_chapter_url,
        nextChapter=digest.next_chapter_url,
        currentUrl=digest.url,
    ).model_dump()
