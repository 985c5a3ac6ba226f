"""Scraper package — chapter fetch & content extraction."""

from backend.scraper.extractor import extract_chapter
from backend.scraper.fetcher import fetch_chapter, fetch_chapter_html
from backend.scraper.models import ChapterPage, RawPage

__all__ = ["fetch_chapter", "fetch_chapter_html", "extract_chapter", "RawPage", "ChapterPage"]
