"""Chapter Digest CLI — entry-point for all backend operations.

Usage:
    python cli/main.py --help

Commands:
    scrape          → fetch + extract a chapter (no LLM)
    summarize       → full chapter flow: fetch → chunk → summarise
    summarize-file  → run the summarisation pipeline on a local text file
    chunk           → show how a text file would be chunked
    serve           → run the HTTP API with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from backend.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
from typing import Optional

import typer

from backend.config import settings
from backend.summarizer.models import PartialSummary

app = typer.Typer(
    name="digest",
    help="Chapter Digest CLI.",
    no_args_is_help=True,
)


def _echo_partials(partials: tuple[PartialSummary, ...]) -> None:
    for partial in partials:
        typer.echo(f"\n--- Chunk {partial.index + 1}/{len(partials)} ---")
        typer.echo(partial.text)
    typer.echo("")


def _read_text(path: Path) -> str:
    if not path.exists():
        typer.echo(f"❌ File not found: {path}")
        raise typer.Exit(code=1)
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        typer.echo(f"❌ Error: {path} is not valid UTF-8 text ({exc})")
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Scrape
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="Chapter URL to scrape."),
) -> None:
    """Fetch a chapter and print its extracted text and navigation links."""
    from backend.scraper import fetch_chapter
    from backend.summarizer.chapter import validate_chapter_url

    try:
        chapter = asyncio.run(fetch_chapter(validate_chapter_url(url)))
    except Exception as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    typer.echo(f"[scrape] Paragraphs : {len(chapter.paragraphs)}")
    typer.echo(f"[scrape] Characters : {len(chapter.full_text)}")
    typer.echo(f"[scrape] Previous   : {chapter.prev_chapter_url or '(none)'}")
    typer.echo(f"[scrape] Next       : {chapter.next_chapter_url or '(none)'}")
    typer.echo("")
    typer.echo(chapter.full_text)


# ---------------------------------------------------------------------------
# Summarise
# ---------------------------------------------------------------------------
@app.command("summarize")
def summarize_cmd(
    url: str = typer.Option(..., help="Chapter URL to summarise."),
    show_partials: bool = typer.Option(False, "--show-partials", help="Also print each chunk summary."),
) -> None:
    """Fetch a chapter and print its summary and navigation links."""
    from backend.summarizer.chapter import summarize_chapter

    typer.echo(f"[summarize] Summarising {url!r} with {settings.llm_provider}:{settings.chat_model} …")
    try:
        digest = asyncio.run(summarize_chapter(url))
    except Exception as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    if show_partials:
        _echo_partials(digest.partials)

    typer.echo("\n" + "=" * 72)
    typer.echo(digest.summary)
    typer.echo("=" * 72)
    typer.echo(f"[summarize] Paragraphs : {digest.paragraph_count}")
    typer.echo(f"[summarize] Previous   : {digest.prev_chapter_url or '(none)'}")
    typer.echo(f"[summarize] Next       : {digest.next_chapter_url or '(none)'}")


@app.command("summarize-file")
def summarize_file(
    path: Path = typer.Option(..., help="Local UTF-8 text file to summarise."),
    chunk_size: Optional[int] = typer.Option(None, help="Characters per chunk (default: CHUNK_SIZE)."),
    show_partials: bool = typer.Option(False, "--show-partials", help="Also print each chunk summary."),
) -> None:
    """Run the chunked summarisation pipeline on a local text file."""
    from backend.summarizer.pipeline import run_pipeline

    text = _read_text(path)
    try:
        run = asyncio.run(run_pipeline(text, chunk_size=chunk_size))
    except Exception as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    if show_partials:
        _echo_partials(run.partials)

    typer.echo(run.summary)


# ---------------------------------------------------------------------------
# Chunk
# ---------------------------------------------------------------------------
@app.command("chunk")
def chunk(
    path: Path = typer.Option(..., help="Local UTF-8 text file to chunk."),
    chunk_size: Optional[int] = typer.Option(None, help="Characters per chunk (default: CHUNK_SIZE)."),
) -> None:
    """Show how a text file would be split before summarisation."""
    from backend.summarizer.chunker import chunk_text

    text = _read_text(path)
    size = chunk_size if chunk_size is not None else settings.chunk_size
    try:
        chunks = chunk_text(text, size)
    except ValueError as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    typer.echo(f"[chunk] {len(text)} chars → {len(chunks)} chunk(s) of ≤{size} chars")
    offset = 0
    for c in chunks:
        typer.echo(f"  #{c.index}  [{offset}:{offset + len(c.text)}]  {len(c.text)} chars")
        offset += len(c.text)


# ---------------------------------------------------------------------------
# Serve
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: HOST)."),
    port: Optional[int] = typer.Option(None, help="Port (default: PORT)."),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes."),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"✅ Server running at http://{bind_host}:{bind_port}")
    uvicorn.run("backend.api.app:app", host=bind_host, port=bind_port, reload=reload)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
