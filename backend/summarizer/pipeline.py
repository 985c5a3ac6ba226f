"""Chunked summarisation pipeline.

``summarize`` runs the full map-then-reduce flow for one chapter:

    chunk → summarise each chunk (in index order) → synthesise

Chunks are summarised one at a time by default.  With
``SUMMARY_CONCURRENCY > 1`` they are summarised concurrently and the partial
summaries are re-sorted by chunk index before synthesis.  Any failure aborts
the run; no partial result is returned.
"""

from __future__ import annotations

import asyncio

from backend.config import settings
from backend.errors import InputError, ProviderError
from backend.summarizer.chunker import chunk_text
from backend.summarizer.llm import LLMClient, build_llm_client
from backend.summarizer.models import Chunk, PartialSummary, SummaryRun
from backend.summarizer.segment import summarize_chunk
from backend.summarizer.synthesizer import synthesize


# ---------------------------------------------------------------------------
# Map stage
# ---------------------------------------------------------------------------

async def _summarize_sequential(
    llm: LLMClient, chunks: list[Chunk], model: str
) -> list[PartialSummary]:
    total = len(chunks)
    partials: list[PartialSummary] = []
    for chunk in chunks:
        print(f"[SUMMARISING] Chunk {chunk.index + 1}/{total} ({len(chunk.text)} chars) …")
        partials.append(await summarize_chunk(llm, chunk, chunk.index + 1, total, model))
    return partials


async def _summarize_concurrent(
    llm: LLMClient, chunks: list[Chunk], model: str, limit: int
) -> list[PartialSummary]:
    total = len(chunks)
    semaphore = asyncio.Semaphore(limit)

    async def _one(chunk: Chunk) -> PartialSummary:
        async with semaphore:
            print(f"[SUMMARISING] Chunk {chunk.index + 1}/{total} ({len(chunk.text)} chars) …")
            return await summarize_chunk(llm, chunk, chunk.index + 1, total, model)

    tasks = [asyncio.ensure_future(_one(chunk)) for chunk in chunks]
    try:
        partials = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    # Completion order is arbitrary; the chunk index is the ordering key.
    return sorted(partials, key=lambda p: p.index)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def _run(llm: LLMClient, chunks: list[Chunk], model: str) -> SummaryRun:
    # Timeouts raised by the LLM client itself are reported here, so that a
    # TimeoutError reaching run_pipeline always means the deadline expired.
    try:
        limit = settings.summary_concurrency
        if limit > 1 and len(chunks) > 1:
            partials = await _summarize_concurrent(llm, chunks, model, limit)
        else:
            partials = await _summarize_sequential(llm, chunks, model)

        print(f"[SYNTHESISING] Combining {len(partials)} chunk summaries …")
        summary = await synthesize(llm, partials, model)
    except asyncio.TimeoutError as exc:
        raise ProviderError(f"LLM call to {model!r} timed out: {exc or 'no response'}") from exc

    print(f"[SYNTHESISING] Summary written ({len(summary)} chars).")
    return SummaryRun(chunks=tuple(chunks), partials=tuple(partials), summary=summary)


async def run_pipeline(
    full_text: str,
    llm: LLMClient | None = None,
    *,
    model: str | None = None,
    chunk_size: int | None = None,
) -> SummaryRun:
    """Summarise *full_text* and return every intermediate artefact.

    Args:
        full_text: Chapter text, paragraphs separated by ``\\n``.
        llm: LLM capability; defaults to :func:`build_llm_client`.
        model: Model identifier; defaults to ``settings.chat_model``.
        chunk_size: Characters per chunk; defaults to ``settings.chunk_size``.

    Raises:
        InputError: If *full_text* is empty.
        ProviderError: If any LLM call fails or ``settings.pipeline_timeout``
            is exceeded.
    """
    size = chunk_size if chunk_size is not None else settings.chunk_size
    chunks = chunk_text(full_text, size)
    if not chunks:
        raise InputError("Chapter text is empty; nothing to summarise.")
    print(f"[CHUNKING] {len(full_text)} chars → {len(chunks)} chunk(s).")

    llm = llm or build_llm_client()
    model = model or settings.chat_model

    deadline = settings.pipeline_timeout
    if deadline <= 0:
        return await _run(llm, chunks, model)
    try:
        return await asyncio.wait_for(_run(llm, chunks, model), timeout=deadline)
    except asyncio.TimeoutError as exc:
        raise ProviderError(
            f"Summarisation exceeded the {deadline:.0f}s pipeline deadline"
        ) from exc


async def summarize(
    full_text: str,
    llm: LLMClient | None = None,
    *,
    model: str | None = None,
    chunk_size: int | None = None,
) -> str:
    """Return the final summary of *full_text* (see :func:`run_pipeline`)."""
    run = await run_pipeline(full_text, llm, model=model, chunk_size=chunk_size)
    return run.summary
