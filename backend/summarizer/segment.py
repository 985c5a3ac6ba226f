"""Chunk summariser: one :class:`Chunk` in, one :class:`PartialSummary` out."""

from __future__ import annotations

from backend.config import settings
from backend.summarizer.llm import LLMClient
from backend.summarizer.models import Chunk, PartialSummary
from backend.summarizer.prompts import build_chunk_prompt


async def summarize_chunk(
    llm: LLMClient,
    chunk: Chunk,
    ordinal: int,
    total: int,
    model: str | None = None,
) -> PartialSummary:
    """Summarise *chunk* as a short list of factual bullet points.

    Args:
        llm: The LLM capability to call.
        chunk: The chunk to summarise.
        ordinal: 1-based position of the chunk, embedded in the prompt so the
            model knows it is reading a fragment.
        total: Total number of chunks in the chapter.
        model: Model identifier; defaults to ``settings.chat_model``.

    Returns:
        A :class:`PartialSummary` carrying ``chunk.index``.  Provider errors
        propagate unchanged.
    """
    prompt = build_chunk_prompt(chunk.text, ordinal, total)
    text = await llm.generate(model or settings.chat_model, prompt)
    return PartialSummary(index=chunk.index, text=text.strip())
