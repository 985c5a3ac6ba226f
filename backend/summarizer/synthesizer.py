"""Synthesiser: merges chunk summaries into one chapter summary."""

from __future__ import annotations

from collections.abc import Sequence

from backend.config import settings
from backend.summarizer.llm import LLMClient
from backend.summarizer.models import PartialSummary
from backend.summarizer.prompts import build_final_prompt


async def synthesize(
    llm: LLMClient,
    partials: Sequence[PartialSummary],
    model: str | None = None,
) -> str:
    """Combine *partials* into a single 300–400 word prose summary.

    Partials are ordered by ``index`` before being joined, so callers that
    summarised chunks concurrently need not sort them first.

    Raises:
        ValueError: If *partials* is empty.
    """
    if not partials:
        raise ValueError("synthesize() requires at least one partial summary")

    ordered = sorted(partials, key=lambda p: p.index)
    prompt = build_final_prompt([p.text for p in ordered])
    text = await llm.generate(model or settings.chat_model, prompt)
    return text.strip()
