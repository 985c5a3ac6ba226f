"""Prompt templates for chunk summaries and the final synthesis."""

from __future__ import annotations

CHUNK_SUMMARY_PROMPT = """\
You are summarizing part {ordinal} of {total} of a novel chapter.
Write 5-8 bullet points capturing:

- Main plot events happening in this section
- Important character interactions and emotional shifts
- Any reveals, hidden clues, or foreshadowing
- World-building or lore details that matter later
- How this section connects to earlier or later events

Do NOT rewrite creatively or add your own ideas.
Only summarize information from the given text.

TEXT:
---
{text}
---"""

FINAL_SUMMARY_PROMPT = """\
You will receive multiple chunk summaries.
Combine them into a single coherent 300-400 word chapter summary.

Requirements:
- Maintain chronological order
- Include major plot events and consequences
- Keep key character interactions, conflicts, and emotional changes
- Include hidden clues / foreshadowing
- Include important world-building or lore
- Do not repeat, over-condense, or invent new details

Chunk Summaries:
---
{summaries}
---

Output ONLY the final summary."""


def build_chunk_prompt(text: str, ordinal: int, total: int) -> str:
    return CHUNK_SUMMARY_PROMPT.format(ordinal=ordinal, total=total, text=text)


def build_final_prompt(summaries: list[str]) -> str:
    return FINAL_SUMMARY_PROMPT.format(summaries="\n".join(summaries))
