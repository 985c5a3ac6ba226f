"""Tests for the chunk summariser, the synthesiser and the pipeline orchestrator.

All LLM calls go through ``FakeLLM``, a deterministic :class:`LLMClient`
stub, so no provider is contacted.  Stage functions are patched where a test
needs to observe exactly what the orchestrator hands to the next stage.

pytest-asyncio is configured with ``asyncio_mode = "auto"`` in pyproject.toml,
so ``async def`` test methods are picked up automatically.
"""

from __future__ import annotations

import asyncio
import re
from unittest.mock import AsyncMock, patch

import pytest

from backend.config import settings
from backend.errors import InputError, ProviderError
from backend.summarizer.llm import LLMClient
from backend.summarizer.models import Chunk, PartialSummary
from backend.summarizer.pipeline import run_pipeline, summarize
from backend.summarizer.segment import summarize_chunk
from backend.summarizer.synthesizer import synthesize

_PART_RE = re.compile(r"part (\d+) of (\d+)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeLLM(LLMClient):
    """Answers chunk prompts with ``partial <ordinal>`` and synthesis with a fixed text.

    ``delays`` maps an ordinal to a sleep before answering; ``fail_on`` is an
    ordinal whose call raises :class:`ProviderError`; ``hang_on_final`` makes
    the synthesis call block forever.
    """

    def __init__(
        self,
        final: str = "  The final summary.  ",
        delays: dict[int, float] | None = None,
        fail_on: int | None = None,
        hang_on_final: bool = False,
    ) -> None:
        self.final = final
        self.delays = delays or {}
        self.fail_on = fail_on
        self.hang_on_final = hang_on_final
        self.calls: list[tuple[str, str]] = []

    @property
    def chunk_prompts(self) -> list[str]:
        return [p for _, p in self.calls if _PART_RE.search(p)]

    @property
    def final_prompts(self) -> list[str]:
        return [p for _, p in self.calls if "Chunk Summaries:" in p]

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        match = _PART_RE.search(prompt)
        if match is None:
            if self.hang_on_final:
                await asyncio.Event().wait()
            return self.final
        ordinal = int(match.group(1))
        await asyncio.sleep(self.delays.get(ordinal, 0))
        if ordinal == self.fail_on:
            raise ProviderError(f"provider down on part {ordinal}")
        return f"\n  partial {ordinal}  \n"


@pytest.fixture(autouse=True)
def pipeline_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the pipeline knobs so a developer's .env cannot change the outcome."""
    monkeypatch.setattr(settings, "chunk_size", 6000)
    monkeypatch.setattr(settings, "summary_concurrency", 1)
    monkeypatch.setattr(settings, "pipeline_timeout", 600.0)
    monkeypatch.setattr(settings, "llm_provider", "gemini")
    monkeypatch.setattr(settings, "gemini_chat_model", "gemini-2.5-flash")


# ---------------------------------------------------------------------------
# Segment summariser
# ---------------------------------------------------------------------------

class TestSummarizeChunk:
    async def test_prompt_embeds_position_and_text(self) -> None:
        llm = FakeLLM()
        chunk = Chunk(index=1, text="Lin Feng drew his sword at dawn.")

        result = await summarize_chunk(llm, chunk, ordinal=2, total=3, model="m-1")

        assert len(llm.calls) == 1
        model, prompt = llm.calls[0]
        assert model == "m-1"
        assert "part 2 of 3" in prompt
        assert "Lin Feng drew his sword at dawn." in prompt
        assert "Do NOT rewrite creatively" in prompt
        assert result == PartialSummary(index=1, text="partial 2")

    async def test_defaults_to_configured_model(self) -> None:
        llm = FakeLLM()
        await summarize_chunk(llm, Chunk(index=0, text="x"), ordinal=1, total=1)
        assert llm.calls[0][0] == "gemini-2.5-flash"

    async def test_provider_error_propagates(self) -> None:
        llm = FakeLLM(fail_on=1)
        with pytest.raises(ProviderError, match="part 1"):
            await summarize_chunk(llm, Chunk(index=0, text="x"), ordinal=1, total=1)


# ---------------------------------------------------------------------------
# Synthesiser
# ---------------------------------------------------------------------------

class TestSynthesize:
    async def test_empty_partials_rejected(self) -> None:
        llm = FakeLLM()
        with pytest.raises(ValueError):
            await synthesize(llm, [])
        assert llm.calls == []

    async def test_partials_joined_in_index_order(self) -> None:
        llm = FakeLLM()
        partials = [
            PartialSummary(index=2, text="third"),
            PartialSummary(index=0, text="first"),
            PartialSummary(index=1, text="second"),
        ]

        await synthesize(llm, partials, model="m-2")

        model, prompt = llm.calls[0]
        assert model == "m-2"
        assert "first\nsecond\nthird" in prompt
        assert "300-400 word" in prompt
        assert "Output ONLY the final summary." in prompt

    async def test_output_is_trimmed(self) -> None:
        llm = FakeLLM(final="\n\n  Summary body.\n")
        assert await synthesize(llm, [PartialSummary(index=0, text="a")]) == "Summary body."


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

async def _index_stub(llm, chunk, ordinal, total, model=None) -> PartialSummary:
    return PartialSummary(index=chunk.index, text=str(chunk.index))


class TestOrchestrator:
    async def test_synthesizer_receives_partials_in_order(self) -> None:
        mock_synth = AsyncMock(return_value="done")
        with (
            patch("backend.summarizer.pipeline.summarize_chunk", new=_index_stub),
            patch("backend.summarizer.pipeline.synthesize", new=mock_synth),
        ):
            result = await summarize("abcdefghi", FakeLLM(), chunk_size=3)

        assert result == "done"
        partials = mock_synth.await_args.args[1]
        assert [p.text for p in partials] == ["0", "1", "2"]

    async def test_fails_fast_on_chunk_error(self) -> None:
        seen: list[int] = []

        async def failing_stub(llm, chunk, ordinal, total, model=None):
            seen.append(chunk.index)
            if chunk.index == 1:
                raise ProviderError("chunk 1 exploded")
            return PartialSummary(index=chunk.index, text=str(chunk.index))

        mock_synth = AsyncMock(return_value="never")
        with (
            patch("backend.summarizer.pipeline.summarize_chunk", new=failing_stub),
            patch("backend.summarizer.pipeline.synthesize", new=mock_synth),
        ):
            with pytest.raises(ProviderError, match="chunk 1 exploded"):
                await summarize("abcdefghi", FakeLLM(), chunk_size=3)

        assert seen == [0, 1]
        mock_synth.assert_not_awaited()

    async def test_empty_text_is_input_error(self) -> None:
        llm = FakeLLM()
        mock_synth = AsyncMock()
        with patch("backend.summarizer.pipeline.synthesize", new=mock_synth):
            with pytest.raises(InputError):
                await summarize("", llm)
        mock_synth.assert_not_awaited()
        assert llm.calls == []

    async def test_two_chunk_scenario(self) -> None:
        text = "a" * 6000 + "b" * 6000
        llm = FakeLLM(final="  Merged chapter summary.\n")

        run = await run_pipeline(text, llm, chunk_size=6000)

        assert [len(c.text) for c in run.chunks] == [6000, 6000]
        chunk_prompts = llm.chunk_prompts
        assert len(chunk_prompts) == 2
        assert "part 1 of 2" in chunk_prompts[0] and "a" * 6000 in chunk_prompts[0]
        assert "part 2 of 2" in chunk_prompts[1] and "b" * 6000 in chunk_prompts[1]
        assert len(llm.final_prompts) == 1
        assert "partial 1\npartial 2" in llm.final_prompts[0]
        assert run.summary == "Merged chapter summary."

    async def test_three_character_scenario(self) -> None:
        llm = FakeLLM()
        mock_synth = AsyncMock(return_value="tiny")
        with patch("backend.summarizer.pipeline.synthesize", new=mock_synth):
            result = await summarize("abc", llm, chunk_size=6000)

        assert result == "tiny"
        assert len(llm.chunk_prompts) == 1
        assert "abc" in llm.chunk_prompts[0]
        partials = mock_synth.await_args.args[1]
        assert list(partials) == [PartialSummary(index=0, text="partial 1")]

    async def test_uses_configured_chunk_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "chunk_size", 4)
        llm = FakeLLM()
        run = await run_pipeline("abcdefghij", llm)
        assert [c.text for c in run.chunks] == ["abcd", "efgh", "ij"]
        assert len(llm.chunk_prompts) == 3

    async def test_concurrent_mode_restores_chunk_order(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "summary_concurrency", 3)
        # Earlier parts finish last.
        llm = FakeLLM(delays={1: 0.05, 2: 0.02, 3: 0.0})

        run = await run_pipeline("abcdefghi", llm, chunk_size=3)

        assert [p.index for p in run.partials] == [0, 1, 2]
        assert "partial 1\npartial 2\npartial 3" in llm.final_prompts[0]

    async def test_concurrent_mode_fails_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "summary_concurrency", 3)
        llm = FakeLLM(fail_on=2, delays={1: 0.05, 3: 0.05})

        with pytest.raises(ProviderError, match="part 2"):
            await run_pipeline("abcdefghi", llm, chunk_size=3)

        assert llm.final_prompts == []

    async def test_pipeline_deadline_raises_provider_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "pipeline_timeout", 0.05)
        llm = FakeLLM(hang_on_final=True)

        with pytest.raises(ProviderError, match="deadline"):
            await summarize("abc", llm)

    async def test_client_timeout_is_not_reported_as_deadline(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "pipeline_timeout", 5)
        llm = FakeLLM()
        llm.generate = AsyncMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(ProviderError, match="timed out") as exc_info:
            await summarize("abc", llm)

        assert "deadline" not in str(exc_info.value)

    async def test_zero_chunk_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            await run_pipeline("abcdefghij", FakeLLM(), chunk_size=0)
