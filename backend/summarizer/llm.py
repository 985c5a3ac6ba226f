"""LLM call capability used by the chunk summariser and the synthesiser.

Both stages depend only on :class:`LLMClient` (``generate(model, prompt)``),
so tests substitute a deterministic stub and the app builds a
:class:`LangChainLLMClient` once at startup.

Chat providers
--------------
``gemini`` (default)
    Google Gemini via ``langchain-google-genai``.
    Requires ``GEMINI_API_KEY`` (or ``GOOGLE_API_KEY``).

``openai``
    OpenAI chat models via ``langchain-openai``.
    Requires ``OPENAI_API_KEY``.

``ollama``
    A local Ollama server via ``langchain-ollama``.
    Configure via ``OLLAMA_BASE_URL``.

Set ``LLM_PROVIDER`` in your ``.env`` to switch providers.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel

from backend.config import settings
from backend.errors import ProviderError


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class LLMClient(ABC):
    """Submit a prompt to a model and receive its text response."""

    @abstractmethod
    async def generate(self, model: str, prompt: str) -> str:
        """Return the model's raw text reply to *prompt*.

        Raises:
            ProviderError: If the provider fails or returns nothing usable.
        """


# ---------------------------------------------------------------------------
# LangChain implementation
# ---------------------------------------------------------------------------

def _get_llm(model: str) -> BaseChatModel:
    """Return a LangChain chat model for *model* based on ``settings.llm_provider``."""
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(model=model, temperature=settings.llm_temperature)

    if settings.llm_provider == "ollama":
        from langchain_ollama import ChatOllama

        return ChatOllama(
            model=model,
            temperature=settings.llm_temperature,
            base_url=settings.ollama_base_url,
        )

    from langchain_google_genai import ChatGoogleGenerativeAI

    kwargs: dict[str, Any] = {"model": model, "temperature": settings.llm_temperature}
    if settings.gemini_api_key:
        kwargs["google_api_key"] = settings.gemini_api_key
    return ChatGoogleGenerativeAI(**kwargs)


def _response_text(response: Any) -> str:
    """Flatten a LangChain message (string or content-block list) to plain text."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


class LangChainLLMClient(LLMClient):
    """:class:`LLMClient` backed by the configured LangChain chat model.

    Every call is bounded by ``settings.llm_timeout`` and retried with
    exponential backoff up to ``settings.llm_max_retries`` times.  Empty
    replies count as failures.  Chat-model objects are cached per model id.
    """

    def __init__(self) -> None:
        self._models: dict[str, BaseChatModel] = {}

    def _model(self, model: str) -> BaseChatModel:
        if model not in self._models:
            self._models[model] = _get_llm(model)
        return self._models[model]

    async def _invoke_once(self, model: str, prompt: str) -> str:
        try:
            llm = self._model(model)
            response = await asyncio.wait_for(
                llm.ainvoke(prompt), timeout=settings.llm_timeout
            )
        except asyncio.TimeoutError as exc:
            raise ProviderError(
                f"LLM call to {model!r} timed out after {settings.llm_timeout:.0f}s"
            ) from exc
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"LLM call to {model!r} failed: {exc}") from exc

        text = _response_text(response)
        if not text.strip():
            raise ProviderError(f"LLM call to {model!r} returned an empty response")
        return text

    async def generate(self, model: str, prompt: str) -> str:
        base_delay = settings.llm_retry_base_delay
        max_retries = max(0, settings.llm_max_retries)

        for attempt in range(max_retries + 1):
            try:
                return await self._invoke_once(model, prompt)
            except ProviderError as exc:
                if attempt >= max_retries:
                    if max_retries:
                        print(f"[LLM] exhausted {max_retries} retries — {exc}")
                    raise
                delay = base_delay * (2 ** attempt)
                print(
                    f"[LLM] {exc} (attempt {attempt + 1}/{max_retries}); "
                    f"retrying in {delay:.0f}s …"
                )
                await asyncio.sleep(delay)

        raise ProviderError("LLM call made no attempts")


def build_llm_client() -> LLMClient:
    """Return the production :class:`LLMClient`."""
    return LangChainLLMClient()
