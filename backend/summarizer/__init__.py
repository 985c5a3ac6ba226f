"""Chunked chapter summarisation package."""

from backend.summarizer.chapter import summarize_chapter
from backend.summarizer.chunker import chunk_text
from backend.summarizer.llm import LangChainLLMClient, LLMClient, build_llm_client
from backend.summarizer.pipeline import run_pipeline, summarize
from backend.summarizer.segment import summarize_chunk
from backend.summarizer.synthesizer import synthesize

__all__ = [
    "chunk_text",
    "summarize_chunk",
    "synthesize",
    "summarize",
    "run_pipeline",
    "summarize_chapter",
    "LLMClient",
    "LangChainLLMClient",
    "build_llm_client",
]
