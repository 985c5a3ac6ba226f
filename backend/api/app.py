"""FastAPI application factory.

Lifespan
--------
On startup the app builds a single LLM client (shared across all requests
via ``request.app.state.llm``).  The client only caches chat-model objects,
so requests never share chapter data.

Routers
-------
    /scrape    — fetch a chapter, summarise it, return prev/next links
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routers import scrape as scrape_router
from backend.summarizer.llm import build_llm_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the shared LLM client on startup."""
    app.state.llm = build_llm_client()
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Chapter Digest API",
        description=(
            "Fetches a web-novel chapter, summarises it with a chunked "
            "map-then-reduce LLM pipeline, and returns the summary with the "
            "previous/next chapter links."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(scrape_router.router, tags=["scrape"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn backend.api.app:app --reload
app = create_app()
