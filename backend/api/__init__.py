"""FastAPI HTTP layer package.

    uvicorn backend.api:app --reload
"""

from backend.api.app import app

__all__ = ["app"]
