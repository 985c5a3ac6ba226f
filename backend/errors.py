"""Exception taxonomy shared by the scraper, the summariser and the API.

Every failure that reaches the HTTP or CLI layer is reported as a single
message, so each class only needs to carry a human-readable string.
"""

from __future__ import annotations


class DigestError(Exception):
    """Base class for all Chapter Digest failures."""


class InputError(DigestError):
    """The chapter URL is missing/unusable, or the chapter has no text."""


class ProviderError(DigestError):
    """The LLM provider failed, timed out, or returned an unusable response."""


class ExtractionError(DigestError):
    """The chapter page did not expose the expected content."""
