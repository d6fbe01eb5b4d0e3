"""Exception hierarchy for the bioRxiv client and search pipeline."""

from __future__ import annotations


class BiorxivError(RuntimeError):
    """Base class for every failure surfaced to the tool layer."""


class ValidationError(BiorxivError):
    """Caller arguments were malformed; no upstream call was made."""


class ApiError(BiorxivError):
    """The upstream API call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientUpstreamError(ApiError):
    """429 or 5xx responses persisted after every retry attempt."""


class ApplicationUpstreamError(ApiError):
    """The upstream answered but flagged the request as an error in its envelope."""
