"""Error taxonomy for playlist resolution."""

from __future__ import annotations

from typing import Optional


REASON_INVALID_URL = "invalid-url"
REASON_PROCESS_FAILURE = "process-failure"
REASON_TIMEOUT = "timeout"
REASON_EMPTY_RESULT = "empty-result"

REASONS = (
    REASON_INVALID_URL,
    REASON_PROCESS_FAILURE,
    REASON_TIMEOUT,
    REASON_EMPTY_RESULT,
)

RETRYABLE_REASONS = frozenset({REASON_PROCESS_FAILURE, REASON_TIMEOUT})


class PlaylistTrackerError(RuntimeError):
    """Base error carrying a machine-readable failure reason."""

    def __init__(self, reason: str, message: Optional[str] = None) -> None:
        if reason not in REASONS:
            raise ValueError(f"Unknown failure reason: {reason}")
        super().__init__(message or reason)
        self.reason = reason

    @property
    def retryable(self) -> bool:
        """True when a later identical request may succeed."""

        return self.reason in RETRYABLE_REASONS

    def to_dict(self) -> dict:
        return {
            "error": self.reason,
            "detail": str(self),
            "retryable": self.retryable,
        }


class ExtractionError(PlaylistTrackerError):
    """Raised when the metadata extractor cannot produce any items."""


class ResolutionError(PlaylistTrackerError):
    """Raised when a URL cannot be resolved into a usable result."""

    @classmethod
    def from_extraction(cls, exc: ExtractionError) -> "ResolutionError":
        return cls(exc.reason, str(exc))


class ExtractionCancelledError(RuntimeError):
    """Raised when an in-flight extraction is canceled by the caller."""
