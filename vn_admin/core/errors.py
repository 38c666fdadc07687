"""Exception hierarchy for ingestion, persistence and caching."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vn_admin.ingestion.pipeline import IngestionReport


class VnAdminError(Exception):
    """Base class for all vn_admin errors."""


class TransportError(VnAdminError):
    """
    A single request to the remote source failed.

    Raised for network failures, non-2xx responses and bodies that do not
    parse as the expected list.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status {self.status_code})"
        return self.message


class RetriesExhaustedError(VnAdminError):
    """Every retry attempt failed; wraps the last underlying error."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        super().__init__(f"max retries reached after {attempts} attempts: {last_error}")
        self.last_error = last_error
        self.attempts = attempts


class PersistenceError(VnAdminError):
    """The store rejected a write or read."""


class CacheError(VnAdminError):
    """
    Cache backend unavailable or payload could not be serialized.

    Always advisory: callers log it and fall back to the store.
    """


class PipelineError(VnAdminError):
    """The ingestion run failed as a whole (province list unavailable)."""


class IngestionCancelled(VnAdminError):
    """Cooperative cancellation was requested while ingesting."""

    def __init__(self, message: str = "ingestion cancelled", report: IngestionReport | None = None) -> None:
        super().__init__(message)
        self.report = report
