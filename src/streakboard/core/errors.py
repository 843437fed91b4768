# src/streakboard/core/errors.py

from __future__ import annotations


class BackendError(RuntimeError):
    """Remote datastore call failed (network error or non-success HTTP status)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentError(ValueError):
    """An imported/cached state document could not be parsed."""


class ItemNotFound(LookupError):
    """No task/habit/reminder with the given id in the in-memory state."""


def friendly_backend_error_message(err: Exception) -> str:
    status = getattr(err, "status_code", None)
    if status in (401, 403):
        return "The datastore rejected the credentials. Check STREAKBOARD_BACKEND_KEY."
    if status == 404:
        return "The datastore table was not found. Check STREAKBOARD_BACKEND_URL."
    if status is not None:
        return f"The datastore returned HTTP {status}. Please try again."
    msg = str(err).strip()
    if msg:
        return f"Could not reach the datastore ({msg}). Please try again."
    return "Could not reach the datastore. Please try again."
