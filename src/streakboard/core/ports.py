# src/streakboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the datastore and the notification channel swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Awaitable, Protocol

Row = dict[str, Any]
# Backend rows are plain JSON objects with snake_case keys, as PostgREST returns them.


class PersistenceBackend(Protocol):
    """
    Remote key/value-ish datastore with four collections:
    tasks, habits, reminders, completions.

    create_* return the stored row including the server-assigned `id` and `created_at`.
    Every method raises BackendError on failure.
    """

    # Tasks
    def list_tasks(self) -> Awaitable[list[Row]]: ...
    def create_task(self, row: Row) -> Awaitable[Row]: ...
    def update_task(self, task_id: int, updates: Row) -> Awaitable[None]: ...
    def delete_task(self, task_id: int) -> Awaitable[None]: ...
    def delete_expired_tasks(self, before: datetime) -> Awaitable[None]: ...

    # Habits
    def list_habits(self) -> Awaitable[list[Row]]: ...
    def create_habit(self, row: Row) -> Awaitable[Row]: ...
    def update_habit(self, habit_id: int, updates: Row) -> Awaitable[None]: ...
    def delete_habit(self, habit_id: int) -> Awaitable[None]: ...

    # Reminders (list returns only non-completed, ascending by time)
    def list_reminders(self) -> Awaitable[list[Row]]: ...
    def create_reminder(self, row: Row) -> Awaitable[Row]: ...
    def delete_reminder(self, reminder_id: int) -> Awaitable[None]: ...

    # Completions (one record per date key)
    def list_completions(self) -> Awaitable[list[Row]]: ...
    def upsert_completion(self, date_key: str, completed: bool) -> Awaitable[None]: ...

    def aclose(self) -> Awaitable[None]: ...


class Notifier(Protocol):
    """Presentation-side port: how the reminder checker tells the user something is due."""

    def notify(self, title: str, body: str) -> None: ...
