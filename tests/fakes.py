# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from streakboard.backend.offline import OfflineBackend
from streakboard.core.errors import BackendError
from streakboard.core.ports import Notifier, Row


class FakeBackend(OfflineBackend):
    """
    In-memory PersistenceBackend with failure injection.

    - Records every call name for assertions
    - Any method whose name is in `fail` raises BackendError ("*" fails everything)
    """

    def __init__(self) -> None:
        super().__init__()
        self.fail: set[str] = set()
        self.calls: list[str] = []
        self.upserts: list[tuple[str, bool]] = []

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail or "*" in self.fail:
            raise BackendError(f"{name} failed (injected)")

    async def list_tasks(self) -> list[Row]:
        self._check("list_tasks")
        return await super().list_tasks()

    async def create_task(self, row: Row) -> Row:
        self._check("create_task")
        return await super().create_task(row)

    async def update_task(self, task_id: int, updates: Row) -> None:
        self._check("update_task")
        await super().update_task(task_id, updates)

    async def delete_task(self, task_id: int) -> None:
        self._check("delete_task")
        await super().delete_task(task_id)

    async def delete_expired_tasks(self, before: datetime) -> None:
        self._check("delete_expired_tasks")
        await super().delete_expired_tasks(before)

    async def list_habits(self) -> list[Row]:
        self._check("list_habits")
        return await super().list_habits()

    async def create_habit(self, row: Row) -> Row:
        self._check("create_habit")
        return await super().create_habit(row)

    async def update_habit(self, habit_id: int, updates: Row) -> None:
        self._check("update_habit")
        await super().update_habit(habit_id, updates)

    async def delete_habit(self, habit_id: int) -> None:
        self._check("delete_habit")
        await super().delete_habit(habit_id)

    async def list_reminders(self) -> list[Row]:
        self._check("list_reminders")
        return await super().list_reminders()

    async def create_reminder(self, row: Row) -> Row:
        self._check("create_reminder")
        return await super().create_reminder(row)

    async def delete_reminder(self, reminder_id: int) -> None:
        self._check("delete_reminder")
        await super().delete_reminder(reminder_id)

    async def list_completions(self) -> list[Row]:
        self._check("list_completions")
        return await super().list_completions()

    async def upsert_completion(self, date_key: str, completed: bool) -> None:
        self._check("upsert_completion")
        self.upserts.append((date_key, completed))
        await super().upsert_completion(date_key, completed)


@dataclass(slots=True)
class Notification:
    title: str
    body: str


@dataclass(slots=True)
class RecordingNotifier(Notifier):
    """
    Fake Notifier used by reminder tests.
    """

    sent: list[Notification] = field(default_factory=list)
    broken: bool = False

    def notify(self, title: str, body: str) -> None:
        if self.broken:
            raise OSError("notification channel unavailable")
        self.sent.append(Notification(title=title, body=body))
