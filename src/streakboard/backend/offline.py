# src/streakboard/backend/offline.py

from __future__ import annotations

import copy
import itertools
from datetime import UTC, datetime

from ..core.ports import Row
from ..tracker.models import parse_ts


class OfflineBackend:
    """
    In-process datastore used for demos when no remote datastore is configured.

    Behaves like the REST backend as seen by the tracker:
    - server-assigned integer ids and created_at timestamps
    - same list ordering (tasks/habits newest first, reminders by time)
    - rows are copied in and out, so callers never share objects with the store

    Data lives only as long as the process (the local snapshot covers restarts).
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._tables: dict[str, dict[int, Row]] = {"tasks": {}, "habits": {}, "reminders": {}}
        self._completions: dict[str, bool] = {}

    async def aclose(self) -> None:
        return

    def _insert(self, table: str, row: Row) -> Row:
        stored = copy.deepcopy(row)
        stored["id"] = next(self._ids)
        stored.setdefault("created_at", datetime.now(UTC).isoformat())
        self._tables[table][stored["id"]] = stored
        return copy.deepcopy(stored)

    def _update(self, table: str, row_id: int, updates: Row) -> None:
        row = self._tables[table].get(int(row_id))
        if row is not None:
            row.update(copy.deepcopy(updates))

    def _newest_first(self, table: str) -> list[Row]:
        rows = sorted(self._tables[table].values(), key=lambda r: (r.get("created_at") or "", r["id"]), reverse=True)
        return copy.deepcopy(rows)

    # ---- tasks ----

    async def list_tasks(self) -> list[Row]:
        return self._newest_first("tasks")

    async def create_task(self, row: Row) -> Row:
        return self._insert("tasks", row)

    async def update_task(self, task_id: int, updates: Row) -> None:
        self._update("tasks", task_id, updates)

    async def delete_task(self, task_id: int) -> None:
        self._tables["tasks"].pop(int(task_id), None)

    async def delete_expired_tasks(self, before: datetime) -> None:
        expired = [
            tid
            for tid, row in self._tables["tasks"].items()
            if (exp := parse_ts(row.get("expires_at"))) is not None and exp < before
        ]
        for tid in expired:
            del self._tables["tasks"][tid]

    # ---- habits ----

    async def list_habits(self) -> list[Row]:
        return self._newest_first("habits")

    async def create_habit(self, row: Row) -> Row:
        return self._insert("habits", row)

    async def update_habit(self, habit_id: int, updates: Row) -> None:
        self._update("habits", habit_id, updates)

    async def delete_habit(self, habit_id: int) -> None:
        self._tables["habits"].pop(int(habit_id), None)

    # ---- reminders ----

    async def list_reminders(self) -> list[Row]:
        active = [r for r in self._tables["reminders"].values() if not r.get("completed")]
        active.sort(key=lambda r: parse_ts(r["time"]))
        return copy.deepcopy(active)

    async def create_reminder(self, row: Row) -> Row:
        return self._insert("reminders", row)

    async def delete_reminder(self, reminder_id: int) -> None:
        self._tables["reminders"].pop(int(reminder_id), None)

    # ---- completions ----

    async def list_completions(self) -> list[Row]:
        return [{"date": k, "completed": v} for k, v in self._completions.items()]

    async def upsert_completion(self, date_key: str, completed: bool) -> None:
        self._completions[date_key] = bool(completed)
