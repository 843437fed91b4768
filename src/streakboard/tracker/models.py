# src/streakboard/tracker/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.errors import DocumentError


class Category(StrEnum):
    """
    Task lifetime. Decides when a task expires and on which days it is due.

    Values are also the PostgREST `type` column and the export document keys.
    """

    TODAY = "today"
    FULLWEEK = "fullweek"
    FULLMONTH = "fullmonth"
    WEEKDAYS = "weekdays"

    @classmethod
    def parse(cls, raw: str | None) -> Category:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            raise ValueError(f"Unknown category: {raw!r}") from None


# Legacy list names written by older clients into their local cache.
LEGACY_CATEGORY_KEYS: dict[str, Category] = {
    "daily": Category.TODAY,
    "weekly": Category.FULLWEEK,
    "monthly": Category.FULLMONTH,
}


def parse_ts(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    ts = raw if isinstance(raw, datetime) else datetime.fromisoformat(str(raw))
    # Values without an offset are local wall-clock time.
    return ts if ts.tzinfo is not None else ts.astimezone()


def format_ts(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


@dataclass(slots=True)
class Task:
    id: int
    category: Category
    text: str
    original_text: str
    time: str | None
    completed: bool
    created_at: datetime | None
    expires_at: datetime | None
    is_daily_tracking: bool = False
    daily_completions: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        return cls(
            id=int(row["id"]),
            category=Category.parse(row.get("type")),
            text=str(row.get("text") or ""),
            original_text=str(row.get("original_text") or row.get("text") or ""),
            time=row.get("time") or None,
            completed=bool(row.get("completed", False)),
            created_at=parse_ts(row.get("created_at")),
            expires_at=parse_ts(row.get("expires_at")),
            is_daily_tracking=bool(row.get("is_daily_tracking", False)),
            daily_completions=dict(row.get("daily_completions") or {}),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "originalText": self.original_text,
            "time": self.time,
            "completed": self.completed,
            "createdAt": format_ts(self.created_at),
            "expiresAt": format_ts(self.expires_at),
            "isDailyTracking": self.is_daily_tracking,
            "dailyCompletions": dict(self.daily_completions),
        }

    @classmethod
    def from_document(cls, category: Category, doc: dict[str, Any]) -> Task:
        return cls(
            id=int(doc["id"]),
            category=category,
            text=str(doc["text"]),
            original_text=str(doc.get("originalText") or doc["text"]),
            time=doc.get("time") or None,
            completed=bool(doc.get("completed", False)),
            created_at=parse_ts(doc.get("createdAt")),
            expires_at=parse_ts(doc.get("expiresAt")),
            is_daily_tracking=bool(doc.get("isDailyTracking", False)),
            daily_completions={str(k): bool(v) for k, v in (doc.get("dailyCompletions") or {}).items()},
        )


@dataclass(slots=True)
class Habit:
    id: int
    text: str
    original_text: str
    time: str | None
    streak: int
    last_completed: datetime | None
    created_at: datetime | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Habit:
        return cls(
            id=int(row["id"]),
            text=str(row.get("text") or ""),
            original_text=str(row.get("original_text") or row.get("text") or ""),
            time=row.get("time") or None,
            streak=max(0, int(row.get("streak") or 0)),
            last_completed=parse_ts(row.get("last_completed")),
            created_at=parse_ts(row.get("created_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "originalText": self.original_text,
            "time": self.time,
            "streak": self.streak,
            "lastCompleted": format_ts(self.last_completed),
            "createdAt": format_ts(self.created_at),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Habit:
        return cls(
            id=int(doc["id"]),
            text=str(doc["text"]),
            original_text=str(doc.get("originalText") or doc["text"]),
            time=doc.get("time") or None,
            streak=max(0, int(doc.get("streak") or 0)),
            last_completed=parse_ts(doc.get("lastCompleted")),
            created_at=parse_ts(doc.get("createdAt")),
        )


@dataclass(slots=True)
class Reminder:
    id: int
    text: str
    time: datetime
    completed: bool = False
    # Set once by the reminder checker; never reset.
    notified: bool = False

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Reminder:
        when = parse_ts(row.get("time"))
        if when is None:
            raise ValueError(f"reminder {row.get('id')} has no time")
        return cls(
            id=int(row["id"]),
            text=str(row.get("text") or ""),
            time=when,
            completed=bool(row.get("completed", False)),
            notified=bool(row.get("notified") or False),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "time": format_ts(self.time),
            "completed": self.completed,
            "notified": self.notified,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Reminder:
        when = parse_ts(doc["time"])
        if when is None:
            raise ValueError("reminder time is required")
        return cls(
            id=int(doc["id"]),
            text=str(doc["text"]),
            time=when,
            completed=bool(doc.get("completed", False)),
            notified=bool(doc.get("notified", False)),
        )


@dataclass(slots=True)
class TrackerData:
    """In-memory mirror of everything the user owns; the single source for rendering."""

    today: list[Task] = field(default_factory=list)
    fullweek: list[Task] = field(default_factory=list)
    fullmonth: list[Task] = field(default_factory=list)
    weekdays: list[Task] = field(default_factory=list)
    habits: list[Habit] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=list)
    # date key -> "every task due that day was completed"
    completions: dict[str, bool] = field(default_factory=dict)

    def tasks_in(self, category: Category) -> list[Task]:
        return getattr(self, category.value)

    def set_tasks(self, category: Category, tasks: list[Task]) -> None:
        setattr(self, category.value, tasks)

    def all_tasks(self) -> list[Task]:
        out: list[Task] = []
        for category in Category:
            out.extend(self.tasks_in(category))
        return out

    def find_task(self, task_id: int) -> Task | None:
        for task in self.all_tasks():
            if task.id == task_id:
                return task
        return None

    def find_habit(self, habit_id: int) -> Habit | None:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            category.value: [t.to_document() for t in self.tasks_in(category)] for category in Category
        }
        doc["habits"] = [h.to_document() for h in self.habits]
        doc["reminders"] = [r.to_document() for r in self.reminders]
        doc["completions"] = dict(self.completions)
        return doc

    @classmethod
    def from_document(cls, doc: Any) -> TrackerData:
        """
        Build state from an exported (or locally cached) document.

        Raises DocumentError on anything malformed; never returns partial data.
        Legacy list names (daily/weekly/monthly) are accepted when the new names are absent.
        """
        if not isinstance(doc, dict):
            raise DocumentError("document must be a JSON object")

        data = cls()
        try:
            for category in Category:
                items = doc.get(category.value)
                if items is None:
                    for legacy, target in LEGACY_CATEGORY_KEYS.items():
                        if target is category and legacy in doc:
                            items = doc[legacy]
                            break
                data.set_tasks(category, [Task.from_document(category, t) for t in _as_list(items, category.value)])

            data.habits = [Habit.from_document(h) for h in _as_list(doc.get("habits"), "habits")]
            data.reminders = [Reminder.from_document(r) for r in _as_list(doc.get("reminders"), "reminders")]

            completions = doc.get("completions") or {}
            if not isinstance(completions, dict):
                raise DocumentError("'completions' must be an object")
            data.completions = {str(k): bool(v) for k, v in completions.items()}
        except DocumentError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DocumentError(f"malformed document: {e}") from e

        return data


def _as_list(items: Any, name: str) -> list[dict[str, Any]]:
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise DocumentError(f"'{name}' must be a list of objects")
    return items
