# src/streakboard/tracker/api.py

"""
Tracker operations used by the presentation layer.

Every operation takes the explicitly owned AppState first.

Failure semantics (BackendError propagates to the caller in all cases):
- add/delete: the backend call goes first; local state changes only after it succeeds
- task and habit toggles: applied locally first, reverted when the backend call fails
- completion records (refresh_stats): applied locally first, reverted and logged on failure,
  so the next refresh retries; statistics refresh itself never raises
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..core.errors import BackendError, DocumentError, ItemNotFound
from ..core.ports import Row
from ..core.state import AppState
from .models import Category, Habit, Reminder, Task, TrackerData, format_ts, parse_ts
from .rules import (
    compute_expiry,
    daily_aggregate,
    date_key,
    format_display_text,
    is_expired,
    local_now,
    next_habit_state,
    overall_streak,
    parse_time_of_day,
    toggle_task as _toggle_task_state,
)
from .snapshot import load_snapshot, save_snapshot
from .views import Stats

logger = logging.getLogger(__name__)

_MISSING = object()


def _snapshot_path(state: AppState) -> Any:
    return getattr(state.settings, "snapshot_path", None)


def _data_from_rows(
    tasks: list[Row],
    habits: list[Row],
    reminders: list[Row],
    completions: list[Row],
) -> TrackerData:
    data = TrackerData()

    for row in tasks:
        try:
            category = Category.parse(row.get("type"))
        except ValueError:
            logger.debug("Skipping task id=%s with unknown type=%r", row.get("id"), row.get("type"))
            continue
        data.tasks_in(category).append(Task.from_row(row))

    data.habits = [Habit.from_row(r) for r in habits]
    data.reminders = [Reminder.from_row(r) for r in reminders]
    data.completions = {str(r["date"]): bool(r.get("completed")) for r in completions}
    return data


# ---- loading ----

async def load_all(state: AppState) -> bool:
    """
    Replace state.data with everything the backend holds.

    The four collections are read concurrently; if any read fails the whole load
    fails and the last local snapshot (or empty data) is used instead.
    Returns True when the data came from the backend.
    """
    backend = state.backend
    try:
        tasks, habits, reminders, completions = await asyncio.gather(
            backend.list_tasks(),
            backend.list_habits(),
            backend.list_reminders(),
            backend.list_completions(),
        )
        data = _data_from_rows(tasks, habits, reminders, completions)
    except (BackendError, KeyError, TypeError, ValueError):
        logger.warning("Error loading data from the datastore; falling back to local snapshot.", exc_info=True)
        state.replace_data(load_snapshot(_snapshot_path(state)) or TrackerData())
        state.online = False
        return False

    state.replace_data(data)
    state.online = True
    save_snapshot(_snapshot_path(state), data)
    logger.info(
        "Loaded %d tasks, %d habits, %d reminders, %d completion records",
        len(data.all_tasks()),
        len(data.habits),
        len(data.reminders),
        len(data.completions),
    )
    return True


async def remove_expired_tasks(state: AppState, now: datetime | None = None) -> int:
    """Lazy sweep: drop tasks whose expiry is in the past. Returns how many were removed locally."""
    if now is None:
        now = local_now()

    try:
        await state.backend.delete_expired_tasks(now)
    except BackendError:
        logger.exception("Error removing expired tasks")
        return 0

    removed = 0
    for category in Category:
        tasks = state.data.tasks_in(category)
        kept = [t for t in tasks if not is_expired(t.expires_at, now)]
        removed += len(tasks) - len(kept)
        state.data.set_tasks(category, kept)

    if removed:
        logger.info("Removed %d expired tasks", removed)
    return removed


# ---- tasks ----

async def add_task(
    state: AppState,
    category: Category | str,
    text: str,
    *,
    time: str | None = None,
    daily_tracking: bool = False,
    now: datetime | None = None,
) -> Task:
    text = (text or "").strip()
    if not text:
        raise ValueError("Task text is required")
    category = Category.parse(category)
    time_of_day = parse_time_of_day(time)
    if now is None:
        now = local_now()

    display_text = format_display_text(text, time_of_day)
    expires_at = compute_expiry(category, now)

    stored = await state.backend.create_task(
        {
            "text": display_text,
            "original_text": text,
            "time": time_of_day,
            "type": category.value,
            "completed": False,
            "expires_at": format_ts(expires_at),
            "is_daily_tracking": bool(daily_tracking),
            "daily_completions": {},
        }
    )

    task = Task(
        id=int(stored["id"]),
        category=category,
        text=display_text,
        original_text=text,
        time=time_of_day,
        completed=False,
        created_at=parse_ts(stored.get("created_at")),
        expires_at=expires_at,
        is_daily_tracking=bool(daily_tracking),
        daily_completions={},
    )
    state.data.tasks_in(category).append(task)
    logger.info("Task added id=%s category=%s daily=%s", task.id, category.value, task.is_daily_tracking)
    return task


def _require_task(state: AppState, task_id: int) -> Task:
    task = state.data.find_task(int(task_id))
    if task is None:
        raise ItemNotFound(f"Task #{task_id} not found.")
    return task


async def toggle_task(state: AppState, task_id: int, now: datetime | None = None) -> Task:
    """Flip today's completion of a task; reverted locally if the backend rejects it."""
    task = _require_task(state, task_id)
    if now is None:
        now = local_now()

    prev_completed = task.completed
    prev_daily = dict(task.daily_completions)
    updates = _toggle_task_state(task, now.date())

    try:
        await state.backend.update_task(task.id, updates)
    except BackendError:
        task.completed = prev_completed
        task.daily_completions = prev_daily
        logger.warning("Task toggle failed id=%s; reverted", task.id)
        raise

    logger.debug("Task toggled id=%s updates=%s", task.id, updates)
    return task


async def delete_task(state: AppState, task_id: int) -> None:
    task = _require_task(state, task_id)
    await state.backend.delete_task(task.id)
    tasks = state.data.tasks_in(task.category)
    state.data.set_tasks(task.category, [t for t in tasks if t.id != task.id])
    logger.info("Task deleted id=%s", task.id)


async def clear_completed(state: AppState) -> int:
    """Delete every task whose single completion flag is set. Daily-tracking tasks are kept."""
    done = [t for t in state.data.all_tasks() if not t.is_daily_tracking and t.completed]
    for task in done:
        await delete_task(state, task.id)
    return len(done)


# ---- habits ----

async def add_habit(state: AppState, text: str, *, time: str | None = None) -> Habit:
    text = (text or "").strip()
    if not text:
        raise ValueError("Habit text is required")
    time_of_day = parse_time_of_day(time)
    display_text = format_display_text(text, time_of_day)

    stored = await state.backend.create_habit(
        {
            "text": display_text,
            "original_text": text,
            "time": time_of_day,
            "streak": 0,
            "last_completed": None,
        }
    )

    habit = Habit(
        id=int(stored["id"]),
        text=display_text,
        original_text=text,
        time=time_of_day,
        streak=0,
        last_completed=None,
        created_at=parse_ts(stored.get("created_at")),
    )
    state.data.habits.append(habit)
    logger.info("Habit added id=%s", habit.id)
    return habit


def _require_habit(state: AppState, habit_id: int) -> Habit:
    habit = state.data.find_habit(int(habit_id))
    if habit is None:
        raise ItemNotFound(f"Habit #{habit_id} not found.")
    return habit


async def toggle_habit(state: AppState, habit_id: int, now: datetime | None = None) -> Habit:
    """Check/uncheck a habit for today; reverted locally if the backend rejects it."""
    habit = _require_habit(state, habit_id)
    if now is None:
        now = local_now()

    prev_streak, prev_last = habit.streak, habit.last_completed
    update = next_habit_state(habit, now)
    habit.streak = update.streak
    habit.last_completed = update.last_completed

    try:
        await state.backend.update_habit(
            habit.id,
            {"streak": update.streak, "last_completed": format_ts(update.last_completed)},
        )
    except BackendError:
        habit.streak, habit.last_completed = prev_streak, prev_last
        logger.warning("Habit toggle failed id=%s; reverted", habit.id)
        raise

    logger.debug("Habit toggled id=%s streak=%s", habit.id, habit.streak)
    return habit


async def delete_habit(state: AppState, habit_id: int) -> None:
    habit = _require_habit(state, habit_id)
    await state.backend.delete_habit(habit.id)
    state.data.habits = [h for h in state.data.habits if h.id != habit.id]
    logger.info("Habit deleted id=%s", habit.id)


# ---- reminders ----

async def add_reminder(state: AppState, text: str, when: datetime | None) -> Reminder:
    text = (text or "").strip()
    if not text or when is None:
        raise ValueError("Please enter both reminder text and time")
    if when.tzinfo is None:
        when = when.astimezone()

    stored = await state.backend.create_reminder(
        {"text": text, "time": format_ts(when), "completed": False, "notified": False}
    )

    reminder = Reminder(id=int(stored["id"]), text=text, time=when)
    state.data.reminders.append(reminder)
    logger.info("Reminder added id=%s at=%s", reminder.id, when.isoformat())
    return reminder


async def delete_reminder(state: AppState, reminder_id: int) -> None:
    if not any(r.id == int(reminder_id) for r in state.data.reminders):
        raise ItemNotFound(f"Reminder #{reminder_id} not found.")
    await state.backend.delete_reminder(int(reminder_id))
    state.data.reminders = [r for r in state.data.reminders if r.id != int(reminder_id)]
    logger.info("Reminder deleted id=%s", reminder_id)


# ---- statistics ----

async def refresh_stats(state: AppState, now: datetime | None = None) -> Stats:
    """
    Recompute today's aggregate and the overall streak.

    Side effect: when today's fully-completed flag differs from the stored
    completion record, the record is upserted.
    """
    if now is None:
        now = local_now()
    today = now.date()
    data = state.data

    agg = daily_aggregate(data, today)
    key = date_key(today)
    fully = agg.fully_completed

    previous = data.completions.get(key, _MISSING)
    if previous is _MISSING or previous != fully:
        data.completions[key] = fully
        try:
            await state.backend.upsert_completion(key, fully)
        except BackendError:
            logger.warning("Error updating completion record for %s", key, exc_info=True)
            if previous is _MISSING:
                data.completions.pop(key, None)
            else:
                data.completions[key] = previous

    return Stats(
        completed_today=agg.completed,
        total_today=agg.total,
        streak=overall_streak(data.completions, today),
    )


# ---- export / import ----

def export_document(state: AppState) -> dict[str, Any]:
    return state.data.to_document()


def default_export_name(today: date) -> str:
    return f"productivity-data-{today.isoformat()}.json"


def write_export(state: AppState, path: str | Path) -> Path:
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(export_document(state), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Exported state to %s", path)
    return path


def read_import(path: str | Path) -> Any:
    path = Path(path).expanduser()
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DocumentError(f"{path.name} is not valid JSON: {e}") from e


def import_document(state: AppState, document: Any, *, confirmed: bool) -> bool:
    """
    Replace all in-memory state with `document`.

    The document is fully validated first (DocumentError, state untouched).
    Nothing is replaced unless the user confirmed; returns whether it was.
    """
    data = TrackerData.from_document(document)
    if not confirmed:
        return False
    state.replace_data(data)
    logger.info("Imported state: %d tasks, %d habits", len(data.all_tasks()), len(data.habits))
    return True
