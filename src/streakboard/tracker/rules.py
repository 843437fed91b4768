# src/streakboard/tracker/rules.py

"""
Task lifecycle & habit streak rules.

Everything here is pure: callers pass `now` (an aware local datetime) or `today`
(a calendar date) and get a value back. Nothing touches the backend or the clock.

Rules:
- expiry is fixed at task creation from the task's category,
- a task is expired strictly after its expiry instant,
- daily-tracking tasks keep one completion flag per calendar date,
- a habit streak grows only on consecutive calendar days,
- the overall streak counts trailing fully-completed days ending today.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .models import Category, Habit, Task, TrackerData

_TIME_OF_DAY = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Mon..Fri as returned by date.weekday()
_FRIDAY = 4
_SUNDAY = 6


def local_now() -> datetime:
    return datetime.now().astimezone()


def date_key(day: date) -> str:
    """Calendar date as stored in completion records, e.g. 'Mon Oct 19 2026'."""
    return day.strftime("%a %b %d %Y")


def local_day(ts: datetime, now: datetime) -> date:
    """Calendar date of `ts` in the timezone `now` is expressed in."""
    return ts.astimezone(now.tzinfo).date()


def is_weekday(day: date) -> bool:
    return day.weekday() <= _FRIDAY


# ---- expiry ----

def _end_of_day(ts: datetime) -> datetime:
    return ts.replace(hour=23, minute=59, second=59, microsecond=999000)


def compute_expiry(category: Category, now: datetime) -> datetime:
    """
    Expiry instant for a task created at `now`.

    today     -> end of today
    fullweek  -> end of the coming Sunday (today when today is Sunday)
    fullmonth -> end of the last day of this month
    weekdays  -> end of this week's Friday; next Friday on weekends
    """
    if category is Category.TODAY:
        return _end_of_day(now)

    if category is Category.FULLWEEK:
        days = (_SUNDAY - now.weekday()) % 7
        return _end_of_day(now + timedelta(days=days))

    if category is Category.FULLMONTH:
        last = calendar.monthrange(now.year, now.month)[1]
        return _end_of_day(now.replace(day=last))

    if category is Category.WEEKDAYS:
        days = (_FRIDAY - now.weekday()) % 7
        return _end_of_day(now + timedelta(days=days))

    raise ValueError(f"Unknown category: {category!r}")


def is_expired(expires_at: datetime | None, now: datetime) -> bool:
    if expires_at is None:
        return False
    return now > expires_at


# ---- task completion ----

def is_completed_today(task: Task, today: date) -> bool:
    if task.is_daily_tracking:
        return bool(task.daily_completions.get(date_key(today), False))
    return bool(task.completed)


def toggle_task(task: Task, today: date) -> dict[str, object]:
    """
    Flip the task's completion for `today` in place.

    Returns the partial row update to persist. Daily-tracking tasks only touch
    today's entry; every other date is kept.
    """
    if task.is_daily_tracking:
        key = date_key(today)
        task.daily_completions[key] = not task.daily_completions.get(key, False)
        return {"daily_completions": dict(task.daily_completions)}

    task.completed = not task.completed
    return {"completed": task.completed}


# ---- habits ----

@dataclass(frozen=True, slots=True)
class HabitUpdate:
    streak: int
    last_completed: datetime | None


def habit_completed_today(habit: Habit, now: datetime) -> bool:
    if habit.last_completed is None:
        return False
    return local_day(habit.last_completed, now) == now.date()


def next_habit_state(habit: Habit, now: datetime) -> HabitUpdate:
    """
    Streak/last_completed after the user toggles the habit at `now`.

    Checking: +1 when the previous completion was yesterday (or never), else restart at 1.
    Unchecking: -1 (floored at 0); last_completed becomes "24h ago" because the
    previous completion instant is not retained, or None once the streak hits 0.
    """
    if habit_completed_today(habit, now):
        streak = max(0, habit.streak - 1)
        last = now - timedelta(days=1) if streak > 0 else None
        return HabitUpdate(streak=streak, last_completed=last)

    yesterday = now.date() - timedelta(days=1)
    if habit.last_completed is None or local_day(habit.last_completed, now) == yesterday:
        streak = habit.streak + 1
    else:
        streak = 1
    return HabitUpdate(streak=streak, last_completed=now)


# ---- daily aggregate ----

@dataclass(frozen=True, slots=True)
class DailyAggregate:
    completed: int
    total: int

    @property
    def fully_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total


def due_today(data: TrackerData, today: date) -> list[Task]:
    """Tasks counted for `today`: every category, weekdays tasks only Mon-Fri."""
    out: list[Task] = []
    out.extend(data.today)
    out.extend(data.fullweek)
    out.extend(data.fullmonth)
    if is_weekday(today):
        out.extend(data.weekdays)
    return out


def daily_aggregate(data: TrackerData, today: date) -> DailyAggregate:
    due = due_today(data, today)
    done = sum(1 for t in due if is_completed_today(t, today))
    return DailyAggregate(completed=done, total=len(due))


def overall_streak(completions: Mapping[str, bool], today: date) -> int:
    """Consecutive days ending today whose completion record is exactly True."""
    streak = 0
    cursor = today
    while completions.get(date_key(cursor)) is True:
        streak += 1
        cursor = cursor - timedelta(days=1)
    return streak


# ---- input helpers ----

def parse_time_of_day(raw: str | None) -> str | None:
    """Normalize 'H:MM' / 'HH:MM' to 'HH:MM'. Empty -> None, invalid -> ValueError."""
    if raw is None or not raw.strip():
        return None
    m = _TIME_OF_DAY.match(raw.strip())
    if not m:
        raise ValueError(f"Invalid time of day: {raw!r}. Use HH:MM.")
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def format_display_text(text: str, time_of_day: str | None) -> str:
    """'Read' + '15:05' -> 'Read - 3:05 PM'."""
    if not time_of_day:
        return text
    hours, minutes = time_of_day.split(":")
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour == 0 else hour - 12 if hour > 12 else hour
    return f"{text} - {display_hour}:{minutes} {ampm}"
