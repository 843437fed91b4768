# src/streakboard/tracker/views.py

"""
View models: what a presentation layer renders.

Pure projections of TrackerData; recomputed on demand, never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from .models import Category, TrackerData
from .rules import due_today, habit_completed_today, is_completed_today


@dataclass(frozen=True, slots=True)
class Stats:
    completed_today: int
    total_today: int
    streak: int


@dataclass(frozen=True, slots=True)
class TaskItem:
    id: int
    text: str
    category: Category
    completed_today: bool
    is_daily_tracking: bool
    # Only meaningful for daily-tracking tasks.
    completed_days: int = 0


@dataclass(frozen=True, slots=True)
class HabitItem:
    id: int
    text: str
    streak: int
    completed_today: bool


@dataclass(frozen=True, slots=True)
class ReminderItem:
    id: int
    text: str
    time: datetime
    overdue: bool


def _task_item(task, today: date) -> TaskItem:
    completed_days = sum(1 for v in task.daily_completions.values() if v) if task.is_daily_tracking else 0
    return TaskItem(
        id=task.id,
        text=task.text,
        category=task.category,
        completed_today=is_completed_today(task, today),
        is_daily_tracking=task.is_daily_tracking,
        completed_days=completed_days,
    )


def today_view(data: TrackerData, today: date) -> list[TaskItem]:
    return [_task_item(t, today) for t in due_today(data, today)]


def category_view(data: TrackerData, category: Category, today: date) -> list[TaskItem]:
    return [_task_item(t, today) for t in data.tasks_in(category)]


def habits_view(data: TrackerData, now: datetime) -> list[HabitItem]:
    return [
        HabitItem(id=h.id, text=h.text, streak=h.streak, completed_today=habit_completed_today(h, now))
        for h in data.habits
    ]


def reminders_view(data: TrackerData, now: datetime) -> list[ReminderItem]:
    active = sorted((r for r in data.reminders if not r.completed), key=lambda r: r.time)
    return [ReminderItem(id=r.id, text=r.text, time=r.time, overdue=r.time < now) for r in active]
