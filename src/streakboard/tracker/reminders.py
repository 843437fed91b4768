# src/streakboard/tracker/reminders.py

"""
Reminder checker.

A small polling loop that:
- looks for reminders whose time has come,
- tells the user via an injected notifier port,
- marks them notified so each reminder fires at most once.

It only reads and flags in-memory state; it never calls the datastore.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..core.ports import Notifier
from ..core.state import AppState
from .models import Reminder
from .rules import local_now

logger = logging.getLogger(__name__)


def check_reminders(state: AppState, notifier: Notifier, now: datetime | None = None) -> list[Reminder]:
    """Fire every due, active, not-yet-notified reminder. Returns the reminders fired."""
    if now is None:
        now = local_now()

    fired: list[Reminder] = []
    for reminder in state.data.reminders:
        if reminder.completed or reminder.notified or reminder.time > now:
            continue
        try:
            notifier.notify("Reminder", reminder.text)
        except Exception:
            logger.exception("notify failed reminder_id=%s", reminder.id)
        reminder.notified = True
        fired.append(reminder)
        logger.info("Reminder %s fired", reminder.id)
    return fired


async def run_reminder_checker(
        state: AppState,
        notifier: Notifier,
        *,
        interval_seconds: float = 60.0,
) -> None:
    """
    Check reminders immediately, then once every interval_seconds, forever.
    A failing check is logged and the next tick runs as usual.

    To stop the checker, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            check_reminders(state, notifier)
        except Exception:
            logger.exception("reminder check failed")

        await asyncio.sleep(sleep_s)
