# tests/test_reminders.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from streakboard.tracker import reminders as reminders_module
from streakboard.tracker.models import Reminder
from streakboard.tracker.reminders import check_reminders, run_reminder_checker

from .fakes import RecordingNotifier
from .helpers import MONDAY


def _reminder(reminder_id: int, minutes: int, **kw) -> Reminder:
    return Reminder(id=reminder_id, text=f"r{reminder_id}", time=MONDAY + timedelta(minutes=minutes), **kw)


def test_due_reminder_fires_once(state) -> None:
    state.data.reminders = [_reminder(1, -5), _reminder(2, 30)]
    notifier = RecordingNotifier()

    fired = check_reminders(state, notifier, MONDAY)
    assert [r.id for r in fired] == [1]
    assert [(n.title, n.body) for n in notifier.sent] == [("Reminder", "r1")]

    assert check_reminders(state, notifier, MONDAY + timedelta(minutes=1)) == []
    assert len(notifier.sent) == 1


def test_future_reminder_fires_when_its_time_comes(state) -> None:
    state.data.reminders = [_reminder(1, 30)]
    notifier = RecordingNotifier()

    assert check_reminders(state, notifier, MONDAY) == []
    assert [r.id for r in check_reminders(state, notifier, MONDAY + timedelta(minutes=30))] == [1]


def test_completed_and_notified_reminders_are_skipped(state) -> None:
    state.data.reminders = [_reminder(1, -5, completed=True), _reminder(2, -5, notified=True)]
    notifier = RecordingNotifier()

    assert check_reminders(state, notifier, MONDAY) == []
    assert notifier.sent == []


def test_broken_notifier_does_not_refire(state) -> None:
    state.data.reminders = [_reminder(1, -1)]
    notifier = RecordingNotifier(broken=True)

    assert [r.id for r in check_reminders(state, notifier, MONDAY)] == [1]
    assert state.data.reminders[0].notified is True

    notifier.broken = False
    assert check_reminders(state, notifier, MONDAY) == []


@pytest.mark.asyncio
async def test_checker_loop_notifies_until_cancelled(state) -> None:
    state.data.reminders = [_reminder(1, -60 * 24 * 365 * 20)]
    notifier = RecordingNotifier()

    runner = asyncio.create_task(run_reminder_checker(state, notifier, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(notifier.sent) == 1, "Reminder should fire exactly once"


@pytest.mark.asyncio
async def test_checker_loop_survives_a_failing_check(state, monkeypatch) -> None:
    state.data.reminders = [_reminder(1, -60 * 24 * 365 * 20)]
    notifier = RecordingNotifier()
    calls = {"n": 0}
    real_check = reminders_module.check_reminders

    def flaky_check(state, notifier, now=None):
        calls["n"] += 1
        if calls["n"] == 1:
            raise TypeError("can't compare offset-naive and offset-aware datetimes")
        return real_check(state, notifier, now)

    monkeypatch.setattr(reminders_module, "check_reminders", flaky_check)

    runner = asyncio.create_task(run_reminder_checker(state, notifier, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    assert not runner.done(), "A failing check must not stop the checker"
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert calls["n"] >= 2
    assert len(notifier.sent) == 1
