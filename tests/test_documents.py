# tests/test_documents.py

from __future__ import annotations

import json
from datetime import date, timedelta

import pytest

from streakboard.core.errors import DocumentError
from streakboard.tracker import api
from streakboard.tracker.models import TrackerData
from streakboard.tracker.reminders import check_reminders
from streakboard.tracker.rules import date_key, habit_completed_today
from streakboard.tracker.snapshot import load_snapshot, save_snapshot
from streakboard.tracker.views import reminders_view

from .fakes import RecordingNotifier
from .helpers import MONDAY


async def _populate(state) -> None:
    task = await api.add_task(state, "fullweek", "Gym", time="18:00", daily_tracking=True, now=MONDAY)
    await api.add_task(state, "weekdays", "Standup", now=MONDAY)
    habit = await api.add_habit(state, "Read")
    await api.add_reminder(state, "Call mom", MONDAY + timedelta(hours=3))
    await api.toggle_task(state, task.id, MONDAY)
    await api.toggle_habit(state, habit.id, MONDAY)
    await api.refresh_stats(state, MONDAY)


@pytest.mark.asyncio
async def test_export_then_import_restores_identical_state(state, tmp_path) -> None:
    await _populate(state)
    before = state.data

    path = api.write_export(state, tmp_path / "out" / api.default_export_name(MONDAY.date()))
    state.replace_data(TrackerData())

    assert api.import_document(state, api.read_import(path), confirmed=True) is True
    assert state.data == before


@pytest.mark.asyncio
async def test_export_document_shape(state) -> None:
    await _populate(state)
    doc = api.export_document(state)

    assert set(doc) == {"today", "fullweek", "fullmonth", "weekdays", "habits", "reminders", "completions"}
    gym = doc["fullweek"][0]
    assert gym["originalText"] == "Gym"
    assert gym["text"] == "Gym - 6:00 PM"
    assert gym["dailyCompletions"] == {date_key(MONDAY.date()): True}
    assert doc["habits"][0]["streak"] == 1
    assert doc["completions"] == {date_key(MONDAY.date()): False}
    # JSON-serializable as is
    json.dumps(doc)


def test_default_export_name() -> None:
    assert api.default_export_name(date(2026, 3, 7)) == "productivity-data-2026-03-07.json"


@pytest.mark.asyncio
async def test_unconfirmed_import_keeps_state(state) -> None:
    await _populate(state)
    before = api.export_document(state)

    assert api.import_document(state, {"today": []}, confirmed=False) is False
    assert api.export_document(state) == before


@pytest.mark.parametrize(
    "document",
    [
        [],
        "not an object",
        {"today": "nope"},
        {"today": [{"text": "missing id"}]},
        {"habits": [{"id": "x", "text": "Read"}]},
        {"reminders": [{"id": 1, "text": "no time", "time": None}]},
        {"reminders": [{"id": 1, "text": "bad", "time": "yesterday-ish"}]},
        {"completions": ["Mon Oct 19 2026"]},
    ],
)
def test_malformed_document_is_rejected(state, document) -> None:
    with pytest.raises(DocumentError):
        api.import_document(state, document, confirmed=True)
    assert state.data == TrackerData()


@pytest.mark.asyncio
async def test_timestamps_without_offset_are_local_time(state) -> None:
    doc = {
        "today": [
            {"id": 1, "text": "Old", "expiresAt": "2000-01-01T23:59:59.999"},
            {"id": 3, "text": "Later", "expiresAt": "2099-01-01T23:59:59.999"},
        ],
        "habits": [{"id": 4, "text": "Read", "streak": 1, "lastCompleted": "2000-01-01T08:00"}],
        "reminders": [
            {"id": 2, "text": "Call", "time": "2000-01-01T09:00"},
            {"id": 5, "text": "Aware", "time": "1999-12-31T09:00+00:00"},
        ],
    }
    assert api.import_document(state, doc, confirmed=True) is True
    for ts in (state.data.today[0].expires_at, state.data.reminders[0].time, state.data.habits[0].last_completed):
        assert ts is not None and ts.tzinfo is not None

    items = reminders_view(state.data, MONDAY)
    assert [r.id for r in items] == [5, 2]
    assert all(r.overdue for r in items)

    notifier = RecordingNotifier()
    assert sorted(r.id for r in check_reminders(state, notifier, MONDAY)) == [2, 5]

    assert await api.remove_expired_tasks(state, MONDAY) == 1
    assert [t.id for t in state.data.today] == [3]
    assert habit_completed_today(state.data.habits[0], MONDAY) is False


@pytest.mark.asyncio
async def test_offline_sweep_accepts_rows_without_offset(backend) -> None:
    await backend.create_task({"type": "today", "text": "Old", "expires_at": "2000-01-01T23:59:59"})
    await backend.create_reminder({"text": "b", "time": "2000-01-02T09:00", "completed": False})
    await backend.create_reminder({"text": "a", "time": "2000-01-01T09:00+00:00", "completed": False})

    await backend.delete_expired_tasks(MONDAY)

    assert await backend.list_tasks() == []
    assert [r["text"] for r in await backend.list_reminders()] == ["a", "b"]


def test_read_import_rejects_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(DocumentError):
        api.read_import(path)


def test_legacy_list_names_are_accepted() -> None:
    doc = {
        "daily": [{"id": 1, "text": "Read"}],
        "weekly": [{"id": 2, "text": "Gym", "completed": True}],
        "monthly": [],
        "habits": [],
    }
    data = TrackerData.from_document(doc)

    assert [t.original_text for t in data.today] == ["Read"]
    assert [t.completed for t in data.fullweek] == [True]
    assert data.fullmonth == []
    assert data.weekdays == []
    assert data.reminders == []


def test_new_names_win_over_legacy_ones() -> None:
    doc = {"today": [{"id": 1, "text": "new"}], "daily": [{"id": 2, "text": "old"}]}
    assert [t.text for t in TrackerData.from_document(doc).today] == ["new"]


@pytest.mark.asyncio
async def test_snapshot_roundtrip(state, tmp_path) -> None:
    await _populate(state)
    path = tmp_path / "cache" / "snapshot.json"

    save_snapshot(path, state.data)

    assert load_snapshot(path) == state.data
    assert not path.with_suffix(".tmp").exists()


def test_unreadable_snapshot_is_ignored(tmp_path) -> None:
    path = tmp_path / "snapshot.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert load_snapshot(path) is None
    assert load_snapshot(tmp_path / "missing.json") is None
    assert load_snapshot(None) is None
