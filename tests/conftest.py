# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from streakboard.core.state import AppState

from .fakes import FakeBackend


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the tracker modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        snapshot_path=tmp_path / "snapshot.json",
        reminder_check_seconds=60,
        confirm_delete=False,
    )


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def state(settings: SimpleNamespace, backend: FakeBackend) -> AppState:
    """AppState wired with the in-memory fake backend."""
    return AppState(settings=settings, backend=backend)
