# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from streakboard.backend.offline import OfflineBackend
from streakboard.backend.rest import RestBackend
from streakboard.cli.bootstrap import create_initial_state, shutdown_state
from streakboard.config import Settings

_VARS = (
    "STREAKBOARD_BACKEND_URL",
    "STREAKBOARD_BACKEND_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "STREAKBOARD_DATA_DIR",
    "STREAKBOARD_SNAPSHOT_PATH",
    "STREAKBOARD_REMINDER_CHECK_SECONDS",
    "STREAKBOARD_CONFIRM_DELETE",
    "STREAKBOARD_CONNECT_TIMEOUT_SECONDS",
    "STREAKBOARD_READ_TIMEOUT_SECONDS",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()
    assert s.backend_url is None
    assert s.backend_key is None
    assert s.data_dir == Path(".local/streakboard")
    assert s.snapshot_path == Path(".local/streakboard/snapshot.json")
    assert s.reminder_check_seconds == 60
    assert s.confirm_delete is True


def test_prefixed_names_win_over_supabase_fallbacks(clean_env) -> None:
    clean_env.setenv("SUPABASE_URL", "https://legacy.supabase.co")
    clean_env.setenv("SUPABASE_ANON_KEY", "legacy-key")
    s = Settings.from_env()
    assert (s.backend_url, s.backend_key) == ("https://legacy.supabase.co", "legacy-key")

    clean_env.setenv("STREAKBOARD_BACKEND_URL", " https://new.supabase.co ")
    assert Settings.from_env().backend_url == "https://new.supabase.co"


def test_invalid_numbers_fall_back_to_defaults(clean_env) -> None:
    clean_env.setenv("STREAKBOARD_REMINDER_CHECK_SECONDS", "soon")
    clean_env.setenv("STREAKBOARD_CONNECT_TIMEOUT_SECONDS", "8")
    clean_env.setenv("STREAKBOARD_READ_TIMEOUT_SECONDS", "2")
    clean_env.setenv("STREAKBOARD_CONFIRM_DELETE", "off")

    s = Settings.from_env()
    assert s.reminder_check_seconds == 60
    assert s.read_timeout_seconds == 8.0
    assert s.confirm_delete is False


def test_snapshot_follows_data_dir(clean_env, tmp_path) -> None:
    clean_env.setenv("STREAKBOARD_DATA_DIR", str(tmp_path))
    assert Settings.from_env().snapshot_path == tmp_path / "snapshot.json"


@pytest.mark.asyncio
async def test_bootstrap_without_backend_uses_offline_store(clean_env, tmp_path) -> None:
    clean_env.setenv("STREAKBOARD_DATA_DIR", str(tmp_path / "data"))
    state = create_initial_state(settings=Settings.from_env())

    assert isinstance(state.backend, OfflineBackend)
    assert (tmp_path / "data").is_dir()

    await shutdown_state(state)
    assert (tmp_path / "data" / "snapshot.json").exists()


@pytest.mark.asyncio
async def test_bootstrap_with_backend_uses_rest(clean_env, tmp_path) -> None:
    clean_env.setenv("STREAKBOARD_DATA_DIR", str(tmp_path))
    clean_env.setenv("STREAKBOARD_BACKEND_URL", "https://x.supabase.co")
    clean_env.setenv("STREAKBOARD_BACKEND_KEY", "anon")
    state = create_initial_state(settings=Settings.from_env())
    try:
        assert isinstance(state.backend, RestBackend)
    finally:
        await shutdown_state(state)
