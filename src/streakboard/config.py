# src/streakboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Accepts the SUPABASE_* names used by older deployments as fallbacks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "STREAKBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# Real environment variables win over .env values.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote datastore (PostgREST / Supabase) ----
    backend_url: Optional[str]
    backend_key: Optional[str]
    connect_timeout_seconds: float
    read_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    snapshot_path: Path

    # ---- Behaviour ----
    reminder_check_seconds: int
    confirm_delete: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="streakboard") or "streakboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        backend_url = _first_env(_k("BACKEND_URL"), "SUPABASE_URL", default=None)
        backend_key = _first_env(_k("BACKEND_KEY"), "SUPABASE_ANON_KEY", default=None)

        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout_seconds = _env_float(_k("READ_TIMEOUT_SECONDS"), 15.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/streakboard"))
        snapshot_path = _env_path(_k("SNAPSHOT_PATH"), data_dir / "snapshot.json")

        reminder_check_seconds = max(1, _env_int(_k("REMINDER_CHECK_SECONDS"), 60))
        confirm_delete = _env_bool(_k("CONFIRM_DELETE"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend_url=backend_url.strip() if backend_url else None,
            backend_key=backend_key.strip() if backend_key else None,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=max(read_timeout_seconds, connect_timeout_seconds),
            data_dir=data_dir,
            snapshot_path=snapshot_path,
            reminder_check_seconds=reminder_check_seconds,
            confirm_delete=confirm_delete,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
