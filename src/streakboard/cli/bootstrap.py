# src/streakboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the concrete datastore into AppState (REST if configured, offline otherwise),
- persists the local snapshot on shutdown.
"""

from __future__ import annotations

import logging

from ..backend.offline import OfflineBackend
from ..backend.rest import RestBackend
from ..config import get_settings
from ..core.ports import PersistenceBackend
from ..core.state import AppState
from ..tracker.snapshot import save_snapshot

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.snapshot_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    backend: PersistenceBackend
    try:
        backend = RestBackend.from_settings(settings)
    except (RuntimeError, ValueError) as e:
        # Demo mode: no remote datastore configured.
        logger.info("Using offline datastore: %s", e)
        backend = OfflineBackend()

    return AppState(settings=settings, backend=backend)


async def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    save_snapshot(getattr(state.settings, "snapshot_path", None), state.data)
    try:
        await state.backend.aclose()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)
