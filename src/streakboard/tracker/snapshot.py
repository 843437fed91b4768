# src/streakboard/tracker/snapshot.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.errors import DocumentError
from .models import TrackerData

logger = logging.getLogger(__name__)


def load_snapshot(path: str | Path | None) -> TrackerData | None:
    """Load the last locally cached state (best-effort). Returns None when unusable."""
    if not path:
        return None
    path = Path(path)
    if not path.exists():
        return None
    try:
        doc = json.loads(path.read_text("utf-8"))
        data = TrackerData.from_document(doc)
    except (OSError, ValueError, DocumentError):
        logger.exception("Failed to load snapshot from %s", path)
        return None
    logger.info(
        "Loaded snapshot: %d tasks, %d habits, %d reminders from %s",
        len(data.all_tasks()),
        len(data.habits),
        len(data.reminders),
        path,
    )
    return data


def save_snapshot(path: str | Path | None, data: TrackerData) -> None:
    """Write the state atomically next to its final location (best-effort)."""
    if not path:
        return
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data.to_document(), ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)
        logger.debug("Saved snapshot to %s", path)
    except OSError:
        logger.exception("Failed to save snapshot to %s", path)
