# src/streakboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Console thresholds by logger-name prefix; the longest matching prefix wins.
# The file handler ignores these and keeps everything at file_level.
_CONSOLE_THRESHOLDS: dict[str, int] = {
    "streakboard": logging.NOTSET,
    # one DEBUG line per request; only failures belong on the console
    "streakboard.backend.rest": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "py.warnings": logging.ERROR,
}
_DEFAULT_THRESHOLD = logging.ERROR


def _threshold_for(name: str) -> int:
    best, level = "", _DEFAULT_THRESHOLD
    for prefix, threshold in _CONSOLE_THRESHOLDS.items():
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best, level = prefix, threshold
    return level


class _ConsoleNoiseFilter(logging.Filter):
    """Keeps the REPL readable while the reminder checker and HTTP client log in the background."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= _threshold_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/streakboard",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route all logging to stderr (filtered) and to <log_dir>/streakboard.log.

    Call once from the entrypoint, before anything logs. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "streakboard.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)

    # Same threshold at the source, so the file log skips their DEBUG chatter too.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(_CONSOLE_THRESHOLDS[name])

    return log_file
