# src/streakboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads data, then runs:
- the reminder checker as a background asyncio task,
- the console REPL until /exit or EOF.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import Settings, get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..logging_setup import setup_logging
from ..tracker.api import load_all, refresh_stats, remove_expired_tasks
from ..tracker.reminders import run_reminder_checker

logger = logging.getLogger(__name__)


async def _run(settings: Settings) -> None:
    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        if not await load_all(state):
            logger.warning("Datastore unreachable; working from the local snapshot.")
        await remove_expired_tasks(state)
        await refresh_stats(state)

        checker = asyncio.create_task(
            run_reminder_checker(
                state,
                ConsoleNotifier(),
                interval_seconds=settings.reminder_check_seconds,
            )
        )
        try:
            await run_console_loop(state)
        finally:
            checker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await checker
    finally:
        await shutdown_state(state)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")

    logger.info("Bye.")


if __name__ == "__main__":
    main()
