# tests/helpers.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

# Fixed local timezone so date logic never depends on the machine running the tests.
TZ = timezone(timedelta(hours=2))

# 2026-10-19 is a Monday.
MONDAY = datetime(2026, 10, 19, 10, 0, tzinfo=TZ)
FRIDAY = datetime(2026, 10, 23, 10, 0, tzinfo=TZ)
SATURDAY = datetime(2026, 10, 24, 10, 0, tzinfo=TZ)
SUNDAY = datetime(2026, 10, 25, 10, 0, tzinfo=TZ)


def at(year: int, month: int, day: int, hour: int = 10, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=TZ)
