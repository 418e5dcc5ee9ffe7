from __future__ import annotations

from datetime import datetime


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def format_hhmm(value: datetime) -> str:
    return value.strftime("%H:%M")
