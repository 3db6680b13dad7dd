from __future__ import annotations

from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str) -> time:
    """Parse an HH:MM (or HH:MM:SS) clock string into time, dropping seconds."""
    text = (value or "").strip()
    fmt = "%H:%M:%S" if text.count(":") == 2 else "%H:%M"
    return datetime.strptime(text, fmt).time().replace(second=0)


def format_clock_time(value: time) -> str:
    return value.strftime("%H:%M")


def minute_of(now: datetime) -> time:
    """Clock time of `now` truncated to the minute (HH:MM granularity)."""
    return now.time().replace(second=0, microsecond=0)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
