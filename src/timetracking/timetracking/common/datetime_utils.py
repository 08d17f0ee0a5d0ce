from __future__ import annotations

from datetime import date, datetime, time, timezone


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str, *, end_of_day: bool = False) -> datetime:
    """Parse an ISO-8601 date or datetime into a naive UTC datetime.

    A bare date maps to midnight, or to the last microsecond of that day when
    ``end_of_day`` is set, so ``?end_date=2026-10-17`` covers the whole day.
    """
    value = value.strip()
    if len(value) == 10:
        day = parse_iso_date(value)
        return datetime.combine(day, time.max if end_of_day else time.min)

    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_utc() -> datetime:
    """Current server wall-clock time as naive UTC.

    Note: Wrapped so tests can inject a fixed clock.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_human_date(value: date) -> str:
    """Render a date the way user-facing messages show it, e.g. ``Oct 18, 2026``."""
    return f"{value:%b} {value.day}, {value.year}"
