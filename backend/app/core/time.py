"""Time utilities for timezone-aware UTC datetimes and billing dates."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def today() -> date:
    """Calendar date used for issue dates, payment dates and overdue checks."""
    return utc_now().date()


def first_of_month(value: date) -> date:
    return value.replace(day=1)
