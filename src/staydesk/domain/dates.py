"""Calendar helpers shared by the quote and availability engines.

Stays are half-open ranges: a stay from check-in D1 to check-out D2 covers
the nights D1 .. D2-1. The departure day is never a night of the stay.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterator


def start_of_day(value: date | datetime) -> date:
    """Truncate a datetime to its calendar day (dates pass through)."""
    if isinstance(value, datetime):
        return value.date()
    return value


def add_days(value: date | datetime, n: int) -> date:
    """Add n calendar days (n may be negative), truncated to the day."""
    return start_of_day(value) + timedelta(days=n)


def format_date_only(value: date | datetime) -> str:
    """Render as YYYY-MM-DD."""
    return start_of_day(value).isoformat()


def iter_nights(check_in: date | datetime, check_out: date | datetime) -> Iterator[date]:
    """Yield every night of [check_in, check_out).

    Yields nothing when check_out <= check_in; callers validate date order.
    """
    current = start_of_day(check_in)
    end = start_of_day(check_out)
    while current < end:
        yield current
        current = add_days(current, 1)


def nights_between(check_in: date | datetime, check_out: date | datetime) -> list[str]:
    """Formatted nights of [check_in, check_out), in calendar order."""
    return [format_date_only(d) for d in iter_nights(check_in, check_out)]
