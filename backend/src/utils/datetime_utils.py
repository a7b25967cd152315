"""
Datetime utilities for consistent timezone handling across the application.

This module provides utilities to ensure all datetime operations use timezone-aware
datetimes consistently. All times are in Brasília time (UTC-3) for business logic,
including the boundaries of monthly billing periods.
"""

import logging
from datetime import datetime, timezone, timedelta, date
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# Brasília timezone constant (UTC-3, no daylight saving since 2019)
BRAZIL_TZ = timezone(timedelta(hours=-3))


def brazil_now() -> datetime:
    """
    Get current Brasília datetime (UTC-3).

    Returns:
        Current datetime with Brasília timezone
    """
    return datetime.now(BRAZIL_TZ)


def ensure_brazil(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware with Brasília timezone.

    Naive datetimes (as returned by SQLite) are assumed to already be
    Brasília wall-clock time.

    Args:
        dt: Datetime to ensure is Brasília timezone-aware

    Returns:
        Timezone-aware datetime in Brasília timezone, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=BRAZIL_TZ)
    else:
        return dt.astimezone(BRAZIL_TZ)


def parse_datetime_string_to_brazil(dt_str: str) -> datetime:
    """
    Parse an ISO format datetime string and convert to Brasília timezone.

    Handles:
    - ISO format with timezone (e.g., "2024-03-01T09:00:00-03:00")
    - ISO format with Z (UTC) (e.g., "2024-03-01T12:00:00Z")
    - ISO format without timezone (assumes Brasília time)

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    try:
        dt = datetime.fromisoformat(dt_str.replace('Z', '+00:00'))
    except ValueError as e:
        raise ValueError(f"Invalid datetime string format: {dt_str}") from e
    result = ensure_brazil(dt)
    assert result is not None
    return result


def parse_date_string(date_str: str) -> date:
    """
    Parse a date string in YYYY-MM-DD or DD/MM/YYYY format.

    Automatically normalizes single-digit months/days.

    Args:
        date_str: Date string in YYYY-MM-DD or DD/MM/YYYY format

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Date string cannot be empty")

    date_str = date_str.strip()

    if '/' in date_str:
        # Brazilian display format
        parts = date_str.split('/')
        if len(parts) != 3:
            raise ValueError(f"Invalid date format (expected YYYY-MM-DD or DD/MM/YYYY): {date_str}")
        day, month, year = parts
    elif '-' in date_str:
        parts = date_str.split('-')
        if len(parts) != 3:
            raise ValueError(f"Invalid date format (expected YYYY-MM-DD or DD/MM/YYYY): {date_str}")
        year, month, day = parts
    else:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or DD/MM/YYYY): {date_str}")

    normalized = f"{year.zfill(4)}-{month.zfill(2)}-{day.zfill(2)}"

    try:
        return datetime.strptime(normalized, '%Y-%m-%d').date()
    except ValueError as e:
        raise ValueError(f"Invalid date format (expected YYYY-MM-DD or DD/MM/YYYY): {date_str}") from e


def get_month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """
    Get the half-open bounds [start, end) of a calendar month in Brasília time.

    Args:
        year: Calendar year (>= 1)
        month: Month number (1-12)

    Returns:
        Tuple of (first instant of the month, first instant of the following month)

    Raises:
        ValueError: If month is outside 1-12 or year is not a positive calendar year
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    # datetime supports years 1..9999; December of 9999 has no following month
    if year < 1 or year > 9999 or (year == 9999 and month == 12):
        raise ValueError(f"Year out of supported range: {year}")

    period_start = datetime(year, month, 1, tzinfo=BRAZIL_TZ)
    if month == 12:
        period_end = datetime(year + 1, 1, 1, tzinfo=BRAZIL_TZ)
    else:
        period_end = datetime(year, month + 1, 1, tzinfo=BRAZIL_TZ)
    return period_start, period_end


def format_date_br(d: date) -> str:
    """Format a date as DD/MM/YYYY for user-facing display."""
    return d.strftime('%d/%m/%Y')
