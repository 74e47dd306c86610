"""
DateTime utilities for access grants and medical records.

Timestamps are stored timezone-aware in PostgreSQL, but some backends (SQLite
in tests) hand back naive values; ``ensure_utc`` normalises both.
"""

import calendar
from datetime import date, datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def calculate_pet_age(
    birth_date: date, reference_date: Optional[date] = None
) -> Dict[str, int]:
    """
    Calculate a pet's age in years, months, and days.

    Args:
        birth_date: The pet's birth date
        reference_date: The date to calculate age from (defaults to today)

    Returns:
        Dictionary with 'years', 'months', and 'days' keys
    """
    if reference_date is None:
        reference_date = date.today()

    if birth_date > reference_date:
        raise ValueError("Birth date cannot be in the future")

    years = reference_date.year - birth_date.year
    months = reference_date.month - birth_date.month
    days = reference_date.day - birth_date.day

    if days < 0:
        months -= 1
        if reference_date.month == 1:
            prev_month_last_day = calendar.monthrange(reference_date.year - 1, 12)[1]
        else:
            prev_month_last_day = calendar.monthrange(
                reference_date.year, reference_date.month - 1
            )[1]
        days += prev_month_last_day

    if months < 0:
        years -= 1
        months += 12

    return {"years": years, "months": months, "days": days}
