"""Date parsing utilities."""

import re
from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = (
    "today",
    "this-week",
    "last-week",
    "this-month",
    "last-month",
    "this-quarter",
    "last-quarter",
    "this-year",
    "last-year",
)

_OFFSET_PATTERN = re.compile(r"^(?:in\s+|\+)(\d+)\s*(day|week|month)s?$")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative words: "today", "yesterday", "tomorrow"
    - Offsets, handy for due dates: "in 30 days", "+2 weeks", "in 1 month"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative forms (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    match = _OFFSET_PATTERN.match(date_str)
    if match:
        count, unit = int(match.group(1)), match.group(2)
        if unit == "day":
            return today + timedelta(days=count)
        if unit == "week":
            return today + timedelta(weeks=count)
        return today + relativedelta(months=count)

    # Try parsing as absolute date
    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def _quarter_start(day: date) -> date:
    return day.replace(month=3 * ((day.month - 1) // 3) + 1, day=1)


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods end today; "last-*" periods cover the whole previous
    week, month, quarter or year.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower().replace("_", "-")
    today = today or date.today()

    if period == "today":
        return (today, today)

    if period == "this-week":
        return (today - timedelta(days=today.weekday()), today)

    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return (start, start + timedelta(days=6))

    if period == "this-month":
        return (today.replace(day=1), today)

    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return (start, today.replace(day=1) - timedelta(days=1))

    if period == "this-quarter":
        return (_quarter_start(today), today)

    if period == "last-quarter":
        current = _quarter_start(today)
        return (current - relativedelta(months=3), current - timedelta(days=1))

    if period == "this-year":
        return (today.replace(month=1, day=1), today)

    if period == "last-year":
        start = today.replace(month=1, day=1) - relativedelta(years=1)
        return (start, today.replace(month=1, day=1) - timedelta(days=1))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}"
    )
