"""
Utility functions for the povboard application.
"""

import re
from datetime import datetime
from typing import Optional, Tuple

from povboard.constants import (
    PHASE_ID_PATTERN,
    get_date_formats,
    get_date_max_years_future,
    get_date_max_years_past,
)


def parse_date(date_string: str) -> Optional[datetime]:
    """
    Parse a date string using the configured date formats.

    Args:
        date_string: The date string to parse.

    Returns:
        A datetime object if parsing succeeds, None otherwise.

    Examples:
        >>> parse_date("2024-12-31")  # ISO 8601
        >>> parse_date("31/12/2024")  # DD/MM/YYYY
        >>> parse_date("December 31, 2024")  # Month DD, YYYY
    """
    for fmt in get_date_formats():
        try:
            return datetime.strptime(date_string, fmt)
        except ValueError:
            continue
    return None


def validate_date_range(date: datetime) -> Tuple[bool, Optional[str]]:
    """
    Validate that a due date is within acceptable range.

    Args:
        date: The datetime object to validate.

    Returns:
        A tuple of (is_valid, error_message). If valid, error_message is None.
    """
    years_past = get_date_max_years_past()
    years_future = get_date_max_years_future()
    now = datetime.now()
    # Feb 29 has no counterpart in most years
    day = min(now.day, 28) if now.month == 2 else now.day
    min_date = datetime(now.year - years_past, now.month, day)
    max_date = datetime(now.year + years_future, now.month, day)

    if date < min_date:
        return False, (
            f"Date {date.strftime('%Y-%m-%d')} is too far in the past. "
            f"Dates must be within the last {years_past} year."
        )

    if date > max_date:
        return False, (
            f"Date {date.strftime('%Y-%m-%d')} is too far in the future. "
            f"Dates must be within the next {years_future} years."
        )

    return True, None


def format_date(date: Optional[datetime]) -> str:
    """
    Format a datetime object to the standard ISO 8601 format.

    Args:
        date: The datetime object to format.

    Returns:
        A string in YYYY-MM-DD format, or an empty string for None.
    """
    if date is None:
        return ""
    return date.strftime("%Y-%m-%d")


def is_valid_phase_id(phase_id: str) -> bool:
    """Check that a phase id is safe to use as a board file name."""
    return bool(phase_id) and re.fullmatch(PHASE_ID_PATTERN, phase_id) is not None


def truncate(text: str, width: int) -> str:
    """Shorten text to width characters, marking the cut with '~'."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return "~"
    return text[: width - 1] + "~"
