"""Date parsing utilities for statement dates."""

import re
from datetime import date

# Statement dates are printed as YYYY.MM.DD (e.g. "2025.07.01 valörlü GZ:")
STATEMENT_DATE_PATTERN = re.compile(r"(?<!\d)(\d{4})\.(\d{2})\.(\d{2})(?!\d)")

# Timestamps inside a transaction block (e.g. "10:15:00")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d):([0-5]\d)$")


def find_statement_date(text: str) -> date | None:
    """Find the first valid YYYY.MM.DD date in a line of text.

    Tokens that look like dates but are not real calendar dates
    (e.g. 2025.13.40) are skipped.

    Args:
        text: Line of statement text.

    Returns:
        Parsed date, or None if no valid date token is present.
    """
    for match in STATEMENT_DATE_PATTERN.finditer(text):
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            continue
    return None


def is_valid_time(value: str) -> bool:
    """Check that a string is a HH:MM:SS wall-clock time.

    Args:
        value: Candidate time string.

    Returns:
        True if the value is a valid 24-hour time.
    """
    return bool(TIME_PATTERN.match(value))


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD).

    Args:
        d: Date to convert.

    Returns:
        ISO format date string.
    """
    return d.isoformat()


def format_date(d: date, fmt: str = "%Y-%m-%d") -> str:
    """Format a date object as a string.

    Args:
        d: Date to format.
        fmt: Format string (default ISO format).

    Returns:
        Formatted date string.
    """
    return d.strftime(fmt)
