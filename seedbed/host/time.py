"""Date helpers for garden records.

Two formats are in use:
- ISO dates ('2026-10-16') for area creation and planting dates
- Display dates ('16 Oct 2026') for journal entries, shown to the user as-is
"""

from datetime import date


def today() -> date:
    """Get today's local date."""
    return date.today()


def today_iso(d: date | None = None) -> str:
    """Get a date as an ISO 8601 string (YYYY-MM-DD).

    Args:
        d: Date to format, defaults to today

    Returns:
        ISO date string
    """
    return (d or today()).isoformat()


def display_date(d: date | None = None) -> str:
    """Format a date the way journal entries show it.

    Args:
        d: Date to format, defaults to today

    Returns:
        Day without leading zero, short month, full year (e.g. '3 Feb 2026')
    """
    d = d or today()
    return f"{d.day} {d:%b %Y}"
