"""
Datetime utility functions.
Provides replacements for deprecated datetime functions.
"""

from datetime import datetime
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def to_naive_utc(value: datetime) -> datetime:
    """
    Normalize a datetime for storage in a naive DateTime column.

    Aware values are converted to UTC and stripped of tzinfo; naive values
    are assumed to be UTC already and returned unchanged.

    Examples:
        >>> to_naive_utc(pytz.timezone("Europe/Paris").localize(datetime(2024, 5, 1, 12, 0)))
        datetime.datetime(2024, 5, 1, 10, 0)
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(pytz.UTC).replace(tzinfo=None)
