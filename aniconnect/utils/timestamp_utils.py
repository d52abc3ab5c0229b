"""
Timestamp utilities for the ISO-8601 strings the backend returns.
"""

from datetime import datetime, timezone
from typing import Optional

DATE_FORMAT = '%Y-%m-%d'


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a backend timestamp such as '2025-01-12T18:30:00.000Z'.

    Args:
        value: ISO-8601 timestamp, with or without milliseconds and a 'Z' suffix

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    if not value:
        return None

    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: Optional[str], long_month: bool = True) -> str:
    """Format a backend timestamp as 'January 5, 2025' (or 'Jan 5, 2025').

    Falls back to the raw string when it is not a valid timestamp.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or ''
    month = parsed.strftime('%B' if long_month else '%b')
    return f'{month} {parsed.day}, {parsed.year}'


def format_time(value: Optional[str]) -> str:
    """Format a backend timestamp as 'HH:MM', or '' if it cannot be parsed."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ''
    return parsed.strftime('%H:%M')


def format_release_date(value: Optional[str]) -> str:
    """Format a 'YYYY-MM-DD' release date as 'January 5, 2025'."""
    if not value:
        return ''
    try:
        parsed = datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return value
    return f'{parsed.strftime("%B")} {parsed.day}, {parsed.year}'
