# le_dashboard/services/date_utils.py
import logging
from datetime import datetime, date

import pytz

logger = logging.getLogger(__name__)

# Timestamps are stored as naive UTC
STORAGE_TIMEZONE = pytz.UTC


def parse_datetime(value):
    """
    Parse a date or timestamp from a request body into a naive UTC datetime.

    Accepts datetime/date objects, 'YYYY-MM-DD' strings and ISO 8601
    timestamps with or without an offset ('2024-05-01T09:30:00Z').

    Args:
        value: The raw value from the JSON body

    Returns:
        datetime or None: None for None or an empty string

    Raises:
        ValueError: the value is not a recognisable date
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Unparseable date value: '{value}'")
            raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD or ISO 8601.")
    else:
        raise ValueError(f"Invalid date: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(STORAGE_TIMEZONE).replace(tzinfo=None)
    return parsed


def month_key(value):
    """'YYYY-MM' bucket for a datetime, None when missing."""
    if not value:
        return None
    return value.strftime('%Y-%m')
