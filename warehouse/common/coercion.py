"""
Bronze Value Coercion

Bronze columns arrive as whatever the driver (or a CSV extract) produced:
date objects, datetimes, ISO strings or integers. These helpers turn them
into the canonical Python types of the silver schema.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

logger = logging.getLogger(__name__)


def as_date(value: Any) -> Optional[date]:
    """
    Coerce a bronze date/timestamp value to a calendar date.

    Supports:
    - date objects (passed through)
    - datetime objects (time part dropped, like CAST(x AS DATE))
    - ISO 8601 strings ("2025-10-06" or "2025-10-06 10:00:00")
    - None and blank strings (return None)

    Args:
        value: Raw date value

    Returns:
        date object, or None if missing or unparseable
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            logger.warning(
                "Failed to parse date string",
                extra={'value': value}
            )
            return None

    logger.warning(
        "Unsupported date type",
        extra={'value': value, 'type': type(value).__name__}
    )
    return None


def as_int(value: Any) -> Optional[int]:
    """
    Coerce a bronze numeric value to int.

    Args:
        value: Raw value (int, float, numeric string or None)

    Returns:
        Integer value, or None if missing or not numeric
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, (float, Decimal)):
        return int(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            logger.warning(
                "Failed to parse integer string",
                extra={'value': value}
            )
            return None

    logger.warning(
        "Unsupported integer type",
        extra={'value': value, 'type': type(value).__name__}
    )
    return None
