"""Utility functions for dynaform"""

import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


def canonicalify(p: Path | str) -> Path:
    return Path(p).expanduser().resolve()


def ensure_path(p: Path | str) -> Path:
    path = canonicalify(p)
    path.mkdir(parents=True, exist_ok=True)
    return path


def coerce_str(value: Any) -> str:
    """Render a value the way a form input would hold it as text.

    Form inputs drift between booleans, numbers and their string forms, so
    comparisons and option values go through this single conversion.

    Examples:
        >>> coerce_str(True)
        'true'
        >>> coerce_str(2.0)
        '2'
        >>> coerce_str(None)
        'null'
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def coerce_finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite number, or None when it is not one.

    Booleans are not treated as numbers. Strings are accepted when they
    parse to a finite float after stripping.
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def get_today(timezone: ZoneInfo) -> date:
    """Get the current calendar date in specified timezone"""
    return datetime.now(timezone).date()


def parse_calendar_date(text: str) -> Optional[date]:
    """Parse an ISO 8601 date or datetime string into a calendar date.

    Returns None for anything unparseable.
    """
    text = text.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        logger.debug(f"Unparseable calendar date: {text!r}")
        return None


def age_in_years(born: date, today: date) -> int:
    """Whole years elapsed between ``born`` and ``today``"""
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age
