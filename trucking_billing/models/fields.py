"""Lenient coercion helpers for legacy record fields.

Job records written by older versions of the system store times as
``HH:MM`` / ``HH:MM:SS`` strings or full ISO datetimes, load counts as
strings, and amounts as floats. These helpers turn such values into
``dt.time`` / ``int`` / ``Decimal`` and return ``None`` instead of raising
when a value cannot be understood, so a malformed field degrades to
"absent" rather than rejecting the whole record.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def coerce_time_of_day(value: Any) -> Optional[dt.time]:
    """Coerce a stored time value to a time of day.

    Example:
        >>> coerce_time_of_day("22:15")
        datetime.time(22, 15)
        >>> coerce_time_of_day("2024-03-01T06:30:00")
        datetime.time(6, 30)
        >>> coerce_time_of_day("late") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.time().replace(tzinfo=None)
    if isinstance(value, dt.time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if "T" in text or " " in text:
        try:
            return dt.datetime.fromisoformat(text).time().replace(tzinfo=None)
        except ValueError:
            return None

    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return dt.datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def coerce_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a stored numeric value to a finite Decimal, or None.

    Floats go through ``str`` so that ``12.5`` becomes ``Decimal('12.5')``
    rather than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not result.is_finite():
        return None
    return result


def coerce_count(value: Any) -> Optional[int]:
    """Coerce a stored load count to a non-negative int, or None.

    Whole-valued decimals such as ``"3"`` or ``3.0`` are accepted;
    fractional or negative counts are treated as malformed.
    """
    number = coerce_decimal(value)
    if number is None or number < 0 or number != number.to_integral_value():
        return None
    return int(number)
