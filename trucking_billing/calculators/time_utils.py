"""Time span calculation for hourly jobs.

This module converts a start/end time-of-day pair into elapsed hours.
Jobs carry no date on their times, so an end time earlier than the start
time means the job ran past midnight:

    22:00 -> 02:00  =  (120 + 1440 - 1320) / 60  =  4 hours

Missing or unparsable times never raise; they make the span absent.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from trucking_billing.calculators.money import CENT
from trucking_billing.models.fields import coerce_time_of_day
from trucking_billing.models.job import Job

MINUTES_PER_DAY = 24 * 60


def parse_time_of_day(value: Any) -> Optional[dt.time]:
    """Parse a time of day from a time, datetime or string.

    Accepts ``HH:MM``, ``HH:MM:SS`` and ISO datetimes (the time component
    is used). Returns None for absent or unparsable input.

    Example:
        >>> parse_time_of_day("07:45:00")
        datetime.time(7, 45)
        >>> parse_time_of_day("") is None
        True
    """
    return coerce_time_of_day(value)


def convert_time_to_minutes(time: dt.time) -> int:
    """Convert a dt.time object to minutes since midnight (seconds ignored).

    Example:
        >>> convert_time_to_minutes(dt.time(9, 30))
        570
        >>> convert_time_to_minutes(dt.time(23, 59))
        1439
    """
    return time.hour * 60 + time.minute


def calculate_span_minutes(start_time: dt.time, end_time: dt.time) -> int:
    """Calculate minutes between two times of day, wrapping past midnight.

    A negative difference is read as crossing midnight and gets a full day
    added. Should the result still be negative the input was malformed and
    the span is clamped to zero, so an amount can never go negative because
    of time ordering.

    Example:
        >>> calculate_span_minutes(dt.time(7, 0), dt.time(15, 30))
        510
        >>> calculate_span_minutes(dt.time(22, 0), dt.time(2, 0))
        240
        >>> calculate_span_minutes(dt.time(8, 0), dt.time(8, 0))
        0
    """
    minutes = convert_time_to_minutes(end_time) - convert_time_to_minutes(start_time)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return max(minutes, 0)


def calculate_hours_elapsed(start_time: Any, end_time: Any) -> Optional[Decimal]:
    """Calculate elapsed hours between two times of day.

    Args:
        start_time: Start time (time, datetime or string)
        end_time: End time (time, datetime or string)

    Returns:
        Elapsed hours as an unrounded Decimal, or None if either time is
        absent or unparsable

    Example:
        >>> calculate_hours_elapsed("22:00", "02:00")
        Decimal('4')
        >>> calculate_hours_elapsed("09:00", None) is None
        True
    """
    start = parse_time_of_day(start_time)
    end = parse_time_of_day(end_time)
    if start is None or end is None:
        return None

    minutes = calculate_span_minutes(start, end)
    return Decimal(minutes) / Decimal(60)


def calculate_job_hours(job: Job) -> Optional[Decimal]:
    """Calculate a job's elapsed hours for display (2 decimal places).

    Example:
        >>> job = Job(job_id="J-1", start_time="06:10", end_time="14:30")
        >>> calculate_job_hours(job)
        Decimal('8.33')
    """
    hours = calculate_hours_elapsed(job.start_time, job.end_time)
    if hours is None:
        return None
    return hours.quantize(CENT)
