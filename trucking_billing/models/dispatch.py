"""Dispatch type classification for jobs.

A job type (rate card) carries one of four billing methods. Stored values
come from free-text job type records, so parsing is case-insensitive and
an unknown value parses to ``None`` rather than raising; the calculator
decides what an unknown classification is worth.
"""

from enum import Enum
from typing import Any, Optional


class DispatchType(str, Enum):
    """Billing method for a job.

    Attributes:
        HOURLY: Rate per hour between start and end time
        LOAD: Rate per load hauled
        TONNAGE: Rate per weight unit, summed over all weigh tickets
        FIXED: Flat rate regardless of time, loads or weight
    """

    HOURLY = "Hourly"
    LOAD = "Load"
    TONNAGE = "Tonnage"
    FIXED = "Fixed"

    @classmethod
    def parse(cls, value: Any) -> Optional["DispatchType"]:
        """Parse a stored dispatch type, ignoring case and whitespace.

        Example:
            >>> DispatchType.parse("  hourly ")
            <DispatchType.HOURLY: 'Hourly'>
            >>> DispatchType.parse("per-kilometre") is None
            True
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None
