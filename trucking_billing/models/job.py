"""Job and rate card models.

This module defines the Job model (one unit of hauling work) and the
RateCard model (the job type a job is classified under, holding the
dispatch type and per-unit rate).
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from trucking_billing.models.base import BaseDataModel
from trucking_billing.models.dispatch import DispatchType
from trucking_billing.models.fields import (
    coerce_count,
    coerce_decimal,
    coerce_time_of_day,
)


class RateCard(BaseDataModel):
    """Job type with its billing method and rate.

    The calculator trusts the rate card's dispatch type, never a type
    recorded on the job itself. ``dispatch_type`` is kept exactly as stored
    so an unrecognized classification can be reported verbatim.

    Attributes:
        job_type_id: Unique job type identifier
        dispatch_type: Stored billing method (Hourly, Load, Tonnage, Fixed)
        rate: Per hour / per load / per weight unit / flat rate
        title: Optional human-readable job type name

    Example:
        >>> card = RateCard(job_type_id="JT-1", dispatch_type="load", rate="50")
        >>> card.resolved_dispatch_type
        <DispatchType.LOAD: 'Load'>
        >>> card.rate
        Decimal('50')
    """

    job_type_id: str = Field(..., min_length=1, description="Job type identifier")
    dispatch_type: str = Field(..., description="Stored dispatch type")
    rate: Optional[Decimal] = Field(None, ge=0, description="Per-unit rate")
    title: Optional[str] = Field(None, description="Job type name")

    @field_validator("dispatch_type", mode="before")
    @classmethod
    def convert_dispatch_type(cls, v: Any) -> str:
        if isinstance(v, DispatchType):
            return v.value
        if v is None:
            return ""
        return str(v)

    @field_validator("rate", mode="before")
    @classmethod
    def convert_rate(cls, v: Any) -> Optional[Decimal]:
        return coerce_decimal(v)

    @property
    def resolved_dispatch_type(self) -> Optional[DispatchType]:
        """The parsed dispatch type, or None when unrecognized."""
        return DispatchType.parse(self.dispatch_type)


class Job(BaseDataModel):
    """A single job (unit of hauling work).

    Only the fields relevant to the rate card's dispatch type are used when
    pricing; the rest are ignored regardless of presence. Legacy encodings
    are accepted at the boundary: unparsable times or load counts become
    None, and ``weight`` is kept raw for the weight parser.

    Attributes:
        job_id: Unique job identifier
        job_type_id: Reference to the job's RateCard (None when unassigned)
        driver_id: Optional reference to the assigned driver
        start_time: Time of day the job started (no date component)
        end_time: Time of day the job ended; earlier than start means
            the job ran past midnight
        load_count: Number of loads hauled
        weight: Weigh-ticket weights in any accepted legacy encoding
        cached_amount: Amount last stored on the job record itself

    Example:
        >>> job = Job(job_id="J-1", job_type_id="JT-1",
        ...           start_time="22:00", end_time="02:00")
        >>> job.start_time
        datetime.time(22, 0)
    """

    job_id: str = Field(..., min_length=1, description="Job identifier")
    job_type_id: Optional[str] = Field(None, description="Job type reference")
    driver_id: Optional[str] = Field(None, description="Assigned driver")
    start_time: Optional[dt.time] = Field(None, description="Start time of day")
    end_time: Optional[dt.time] = Field(None, description="End time of day")
    load_count: Optional[int] = Field(None, ge=0, description="Loads hauled")
    weight: Any = Field(None, description="Raw weight value (legacy encodings)")
    cached_amount: Optional[Decimal] = Field(None, description="Stored job amount")

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def convert_time(cls, v: Any) -> Optional[dt.time]:
        return coerce_time_of_day(v)

    @field_validator("load_count", mode="before")
    @classmethod
    def convert_load_count(cls, v: Any) -> Optional[int]:
        return coerce_count(v)

    @field_validator("cached_amount", mode="before")
    @classmethod
    def convert_cached_amount(cls, v: Any) -> Optional[Decimal]:
        return coerce_decimal(v)
