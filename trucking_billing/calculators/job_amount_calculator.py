"""Job amount calculation engine.

This module implements the pricing rules for a single job:
- Hourly:  hours elapsed x rate
- Load:    load count x rate
- Tonnage: sum of weigh-ticket weights x rate
- Fixed:   rate (flat)

The branch is chosen from the rate card's dispatch type, never from the
job. An unrecognized dispatch type is priced like Fixed. Pricing never
fails on bad job data: missing or malformed fields price as zero, and
every such fallback is recorded in ``fallback_reasons`` so a zero caused
by missing data can be told apart from a job legitimately worth zero.
An amount that cannot be rounded to cents, or that exceeds
``MAX_JOB_AMOUNT``, is priced as zero the same way.

The functions here are pure: identical job and rate card inputs always
give the same amount.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, Overflow
from enum import Enum
from typing import List, Optional

from trucking_billing.calculators.money import (
    MAX_JOB_AMOUNT,
    ZERO,
    percent_to_rate,
    round_amount,
)
from trucking_billing.calculators.time_utils import calculate_hours_elapsed
from trucking_billing.calculators.weight_parser import parse_weight
from trucking_billing.models.dispatch import DispatchType
from trucking_billing.models.job import Job, RateCard


class FallbackReason(str, Enum):
    """Why part of a job's amount was defaulted instead of computed."""

    JOB_TYPE_NOT_FOUND = "job_type_not_found"
    UNRECOGNIZED_DISPATCH_TYPE = "unrecognized_dispatch_type"
    MISSING_RATE = "missing_rate"
    DEFAULT_HOURLY_RATE = "default_hourly_rate"
    MISSING_TIMES = "missing_times"
    MISSING_LOAD_COUNT = "missing_load_count"
    NO_WEIGHTS = "no_weights"
    UNPARSABLE_WEIGHT_TOKENS = "unparsable_weight_tokens"
    AMOUNT_OUT_OF_RANGE = "amount_out_of_range"


@dataclass
class JobAmountResult:
    """Breakdown of a job amount calculation.

    Attributes:
        amount: Job amount rounded to 2 decimal places
        dispatch_type: Dispatch type used (None when unrecognized or unknown)
        rate: Rate applied (after any default)
        hours: Elapsed hours for hourly jobs
        load_count: Loads used for load jobs
        total_weight: Summed weight for tonnage jobs
        fallback_reasons: Every defaulting step taken, in order
        raw_dispatch_type: Dispatch type exactly as stored on the rate card
    """

    amount: Decimal
    dispatch_type: Optional[DispatchType] = None
    rate: Decimal = ZERO
    hours: Optional[Decimal] = None
    load_count: Optional[int] = None
    total_weight: Optional[Decimal] = None
    fallback_reasons: List[FallbackReason] = field(default_factory=list)
    raw_dispatch_type: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        """True when any part of the amount came from a fallback path."""
        return bool(self.fallback_reasons)


def _resolve_rate(
    rate_card: RateCard,
    dispatch_type: Optional[DispatchType],
    default_hourly_rate: Optional[Decimal],
    reasons: List[FallbackReason],
) -> Decimal:
    if rate_card.rate is not None:
        return rate_card.rate
    if dispatch_type is DispatchType.HOURLY and default_hourly_rate is not None:
        reasons.append(FallbackReason.DEFAULT_HOURLY_RATE)
        return Decimal(default_hourly_rate)
    reasons.append(FallbackReason.MISSING_RATE)
    return Decimal("0")


def calculate_job_amount_breakdown(
    job: Job,
    rate_card: RateCard,
    default_hourly_rate: Optional[Decimal] = None,
) -> JobAmountResult:
    """Calculate a job's amount with a full breakdown.

    Args:
        job: Job to price
        rate_card: The job's rate card (its dispatch type decides the rule)
        default_hourly_rate: Rate used for an hourly rate card with no rate

    Returns:
        JobAmountResult with the rounded amount and its inputs

    Example:
        >>> job = Job(job_id="J-1", start_time="22:00", end_time="02:00")
        >>> card = RateCard(job_type_id="JT-1", dispatch_type="Hourly", rate="95")
        >>> result = calculate_job_amount_breakdown(job, card)
        >>> result.hours, result.amount
        (Decimal('4'), Decimal('380.00'))
    """
    dispatch_type = rate_card.resolved_dispatch_type
    reasons: List[FallbackReason] = []
    rate = _resolve_rate(rate_card, dispatch_type, default_hourly_rate, reasons)
    result = JobAmountResult(
        amount=ZERO,
        dispatch_type=dispatch_type,
        rate=rate,
        fallback_reasons=reasons,
        raw_dispatch_type=rate_card.dispatch_type,
    )

    if dispatch_type is DispatchType.HOURLY:
        hours = calculate_hours_elapsed(job.start_time, job.end_time)
        if hours is None:
            reasons.append(FallbackReason.MISSING_TIMES)
            hours = Decimal("0")
        result.hours = hours
        raw_amount = hours * rate

    elif dispatch_type is DispatchType.LOAD:
        if job.load_count is None:
            reasons.append(FallbackReason.MISSING_LOAD_COUNT)
        result.load_count = job.load_count or 0
        raw_amount = result.load_count * rate

    elif dispatch_type is DispatchType.TONNAGE:
        weights = parse_weight(job.weight)
        if weights.dropped_tokens:
            reasons.append(FallbackReason.UNPARSABLE_WEIGHT_TOKENS)
        if not weights.values:
            reasons.append(FallbackReason.NO_WEIGHTS)
        result.total_weight = weights.total
        raw_amount = weights.total * rate

    elif dispatch_type is DispatchType.FIXED:
        raw_amount = rate

    else:
        reasons.append(FallbackReason.UNRECOGNIZED_DISPATCH_TYPE)
        raw_amount = rate

    try:
        amount = round_amount(max(raw_amount, Decimal("0")))
    except (InvalidOperation, Overflow):
        amount = None
    if amount is None or amount > MAX_JOB_AMOUNT:
        reasons.append(FallbackReason.AMOUNT_OUT_OF_RANGE)
        amount = ZERO
    result.amount = amount
    return result


def calculate_job_amount(
    job: Job,
    rate_card: RateCard,
    default_hourly_rate: Optional[Decimal] = None,
) -> Decimal:
    """Calculate a job's amount (2 decimal places).

    Example:
        >>> job = Job(job_id="J-2", load_count=3)
        >>> card = RateCard(job_type_id="JT-2", dispatch_type="Load", rate="50")
        >>> calculate_job_amount(job, card)
        Decimal('150.00')
    """
    return calculate_job_amount_breakdown(job, rate_card, default_hourly_rate).amount


def job_type_not_found_result() -> JobAmountResult:
    """Result for a job whose job type no longer exists (priced at zero)."""
    return JobAmountResult(
        amount=ZERO, fallback_reasons=[FallbackReason.JOB_TYPE_NOT_FOUND]
    )


def calculate_driver_pay(amount: Decimal, pay_percent: Optional[Decimal]) -> Decimal:
    """Calculate a driver's pay as a percentage of the job amount.

    Args:
        amount: Job amount
        pay_percent: Driver's share (0-100), None when not on file

    Returns:
        Driver pay rounded to 2 decimal places (0.00 without a percentage)

    Example:
        >>> calculate_driver_pay(Decimal("380.00"), Decimal("30"))
        Decimal('114.00')
    """
    if pay_percent is None:
        return ZERO
    return round_amount(amount * percent_to_rate(pay_percent))
