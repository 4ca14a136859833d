"""Calculator modules for the trucking billing engine."""

from trucking_billing.calculators.job_amount_calculator import (
    FallbackReason,
    JobAmountResult,
    calculate_driver_pay,
    calculate_job_amount,
    calculate_job_amount_breakdown,
    job_type_not_found_result,
)
from trucking_billing.calculators.money import round_amount
from trucking_billing.calculators.time_utils import (
    calculate_hours_elapsed,
    calculate_job_hours,
    calculate_span_minutes,
    convert_time_to_minutes,
    parse_time_of_day,
)
from trucking_billing.calculators.weight_parser import (
    WeightParseResult,
    WeightShape,
    normalize_weight,
    parse_weight,
)

__all__ = [
    # job_amount_calculator
    "FallbackReason",
    "JobAmountResult",
    "calculate_driver_pay",
    "calculate_job_amount",
    "calculate_job_amount_breakdown",
    "job_type_not_found_result",
    # money
    "round_amount",
    # time_utils
    "calculate_hours_elapsed",
    "calculate_job_hours",
    "calculate_span_minutes",
    "convert_time_to_minutes",
    "parse_time_of_day",
    # weight_parser
    "WeightParseResult",
    "WeightShape",
    "normalize_weight",
    "parse_weight",
]
