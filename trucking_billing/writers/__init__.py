"""Writers for exporting amount breakdowns."""

from trucking_billing.writers.amount_breakdown_writer import (
    AmountBreakdownData,
    AmountBreakdownWriter,
)

__all__ = [
    "AmountBreakdownData",
    "AmountBreakdownWriter",
]
