"""Aggregators module for combining job amounts into invoice totals.

This module recomputes the amounts of an invoice's jobs and applies the
dispatcher commission and tax.
"""

from trucking_billing.aggregators.invoice_aggregator import (
    InvoiceAggregator,
    InvoiceCalculation,
    apply_commission_and_tax,
)

__all__ = [
    "InvoiceAggregator",
    "InvoiceCalculation",
    "apply_commission_and_tax",
]
