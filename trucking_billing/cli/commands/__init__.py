"""CLI commands."""

from trucking_billing.cli.commands.check_data import check_data
from trucking_billing.cli.commands.export_breakdown import export_breakdown
from trucking_billing.cli.commands.invoice_totals import invoice_totals
from trucking_billing.cli.commands.job_amount import job_amount
from trucking_billing.cli.commands.validate_amounts import validate_amounts

__all__ = [
    "check_data",
    "export_breakdown",
    "invoice_totals",
    "job_amount",
    "validate_amounts",
]
