"""Trucking Billing CLI.

This module provides a command-line interface over a JSON record file.
It includes commands for pricing jobs, totalling invoices, reconciling
cached job amounts, checking job data and exporting amount breakdowns.
"""

from typing import Optional

import click

from trucking_billing import __version__
from trucking_billing.cli.commands.check_data import check_data
from trucking_billing.cli.commands.export_breakdown import export_breakdown
from trucking_billing.cli.commands.invoice_totals import invoice_totals
from trucking_billing.cli.commands.job_amount import job_amount
from trucking_billing.cli.commands.validate_amounts import validate_amounts
from trucking_billing.config.logging_config import LoggingConfig, configure_logging


@click.group(
    help="Trucking Billing CLI - Calculate job amounts and reconcile invoices"
)
@click.version_option(version=__version__)
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON record file (default: DATA_FILE from the environment)",
)
@click.option("--debug", is_flag=True, help="Enable debug logging and stack traces")
@click.pass_context
def cli(ctx: click.Context, data_file: Optional[str], debug: bool):
    """Trucking Billing CLI main entry point."""
    obj = ctx.ensure_object(dict)
    obj.setdefault("data_file", data_file)
    obj["debug"] = debug or obj.get("debug", False)
    logging_config = LoggingConfig.from_env(default_level="WARNING")
    if debug:
        logging_config.log_level = "DEBUG"
    configure_logging(logging_config)


# Register commands
cli.add_command(job_amount)
cli.add_command(invoice_totals)
cli.add_command(validate_amounts)
cli.add_command(check_data)
cli.add_command(export_breakdown)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
