"""Invoice totals command."""

import json

import click

from trucking_billing.cli.context import get_engine, is_debug
from trucking_billing.cli.error_handlers import with_error_handling
from trucking_billing.cli.utils.formatters import (
    format_amount,
    format_info,
    format_table,
    format_warning,
)


@click.command(name="invoice-totals")
@click.argument("invoice_id")
@click.option("--jobs", "show_jobs", is_flag=True, help="List each job's calculated amount")
@click.option("--json", "as_json", is_flag=True, help="Print the totals as JSON")
@click.pass_context
def invoice_totals(ctx: click.Context, invoice_id: str, show_jobs: bool, as_json: bool):
    """Calculate an invoice's subtotal, commission, tax and total.

    Amounts are recalculated from current job data; cached amounts are
    never summed.

    Example:
        trucking-billing invoice-totals INV-1 --jobs
    """
    with with_error_handling(is_debug(ctx)):
        engine = get_engine(ctx)
        totals = engine.get_invoice_calculations(invoice_id)

        if as_json:
            click.echo(json.dumps(totals.to_dict(), default=str, indent=2))
            return

        click.echo(format_info(f"Invoice {invoice_id} ({totals.job_count} jobs)"))

        if show_jobs:
            rows = []
            for link in engine.store.get_invoice_jobs(invoice_id):
                if link.job_id in totals.missing_jobs:
                    rows.append([link.job_id, "(missing)", None, link.relationship_amount])
                    continue
                breakdown = engine.calculate_job_breakdown(link.job_id)
                rows.append(
                    [
                        link.job_id,
                        breakdown.raw_dispatch_type,
                        breakdown.amount,
                        link.relationship_amount,
                    ]
                )
            click.echo(
                format_table(
                    ["Job", "Dispatch Type", "Amount", "Cached"], rows, amount_columns=[2, 3]
                )
            )

        if totals.missing_jobs:
            click.echo(
                format_warning(
                    "Job(s) no longer exist and were priced at 0: "
                    f"{', '.join(totals.missing_jobs)}"
                )
            )

        if totals.missing_dispatcher:
            click.echo(
                format_warning("Invoice has no resolvable dispatcher, totals shown as zero")
            )

        click.echo(f"  Subtotal:   {format_amount(totals.sub_total)}")
        click.echo(
            f"  Commission: {format_amount(totals.commission)} "
            f"({totals.commission_percent}%)"
        )
        click.echo(f"  Tax:        {format_amount(totals.tax)} ({engine.config.tax_percent}%)")
        click.echo(f"  Total:      {format_amount(totals.total)}")
