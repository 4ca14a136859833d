"""Export amount breakdown command."""

from typing import Optional, Tuple

import click

from trucking_billing.cli.context import get_engine, is_debug
from trucking_billing.cli.error_handlers import with_error_handling
from trucking_billing.cli.utils.formatters import format_info, format_success
from trucking_billing.writers.amount_breakdown_writer import AmountBreakdownWriter


@click.command(name="export-breakdown")
@click.argument("invoice_ids", nargs=-1)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    required=True,
    help="CSV file for the per-job breakdown",
)
@click.option(
    "--totals",
    type=click.Path(dir_okay=False),
    default=None,
    help="Optional CSV file for the per-invoice totals",
)
@click.pass_context
def export_breakdown(
    ctx: click.Context,
    invoice_ids: Tuple[str, ...],
    output: str,
    totals: Optional[str],
):
    """Export calculated and cached job amounts to CSV.

    Exports every invoice when no INVOICE_IDS are given.

    Example:
        trucking-billing export-breakdown INV-1 -o breakdown.csv --totals totals.csv
    """
    with with_error_handling(is_debug(ctx)):
        engine = get_engine(ctx)
        ids = list(invoice_ids) or engine.store.list_invoice_ids()
        click.echo(format_info(f"Exporting {len(ids)} invoice(s)..."))

        data = AmountBreakdownWriter(engine).write_csv(ids, output, totals_path=totals)

        click.echo(format_success(f"Wrote {len(data.jobs)} job row(s) to {output}"))
        if totals:
            click.echo(format_success(f"Wrote {len(data.invoices)} invoice row(s) to {totals}"))
