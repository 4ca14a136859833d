"""Validate amounts command."""

import json
from typing import List, Optional

import click

from trucking_billing.cli.context import get_engine, is_debug
from trucking_billing.cli.error_handlers import ProcessingError, with_error_handling
from trucking_billing.cli.utils.formatters import (
    format_amount,
    format_error,
    format_info,
    format_success,
    format_warning,
)
from trucking_billing.validators.amount_reconciler import InvoiceValidationResult


@click.command(name="validate-amounts")
@click.argument("invoice_id", required=False)
@click.option("--all", "all_invoices", is_flag=True, help="Validate every invoice")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum invoices to validate with --all (default: RECONCILE_BATCH_LIMIT)",
)
@click.option("--dry-run", is_flag=True, help="Report stale amounts without fixing them")
@click.option("--json", "as_json", is_flag=True, help="Print the results as JSON")
@click.pass_context
def validate_amounts(
    ctx: click.Context,
    invoice_id: Optional[str],
    all_invoices: bool,
    limit: Optional[int],
    dry_run: bool,
    as_json: bool,
):
    """Validate cached job amounts and fix the stale ones.

    Each job attached to the invoice is recalculated; a cached amount more
    than the tolerance away from it is overwritten. Jobs that cannot be
    validated are listed and make the command exit non-zero.

    Example:
        trucking-billing validate-amounts INV-1
        trucking-billing validate-amounts --all --dry-run
    """
    if bool(invoice_id) == all_invoices:
        raise click.UsageError("Give either an INVOICE_ID or --all")

    with with_error_handling(is_debug(ctx)):
        engine = get_engine(ctx)
        if all_invoices:
            results = engine.validate_all_job_amounts(limit=limit, dry_run=dry_run)
        else:
            results = [engine.validate_invoice_job_amounts(invoice_id, dry_run=dry_run)]

        if as_json:
            click.echo(json.dumps([r.to_dict() for r in results], default=str, indent=2))
        else:
            for result in results:
                _print_result(result, dry_run)
            _print_totals(results)

        failures = sum(len(r.errors) + (1 if r.error else 0) for r in results)
        if failures:
            raise ProcessingError(
                f"{failures} job(s) or invoice(s) could not be validated",
                recovery_hint="Run check-data on the invoice to find the broken records",
            )


def _print_result(result: InvoiceValidationResult, dry_run: bool) -> None:
    click.echo(format_info(f"Invoice {result.invoice_id}"))
    if result.error:
        click.echo(format_error(f"  {result.error}"))
        return

    click.echo(f"  Jobs:  {result.total_jobs}")
    click.echo(f"  Valid: {result.valid_jobs}")
    click.echo(f"  Fixed: {result.fixed_jobs}")
    if dry_run:
        click.echo(f"  Stale: {result.stale_jobs}")
    if result.skipped_jobs:
        click.echo(format_warning(f"  Skipped: {result.skipped_jobs} (cancelled)"))

    for job in result.results:
        if job.was_fixed or job.is_stale:
            verb = "would fix" if job.is_stale else "fixed"
            click.echo(
                f"    {job.job_id}: {verb} {format_amount(job.cached_amount)} "
                f"-> {format_amount(job.calculated_amount)}"
            )
    for error in result.errors:
        click.echo(format_error(f"    {error.job_id}: {error.error}"))


def _print_totals(results: List[InvoiceValidationResult]) -> None:
    fixed = sum(r.fixed_jobs for r in results)
    stale = sum(r.stale_jobs for r in results)
    click.echo()
    if stale:
        click.echo(format_warning(f"{stale} stale amount(s) found (dry run, nothing written)"))
    elif fixed:
        click.echo(format_success(f"Fixed {fixed} amount(s) across {len(results)} invoice(s)"))
    else:
        click.echo(format_success(f"All amounts valid across {len(results)} invoice(s)"))
