"""Job amount command."""

import json
from typing import Optional

import click

from trucking_billing.cli.context import get_engine, is_debug
from trucking_billing.cli.error_handlers import with_error_handling
from trucking_billing.cli.utils.formatters import (
    format_amount,
    format_info,
    format_warning,
)


@click.command(name="job-amount")
@click.argument("job_id")
@click.option(
    "--invoice",
    "invoice_id",
    type=str,
    default=None,
    help="Also compare with the amount cached on this invoice",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def job_amount(ctx: click.Context, job_id: str, invoice_id: Optional[str], as_json: bool):
    """Show how a job's amount is calculated.

    Example:
        trucking-billing job-amount J-1
        trucking-billing job-amount J-1 --invoice INV-1
    """
    with with_error_handling(is_debug(ctx)):
        engine = get_engine(ctx)

        if invoice_id:
            details = engine.get_job_amount_details(job_id, invoice_id)
            if as_json:
                click.echo(json.dumps(details.to_dict(), default=str, indent=2))
                return
            _print_details(details)
            return

        breakdown = engine.calculate_job_breakdown(job_id)
        driver_pay = engine.calculate_driver_pay(job_id)

        if as_json:
            payload = {
                "jobId": job_id,
                "amount": breakdown.amount,
                "dispatchType": breakdown.raw_dispatch_type,
                "rate": breakdown.rate,
                "hours": breakdown.hours,
                "loads": breakdown.load_count,
                "totalWeight": breakdown.total_weight,
                "driverPay": driver_pay,
                "fallbackReasons": [r.value for r in breakdown.fallback_reasons],
            }
            click.echo(json.dumps(payload, default=str, indent=2))
            return

        click.echo(format_info(f"Job {job_id}"))
        click.echo(f"  Dispatch type: {breakdown.raw_dispatch_type or '-'}")
        click.echo(f"  Rate:          {format_amount(breakdown.rate)}")
        if breakdown.hours is not None:
            click.echo(f"  Hours:         {breakdown.hours:.2f}")
        if breakdown.load_count is not None:
            click.echo(f"  Loads:         {breakdown.load_count}")
        if breakdown.total_weight is not None:
            click.echo(f"  Total weight:  {breakdown.total_weight}")
        click.echo(f"  Amount:        {format_amount(breakdown.amount)}")
        click.echo(f"  Driver pay:    {format_amount(driver_pay)}")
        for reason in breakdown.fallback_reasons:
            click.echo(format_warning(f"  Fallback: {reason.value}"))


def _print_details(details) -> None:
    click.echo(format_info(f"Job {details.job_id} on invoice {details.invoice_id}"))
    click.echo(f"  Dispatch type:     {details.dispatch_type or '-'}")
    click.echo(f"  Rate:              {format_amount(details.rate)}")
    click.echo(f"  Cached amount:     {format_amount(details.cached_amount)}")
    click.echo(f"  Calculated amount: {format_amount(details.calculated_amount)}")
    click.echo(f"  Display amount:    {format_amount(details.display_amount)}")
    for reason in details.fallback_reasons:
        click.echo(format_warning(f"  Fallback: {reason.value}"))
    if details.warning:
        click.echo(format_warning(details.warning))
