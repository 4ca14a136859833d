"""Check job data command."""

import json
from typing import Tuple

import click

from trucking_billing.cli.context import get_engine, is_debug
from trucking_billing.cli.error_handlers import DataValidationError, with_error_handling
from trucking_billing.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from trucking_billing.validators.diagnostics_report import (
    DiagnosticSeverity,
    DiagnosticsReport,
)

MAX_ISSUES_PER_SEVERITY = 20


@click.command(name="check-data")
@click.argument("invoice_ids", nargs=-1)
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="warning",
    help="Minimum severity level to display (default: warning)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the reports as JSON")
@click.pass_context
def check_data(ctx: click.Context, invoice_ids: Tuple[str, ...], severity: str, as_json: bool):
    """Check invoice jobs for data that degrades their amounts.

    Checks every invoice when no INVOICE_IDS are given. Looks for missing
    times, load counts, weights and rates, unknown dispatch types, dangling
    job and job type references, and stale cached amounts.

    Returns non-zero exit code if errors are found.

    Example:
        trucking-billing check-data INV-1 INV-2
        trucking-billing check-data --severity info
    """
    with with_error_handling(is_debug(ctx)):
        engine = get_engine(ctx)
        severity_level = DiagnosticSeverity[severity.upper()]
        ids = list(invoice_ids) or engine.store.list_invoice_ids()

        combined = DiagnosticsReport()
        reports = []
        for invoice_id in ids:
            report = engine.check_invoice_data(invoice_id)
            reports.append(report)
            combined.merge(report)

        if as_json:
            click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
        else:
            click.echo(format_info(f"Checked {len(ids)} invoice(s)"))
            click.echo(f"Errors:   {combined.error_count}")
            click.echo(f"Warnings: {combined.warning_count}")
            click.echo(f"Info:     {combined.info_count}")

            for sev in (
                DiagnosticSeverity.ERROR,
                DiagnosticSeverity.WARNING,
                DiagnosticSeverity.INFO,
            ):
                if sev < severity_level:
                    continue
                issues = combined.get_issues(sev)
                if not issues:
                    continue
                click.echo()
                click.echo(f"{sev.name}S ({len(issues)}):")
                for issue in issues[:MAX_ISSUES_PER_SEVERITY]:
                    if sev == DiagnosticSeverity.ERROR:
                        click.echo(format_error(f"  {issue}"))
                    elif sev == DiagnosticSeverity.WARNING:
                        click.echo(format_warning(f"  {issue}"))
                    else:
                        click.echo(format_info(f"  {issue}"))
                if len(issues) > MAX_ISSUES_PER_SEVERITY:
                    click.echo(f"  ... and {len(issues) - MAX_ISSUES_PER_SEVERITY} more")

        if combined.error_count > 0:
            raise DataValidationError(
                f"{combined.error_count} error(s) found in job data",
                recovery_hint="Fix or detach the listed jobs, then run validate-amounts",
            )
        if not as_json:
            click.echo()
            if combined.warning_count > 0:
                click.echo(
                    format_warning(f"Check completed with {combined.warning_count} warning(s)")
                )
            else:
                click.echo(format_success("No data problems found"))
