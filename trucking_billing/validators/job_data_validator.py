"""Job data diagnostics.

This module checks the jobs attached to an invoice for the data problems
that make their amounts fall back to defaults (missing times, load counts,
weights or rates, unknown dispatch types, dangling references) and for
cached amounts that have drifted from the calculated ones.
"""

import logging
from decimal import Decimal
from typing import Dict, Tuple

from trucking_billing.calculators.job_amount_calculator import FallbackReason
from trucking_billing.calculators.money import ZERO
from trucking_billing.calculators.weight_parser import parse_weight
from trucking_billing.config.settings import TruckingBillingConfig
from trucking_billing.models import InvoiceJobLink, Job
from trucking_billing.services.job_amount_service import JobAmountService
from trucking_billing.services.record_store import NotFoundError, RecordStore
from trucking_billing.validators.diagnostics_report import (
    DiagnosticSeverity,
    DiagnosticsReport,
)

logger = logging.getLogger(__name__)

# Fallback reason -> (severity, field, message)
_REASON_ISSUES: Dict[FallbackReason, Tuple[DiagnosticSeverity, str, str]] = {
    FallbackReason.JOB_TYPE_NOT_FOUND: (
        DiagnosticSeverity.ERROR,
        "job_type_id",
        "Job type not found, job is priced at 0",
    ),
    FallbackReason.UNRECOGNIZED_DISPATCH_TYPE: (
        DiagnosticSeverity.WARNING,
        "dispatch_type",
        "Unrecognized dispatch type, job is priced at the flat rate",
    ),
    FallbackReason.MISSING_RATE: (
        DiagnosticSeverity.WARNING,
        "rate",
        "Job type has no rate, rate treated as 0",
    ),
    FallbackReason.DEFAULT_HOURLY_RATE: (
        DiagnosticSeverity.INFO,
        "rate",
        "Hourly job type has no rate, default hourly rate used",
    ),
    FallbackReason.MISSING_TIMES: (
        DiagnosticSeverity.WARNING,
        "start_time/end_time",
        "Hourly job is missing a start or end time, hours treated as 0",
    ),
    FallbackReason.MISSING_LOAD_COUNT: (
        DiagnosticSeverity.WARNING,
        "load_count",
        "Load job has no load count, loads treated as 0",
    ),
    FallbackReason.NO_WEIGHTS: (
        DiagnosticSeverity.WARNING,
        "weight",
        "Tonnage job has no usable weights, weight treated as 0",
    ),
    FallbackReason.UNPARSABLE_WEIGHT_TOKENS: (
        DiagnosticSeverity.WARNING,
        "weight",
        "Some weight tokens could not be parsed and were ignored",
    ),
    FallbackReason.AMOUNT_OUT_OF_RANGE: (
        DiagnosticSeverity.ERROR,
        "amount",
        "Job amount is too large to bill, job is priced at 0",
    ),
}


class JobDataValidator:
    """Checks invoice jobs for data that degrades their amounts.

    Example:
        >>> validator = JobDataValidator(store, JobAmountService(store, config), config)
        >>> report = validator.validate_invoice("INV-1")
        >>> print(report.format())
    """

    def __init__(
        self,
        store: RecordStore,
        job_amount_service: JobAmountService,
        config: TruckingBillingConfig,
    ):
        self.store = store
        self.job_amount_service = job_amount_service
        self.tolerance = config.amount_tolerance

    def _raw_value(self, job: Job, reason: FallbackReason):
        if reason is FallbackReason.JOB_TYPE_NOT_FOUND:
            return job.job_type_id
        if reason is FallbackReason.MISSING_LOAD_COUNT:
            return job.load_count
        if reason is FallbackReason.UNPARSABLE_WEIGHT_TOKENS:
            return " ".join(parse_weight(job.weight).dropped_tokens)
        if reason is FallbackReason.NO_WEIGHTS:
            return job.weight
        if reason is FallbackReason.MISSING_TIMES:
            return f"{job.start_time} - {job.end_time}"
        return None

    def validate_job(self, link: InvoiceJobLink) -> DiagnosticsReport:
        """Check one attached job.

        Args:
            link: The job's association with the invoice

        Returns:
            DiagnosticsReport with the job's issues
        """
        report = DiagnosticsReport(link.invoice_id)

        try:
            job = self.store.get_job(link.job_id)
        except NotFoundError:
            report.add_error(link.job_id, "job_id", "Job attached to invoice does not exist")
            return report

        breakdown = self.job_amount_service.price_job(job)
        for reason in breakdown.fallback_reasons:
            severity, field_name, message = _REASON_ISSUES[reason]
            value = self._raw_value(job, reason)
            if reason is FallbackReason.UNRECOGNIZED_DISPATCH_TYPE:
                value = breakdown.raw_dispatch_type
            report.add(severity, job.job_id, field_name, message, value)

        cached = ZERO if link.relationship_amount is None else link.relationship_amount
        if abs(cached - breakdown.amount) > self.tolerance:
            report.add_info(
                job.job_id,
                "relationship_amount",
                f"Cached amount {cached} differs from calculated amount {breakdown.amount}",
                cached,
            )
        elif breakdown.amount == Decimal("0") and not breakdown.is_fallback:
            report.add_info(job.job_id, "amount", "Job is legitimately priced at 0")

        return report

    def validate_invoice(self, invoice_id: str) -> DiagnosticsReport:
        """Check every job attached to an invoice.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        report = DiagnosticsReport(invoice_id)
        invoice = self.store.get_invoice(invoice_id)

        if not invoice.dispatcher_id:
            report.add_warning(None, "dispatcher_id", "Invoice has no dispatcher, totals show as 0")
        else:
            try:
                self.store.get_dispatcher(invoice.dispatcher_id)
            except NotFoundError:
                report.add_warning(
                    None,
                    "dispatcher_id",
                    "Invoice dispatcher not found, totals show as 0",
                    invoice.dispatcher_id,
                )

        for link in self.store.get_invoice_jobs(invoice_id):
            report.merge(self.validate_job(link))

        logger.debug(f"Checked invoice {invoice_id}: {report.summary()}")
        return report
