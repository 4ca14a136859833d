"""
Job amount reconciliation.

Compares the amount cached on each job-invoice association with a freshly
calculated one and overwrites the cached amount when they drift apart by
more than the configured tolerance. The reconciler is the only component
that writes association amounts, and it never touches job or rate card
fields.

An association moves from stale to either fixed (a write happened) or
valid (no write was needed). Running a validation twice in a row never
writes on the second run.
"""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from trucking_billing.calculators.job_amount_calculator import FallbackReason
from trucking_billing.calculators.money import ZERO
from trucking_billing.config.settings import TruckingBillingConfig
from trucking_billing.services.job_amount_service import JobAmountService
from trucking_billing.services.record_store import ConcurrentUpdateError, RecordStore
from trucking_billing.utils.logging_utils import (
    LogContext,
    generate_correlation_id,
    get_correlation_id,
    get_log_context,
)

logger = logging.getLogger(__name__)


def _reason_values(reasons: List[FallbackReason]) -> List[str]:
    return [reason.value for reason in reasons]


@dataclass
class JobValidationResult:
    """Outcome of validating one job-invoice association.

    Attributes:
        job_id: Job that was validated
        invoice_id: Invoice the job is attached to
        was_valid: Cached amount was within tolerance, nothing written
        was_fixed: Cached amount was overwritten with the calculated one
        cached_amount: Association amount before validation (null reads as 0)
        calculated_amount: Freshly calculated job amount
        fallback_reasons: Fallback paths taken while calculating the amount
        dry_run: Drift was only reported, never written
    """

    job_id: str
    invoice_id: str
    was_valid: bool
    was_fixed: bool
    cached_amount: Decimal
    calculated_amount: Decimal
    fallback_reasons: List[FallbackReason] = field(default_factory=list)
    dry_run: bool = False

    @property
    def difference(self) -> Decimal:
        return self.calculated_amount - self.cached_amount

    @property
    def is_stale(self) -> bool:
        """Drift was found but left in place (dry run)."""
        return not self.was_valid and not self.was_fixed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "invoiceId": self.invoice_id,
            "wasValid": self.was_valid,
            "wasFixed": self.was_fixed,
            "cachedAmount": self.cached_amount,
            "calculatedAmount": self.calculated_amount,
            "fallbackReasons": _reason_values(self.fallback_reasons),
        }


@dataclass
class JobValidationError:
    """A job that could not be validated."""

    job_id: str
    error: str
    error_type: str = "Exception"

    def to_dict(self) -> Dict[str, Any]:
        return {"jobId": self.job_id, "error": self.error, "errorType": self.error_type}


@dataclass
class InvoiceValidationResult:
    """Summary of validating every job attached to an invoice.

    ``valid_jobs + fixed_jobs + stale_jobs`` is the number of jobs that were
    processed; ``len(errors)`` jobs failed and ``skipped_jobs`` were never
    issued because the pass was cancelled. An ``error`` is set only when the
    invoice itself could not be read.
    """

    invoice_id: str
    total_jobs: int = 0
    valid_jobs: int = 0
    fixed_jobs: int = 0
    stale_jobs: int = 0
    skipped_jobs: int = 0
    errors: List[JobValidationError] = field(default_factory=list)
    results: List[JobValidationResult] = field(default_factory=list)
    cancelled: bool = False
    error: Optional[str] = None
    correlation_id: Optional[str] = None

    @property
    def processed_jobs(self) -> int:
        return self.valid_jobs + self.fixed_jobs + self.stale_jobs

    def to_dict(self) -> Dict[str, Any]:
        return {
            "invoiceId": self.invoice_id,
            "totalJobs": self.total_jobs,
            "validJobs": self.valid_jobs,
            "fixedJobs": self.fixed_jobs,
            "staleJobs": self.stale_jobs,
            "skippedJobs": self.skipped_jobs,
            "errors": [error.to_dict() for error in self.errors],
            "cancelled": self.cancelled,
            "error": self.error,
        }


@dataclass
class JobAmountDetails:
    """Authoritative and cached amounts of a job side by side.

    ``display_amount`` is what should be shown to a user: always the
    calculated amount, whatever the cached one says.
    """

    job_id: str
    invoice_id: str
    calculated_amount: Decimal
    cached_amount: Optional[Decimal]
    amounts_match: bool
    dispatch_type: Optional[str] = None
    rate: Decimal = ZERO
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    hours: Optional[Decimal] = None
    load_count: Optional[int] = None
    weight: Any = None
    total_weight: Optional[Decimal] = None
    fallback_reasons: List[FallbackReason] = field(default_factory=list)
    warning: Optional[str] = None

    @property
    def display_amount(self) -> Decimal:
        return self.calculated_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "invoiceId": self.invoice_id,
            "dispatchType": self.dispatch_type,
            "rate": self.rate,
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "hours": self.hours,
            "loads": self.load_count,
            "weight": self.weight,
            "totalWeight": self.total_weight,
            "relationshipAmount": self.cached_amount,
            "calculatedAmount": self.calculated_amount,
            "displayAmount": self.display_amount,
            "isValid": self.amounts_match,
            "fallbackReasons": _reason_values(self.fallback_reasons),
            "warning": self.warning,
        }


class JobAmountReconciler:
    """
    Detects and repairs drift between cached and calculated job amounts.

    Jobs of one invoice are validated on a bounded thread pool. A repair
    is written with the cached amount that was read as the store's
    expected value, so of two concurrent validations of the same (job,
    invoice) pair, from this reconciler or any other over the same store,
    only one writes; the other re-reads and finds the amount valid.

    Example:
        >>> reconciler = JobAmountReconciler(store, JobAmountService(store, config), config)
        >>> result = reconciler.validate_invoice("INV-1")
        >>> result.valid_jobs, result.fixed_jobs, len(result.errors)
        (2, 1, 0)
    """

    MAX_WRITE_ATTEMPTS = 3

    def __init__(
        self,
        store: RecordStore,
        job_amount_service: JobAmountService,
        config: TruckingBillingConfig,
    ):
        self.store = store
        self.job_amount_service = job_amount_service
        self.tolerance = config.amount_tolerance
        self.max_workers = config.reconcile_max_workers
        self.batch_limit = config.reconcile_batch_limit

    def _amounts_match(self, cached: Decimal, calculated: Decimal) -> bool:
        return abs(cached - calculated) <= self.tolerance

    def validate_and_fix(
        self, job_id: str, invoice_id: str, dry_run: bool = False
    ) -> JobValidationResult:
        """
        Validate one association and repair its cached amount if needed.

        Args:
            job_id: Job to validate
            invoice_id: Invoice the job is attached to
            dry_run: Report drift without writing

        Returns:
            JobValidationResult

        Raises:
            NotAssociatedError: If the job is not attached to the invoice
            NotFoundError: If the job record does not exist
            ConcurrentUpdateError: If the cached amount kept changing under
                every write attempt
            RecordStoreError: If the store fails to read or write
        """
        attempts = 0
        while True:
            attempts += 1
            stored = self.store.get_relationship_amount(job_id, invoice_id)
            cached = ZERO if stored is None else stored
            breakdown = self.job_amount_service.calculate_job_breakdown(job_id)
            calculated = breakdown.amount

            result = JobValidationResult(
                job_id=job_id,
                invoice_id=invoice_id,
                was_valid=self._amounts_match(cached, calculated),
                was_fixed=False,
                cached_amount=cached,
                calculated_amount=calculated,
                fallback_reasons=list(breakdown.fallback_reasons),
                dry_run=dry_run,
            )

            if result.was_valid:
                return result

            if dry_run:
                logger.info(
                    f"Job {job_id} on invoice {invoice_id} is stale: "
                    f"cached {cached}, calculated {calculated} (dry run)"
                )
                return result

            try:
                self.store.set_relationship_amount(
                    job_id, invoice_id, calculated, expected=stored
                )
            except ConcurrentUpdateError as e:
                if attempts >= self.MAX_WRITE_ATTEMPTS:
                    raise
                logger.debug(f"{e}; validating again")
                continue

            result.was_fixed = True
            logger.info(
                f"Fixed amount of job {job_id} on invoice {invoice_id}: {cached} -> {calculated}"
            )
            return result

    def _validate_in_context(
        self, context: Dict[str, Any], job_id: str, invoice_id: str, dry_run: bool
    ) -> JobValidationResult:
        with LogContext(**{**context, "job_id": job_id}):
            return self.validate_and_fix(job_id, invoice_id, dry_run=dry_run)

    def _collect(
        self,
        future: "Future[JobValidationResult]",
        job_id: str,
        outcomes: List[Tuple[str, Any]],
    ) -> None:
        try:
            outcomes.append((job_id, future.result()))
        except Exception as e:
            logger.warning(f"Failed to validate job {job_id}: {type(e).__name__}: {e}")
            outcomes.append(
                (job_id, JobValidationError(job_id, str(e), type(e).__name__))
            )

    def validate_invoice(
        self,
        invoice_id: str,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ) -> InvoiceValidationResult:
        """
        Validate every job attached to an invoice.

        One job failing never stops the others: its error is recorded and
        the pass continues. When ``cancel_event`` is set, no further
        validations are started; the ones already running are awaited and
        the partial result is returned.

        Args:
            invoice_id: Invoice to validate
            cancel_event: Optional signal to stop issuing validations
            dry_run: Report drift without writing

        Returns:
            InvoiceValidationResult

        Raises:
            NotFoundError: If the invoice does not exist
            RecordStoreError: If the invoice's job list cannot be read
        """
        correlation_id = get_correlation_id() or generate_correlation_id()

        with LogContext(invoice_id=invoice_id, correlation_id=correlation_id):
            links = self.store.get_invoice_jobs(invoice_id)
            summary = InvoiceValidationResult(
                invoice_id=invoice_id,
                total_jobs=len(links),
                correlation_id=correlation_id,
            )
            logger.info(f"Validating {len(links)} jobs on invoice {invoice_id}")

            context = get_log_context()
            outcomes: List[Tuple[str, Any]] = []
            pending: Dict[Future, str] = {}

            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="reconcile"
            ) as pool:
                for index, link in enumerate(links):
                    # At most max_workers validations in flight, so a
                    # cancellation stops every job not yet handed out.
                    if len(pending) >= self.max_workers:
                        done, _ = wait(pending, return_when=FIRST_COMPLETED)
                        for future in done:
                            self._collect(future, pending.pop(future), outcomes)

                    if cancel_event is not None and cancel_event.is_set():
                        summary.cancelled = True
                        summary.skipped_jobs = len(links) - index
                        logger.warning(
                            f"Validation of invoice {invoice_id} cancelled, "
                            f"{summary.skipped_jobs} jobs not validated"
                        )
                        break

                    future = pool.submit(
                        self._validate_in_context, context, link.job_id, invoice_id, dry_run
                    )
                    pending[future] = link.job_id

                for future in wait(pending).done:
                    self._collect(future, pending[future], outcomes)

            order = {link.job_id: index for index, link in enumerate(links)}
            for job_id, outcome in sorted(outcomes, key=lambda item: order[item[0]]):
                if isinstance(outcome, JobValidationError):
                    summary.errors.append(outcome)
                    continue
                summary.results.append(outcome)
                if outcome.was_fixed:
                    summary.fixed_jobs += 1
                elif outcome.was_valid:
                    summary.valid_jobs += 1
                else:
                    summary.stale_jobs += 1

            logger.info(
                f"Invoice {invoice_id}: {summary.valid_jobs} valid, "
                f"{summary.fixed_jobs} fixed, {summary.stale_jobs} stale, "
                f"{len(summary.errors)} errors"
            )
            return summary

    def validate_all_invoices(
        self,
        limit: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ) -> List[InvoiceValidationResult]:
        """
        Validate the jobs of every invoice in the store.

        An invoice that cannot be read is recorded with its error and the
        sweep moves on to the next one.

        Args:
            limit: Maximum invoices to sweep (defaults to the configured batch limit)
            cancel_event: Optional signal to stop the sweep
            dry_run: Report drift without writing

        Returns:
            One InvoiceValidationResult per invoice visited

        Raises:
            RecordStoreError: If the invoice list cannot be read
        """
        invoice_ids = self.store.list_invoice_ids()[: limit or self.batch_limit]
        correlation_id = generate_correlation_id()
        results: List[InvoiceValidationResult] = []

        with LogContext(correlation_id=correlation_id):
            logger.info(f"Sweeping {len(invoice_ids)} invoices")
            for invoice_id in invoice_ids:
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        f"Invoice sweep cancelled after {len(results)} invoices"
                    )
                    break
                try:
                    results.append(
                        self.validate_invoice(
                            invoice_id, cancel_event=cancel_event, dry_run=dry_run
                        )
                    )
                except Exception as e:
                    logger.warning(f"Failed to validate invoice {invoice_id}: {e}")
                    results.append(
                        InvoiceValidationResult(
                            invoice_id=invoice_id,
                            error=f"{type(e).__name__}: {e}",
                            correlation_id=correlation_id,
                        )
                    )

        return results

    def get_job_amount_details(self, job_id: str, invoice_id: str) -> JobAmountDetails:
        """
        Show a job's calculated and cached amounts together.

        Raises:
            NotAssociatedError: If the job is not attached to the invoice
            NotFoundError: If the job record does not exist
        """
        cached = self.store.get_relationship_amount(job_id, invoice_id)
        job = self.store.get_job(job_id)
        breakdown = self.job_amount_service.price_job(job)
        calculated = breakdown.amount
        matches = self._amounts_match(ZERO if cached is None else cached, calculated)

        warning = None
        if not matches:
            warning = (
                f"Cached amount {cached} differs from calculated amount {calculated}; "
                f"showing the calculated amount"
            )

        return JobAmountDetails(
            job_id=job_id,
            invoice_id=invoice_id,
            calculated_amount=calculated,
            cached_amount=cached,
            amounts_match=matches,
            dispatch_type=breakdown.raw_dispatch_type,
            rate=breakdown.rate,
            start_time=job.start_time,
            end_time=job.end_time,
            hours=breakdown.hours,
            load_count=job.load_count,
            weight=job.weight,
            total_weight=breakdown.total_weight,
            fallback_reasons=list(breakdown.fallback_reasons),
            warning=warning,
        )
