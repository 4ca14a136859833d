"""Invoice aggregation: subtotal, dispatcher commission, tax and total.

This module recomputes every attached job's amount from current job and
rate card data (the amounts cached on the job-invoice associations are
never summed) and applies the dispatcher's commission and the configured
tax rate.

Commission is the dispatcher's cut and is deducted from the carrier's
subtotal; tax applies to what remains:

    sub_total  = round2(sum of job amounts)
    commission = round2(sub_total x commission% / 100)
    tax        = round2((sub_total - commission) x tax_rate)
    total      = round2(sub_total - commission + tax)

Each stage is rounded before it feeds the next, which is how invoices
have always been printed; do not collapse it into a single final rounding.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from trucking_billing.calculators.money import ZERO, percent_to_rate, round_amount
from trucking_billing.config.settings import TruckingBillingConfig
from trucking_billing.services.job_amount_service import JobAmountService
from trucking_billing.services.record_store import (
    MissingDispatcherError,
    NotFoundError,
    RecordStore,
)

logger = logging.getLogger(__name__)


@dataclass
class InvoiceCalculation:
    """Derived invoice totals (never persisted as a source of truth).

    Attributes:
        sub_total: Sum of freshly calculated job amounts
        commission: Dispatcher commission deducted from the subtotal
        tax: Tax on the subtotal after commission
        total: sub_total - commission + tax
        commission_percent: Dispatcher commission on the 0-100 scale
        job_count: Number of jobs attached to the invoice
        missing_dispatcher: True when the invoice had no resolvable
            dispatcher and zero totals were returned
        missing_jobs: Attached job ids whose job record no longer exists
            (each priced at 0)

    Example:
        >>> calc = InvoiceCalculation(
        ...     sub_total=Decimal("1000.00"),
        ...     commission=Decimal("50.00"),
        ...     tax=Decimal("123.50"),
        ...     total=Decimal("1073.50"),
        ... )
        >>> calc.to_dict()["subTotal"]
        Decimal('1000.00')
    """

    sub_total: Decimal
    commission: Decimal
    tax: Decimal
    total: Decimal
    commission_percent: Decimal = ZERO
    job_count: int = 0
    missing_dispatcher: bool = False
    missing_jobs: List[str] = field(default_factory=list)

    @classmethod
    def zero(cls, job_count: int = 0, missing_dispatcher: bool = False) -> "InvoiceCalculation":
        return cls(
            sub_total=ZERO,
            commission=ZERO,
            tax=ZERO,
            total=ZERO,
            job_count=job_count,
            missing_dispatcher=missing_dispatcher,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the API layer's field names."""
        return {
            "subTotal": self.sub_total,
            "commission": self.commission,
            "commissionRate": self.commission_percent,
            "tax": self.tax,
            "total": self.total,
            "jobCount": self.job_count,
            "missingDispatcher": self.missing_dispatcher,
            "missingJobs": list(self.missing_jobs),
        }


def apply_commission_and_tax(
    job_amounts: List[Decimal], commission_percent: Decimal, tax_rate: Decimal
) -> InvoiceCalculation:
    """Combine job amounts into invoice totals with staged rounding.

    Args:
        job_amounts: Calculated job amounts (any order)
        commission_percent: Dispatcher commission (0-100)
        tax_rate: Tax rate (0-1)

    Returns:
        InvoiceCalculation with all four amounts rounded to cents

    Example:
        >>> totals = apply_commission_and_tax(
        ...     [Decimal("380.00"), Decimal("150.00")], Decimal("10"), Decimal("0.13")
        ... )
        >>> totals.sub_total, totals.commission, totals.tax, totals.total
        (Decimal('530.00'), Decimal('53.00'), Decimal('62.01'), Decimal('539.01'))
    """
    if not job_amounts:
        return InvoiceCalculation.zero()

    sub_total = round_amount(sum(job_amounts, Decimal("0")))
    commission = round_amount(sub_total * percent_to_rate(commission_percent))
    tax = round_amount((sub_total - commission) * Decimal(tax_rate))
    total = round_amount(sub_total - commission + tax)

    return InvoiceCalculation(
        sub_total=sub_total,
        commission=commission,
        tax=tax,
        total=total,
        commission_percent=Decimal(commission_percent),
        job_count=len(job_amounts),
    )


class InvoiceAggregator:
    """Calculates invoice totals from the invoice's attached jobs.

    Example:
        >>> aggregator = InvoiceAggregator(store, job_amount_service, config)
        >>> aggregator.calculate_invoice_totals("INV-1").total
        Decimal('539.01')
    """

    def __init__(
        self,
        store: RecordStore,
        job_amount_service: JobAmountService,
        config: TruckingBillingConfig,
    ):
        self.store = store
        self.job_amount_service = job_amount_service
        self.tax_rate = config.tax_rate

    def _get_commission_percent(self, invoice_id: str) -> Decimal:
        """Resolve the invoice dispatcher's commission.

        Raises:
            MissingDispatcherError: If the invoice has no dispatcher or the
                dispatcher record no longer exists
        """
        invoice = self.store.get_invoice(invoice_id)
        if not invoice.dispatcher_id:
            raise MissingDispatcherError(invoice_id)
        try:
            return self.store.get_dispatcher_commission(invoice.dispatcher_id)
        except NotFoundError as e:
            raise MissingDispatcherError(invoice_id, invoice.dispatcher_id) from e

    def calculate_invoice_totals(self, invoice_id: str) -> InvoiceCalculation:
        """Calculate subtotal, commission, tax and total for an invoice.

        An invoice with no jobs yields all-zero totals. An invoice whose
        dispatcher cannot be resolved also yields zero totals, flagged with
        ``missing_dispatcher`` so the invoice stays viewable. An attached
        job whose record is gone is priced at 0 and listed in
        ``missing_jobs``.

        Args:
            invoice_id: Invoice to total

        Returns:
            InvoiceCalculation

        Raises:
            NotFoundError: If the invoice does not exist
            RecordStoreError: If the record store fails
        """
        links = self.store.get_invoice_jobs(invoice_id)

        try:
            commission_percent = self._get_commission_percent(invoice_id)
        except MissingDispatcherError as e:
            logger.warning(f"{e}; returning zero totals")
            return InvoiceCalculation.zero(job_count=len(links), missing_dispatcher=True)

        if not links:
            logger.debug(f"Invoice {invoice_id} has no jobs")
            calculation = InvoiceCalculation.zero()
            calculation.commission_percent = commission_percent
            return calculation

        job_amounts = []
        missing_jobs = []
        for link in links:
            try:
                job_amounts.append(self.job_amount_service.calculate_job_amount(link.job_id))
            except NotFoundError:
                logger.warning(
                    f"Job {link.job_id} on invoice {invoice_id} does not exist; priced at 0"
                )
                missing_jobs.append(link.job_id)
                job_amounts.append(ZERO)
        calculation = apply_commission_and_tax(
            job_amounts, commission_percent, self.tax_rate
        )
        calculation.missing_jobs = missing_jobs

        logger.info(
            f"Invoice {invoice_id}: {calculation.job_count} jobs, "
            f"subtotal {calculation.sub_total}, total {calculation.total}"
        )
        return calculation
