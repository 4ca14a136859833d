"""
Billing engine facade.

Wires the job amount service, the invoice aggregator and the reconciler
to one record store and one configuration, and exposes the operations the
API layer and the CLI call.
"""

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

from trucking_billing.aggregators.invoice_aggregator import (
    InvoiceAggregator,
    InvoiceCalculation,
)
from trucking_billing.calculators.job_amount_calculator import JobAmountResult
from trucking_billing.calculators.time_utils import calculate_job_hours
from trucking_billing.config.settings import TruckingBillingConfig, get_config
from trucking_billing.models import Job
from trucking_billing.services.job_amount_service import JobAmountService
from trucking_billing.services.json_store import JsonFileRecordStore
from trucking_billing.services.record_store import RecordStore, RecordStoreError
from trucking_billing.utils.logging_utils import log_function_call
from trucking_billing.validators.amount_reconciler import (
    InvoiceValidationResult,
    JobAmountDetails,
    JobAmountReconciler,
    JobValidationResult,
)
from trucking_billing.validators.diagnostics_report import DiagnosticsReport
from trucking_billing.validators.job_data_validator import JobDataValidator

logger = logging.getLogger(__name__)


class BillingEngine:
    """
    Job amount calculation and invoice reconciliation.

    Example:
        >>> engine = BillingEngine.from_data_file("data/records.json")
        >>> engine.calculate_job_amount("J-1")
        Decimal('380.00')
        >>> engine.get_invoice_calculations("INV-1").total
        Decimal('945.81')
    """

    def __init__(self, store: RecordStore, config: Optional[TruckingBillingConfig] = None):
        self.store = store
        self.config = config or get_config()
        self.job_amounts = JobAmountService(store, self.config)
        self.aggregator = InvoiceAggregator(store, self.job_amounts, self.config)
        self.reconciler = JobAmountReconciler(store, self.job_amounts, self.config)
        self.data_validator = JobDataValidator(store, self.job_amounts, self.config)

    @classmethod
    def from_data_file(
        cls,
        data_file: Optional[Union[str, Path]] = None,
        config: Optional[TruckingBillingConfig] = None,
    ) -> "BillingEngine":
        """
        Build an engine over a JSON record file.

        Args:
            data_file: Record file (defaults to the configured DATA_FILE)
            config: Configuration (defaults to the global configuration)

        Raises:
            RecordStoreError: If no record file is given or it cannot be loaded
        """
        config = config or get_config()
        path = data_file or config.data_file
        if not path:
            raise RecordStoreError("No record file given (set DATA_FILE or pass --data-file)")
        return cls(JsonFileRecordStore(path), config)

    def calculate_job_amount(self, job_id: str) -> Decimal:
        """Calculate a job's authoritative amount."""
        return self.job_amounts.calculate_job_amount(job_id)

    def calculate_job_breakdown(self, job_id: str) -> JobAmountResult:
        return self.job_amounts.calculate_job_breakdown(job_id)

    def calculate_job_hours(self, job: Union[Job, str]) -> Optional[Decimal]:
        """Hours worked on a job (2 places), None when a time is missing."""
        if isinstance(job, str):
            job = self.store.get_job(job)
        return calculate_job_hours(job)

    def calculate_driver_pay(self, job_id: str) -> Decimal:
        return self.job_amounts.calculate_driver_pay(job_id)

    @log_function_call(include_args=True)
    def get_invoice_calculations(self, invoice_id: str) -> InvoiceCalculation:
        """Calculate an invoice's subtotal, commission, tax and total."""
        return self.aggregator.calculate_invoice_totals(invoice_id)

    def validate_and_fix_job_amount(
        self, job_id: str, invoice_id: str, dry_run: bool = False
    ) -> JobValidationResult:
        return self.reconciler.validate_and_fix(job_id, invoice_id, dry_run=dry_run)

    @log_function_call(include_args=True, level="INFO")
    def validate_invoice_job_amounts(
        self,
        invoice_id: str,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ) -> InvoiceValidationResult:
        """Reconcile every job attached to an invoice."""
        return self.reconciler.validate_invoice(
            invoice_id, cancel_event=cancel_event, dry_run=dry_run
        )

    @log_function_call(level="INFO")
    def validate_all_job_amounts(
        self,
        limit: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        dry_run: bool = False,
    ) -> List[InvoiceValidationResult]:
        """Reconcile the jobs of every invoice, up to the batch limit."""
        return self.reconciler.validate_all_invoices(
            limit=limit, cancel_event=cancel_event, dry_run=dry_run
        )

    def get_job_amount_details(self, job_id: str, invoice_id: str) -> JobAmountDetails:
        return self.reconciler.get_job_amount_details(job_id, invoice_id)

    def check_invoice_data(self, invoice_id: str) -> DiagnosticsReport:
        """Report data problems on the jobs of an invoice."""
        return self.data_validator.validate_invoice(invoice_id)
