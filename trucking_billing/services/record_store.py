"""
Record store interface consumed by the billing engine.

The engine never owns storage. It reads jobs, job types, dispatchers,
drivers, invoices and job-invoice associations through this interface,
and issues exactly one kind of write: replacing the cached amount on a
job-invoice association.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from trucking_billing.models import (
    Dispatcher,
    Driver,
    Invoice,
    InvoiceJobLink,
    Job,
    RateCard,
)

logger = logging.getLogger(__name__)

# Default for set_relationship_amount: overwrite whatever is stored
ANY_AMOUNT: Any = object()


class RecordStoreError(Exception):
    """Raised when the record store cannot serve a read or write."""

    pass


class NotFoundError(RecordStoreError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: Optional[str], message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} not found: {entity_id}")


class NotAssociatedError(NotFoundError):
    """Raised when a job is not attached to the given invoice."""

    def __init__(self, job_id: str, invoice_id: str):
        self.job_id = job_id
        self.invoice_id = invoice_id
        super().__init__(
            "association",
            f"{job_id}/{invoice_id}",
            f"Job {job_id} is not attached to invoice {invoice_id}",
        )


class MissingDispatcherError(NotFoundError):
    """Raised when an invoice has no resolvable dispatcher."""

    def __init__(self, invoice_id: str, dispatcher_id: Optional[str] = None):
        self.invoice_id = invoice_id
        if dispatcher_id:
            message = f"Dispatcher {dispatcher_id} for invoice {invoice_id} not found"
        else:
            message = f"Invoice {invoice_id} has no dispatcher"
        super().__init__("dispatcher", dispatcher_id, message)


class ConcurrentUpdateError(RecordStoreError):
    """Raised when an association amount changed after it was read."""

    def __init__(
        self,
        job_id: str,
        invoice_id: str,
        expected: Optional[Decimal],
        actual: Optional[Decimal],
    ):
        self.job_id = job_id
        self.invoice_id = invoice_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Amount of job {job_id} on invoice {invoice_id} changed "
            f"(expected {expected}, found {actual})"
        )


class RecordStore(ABC):
    """
    Abstract record store.

    Implementations must be safe to call from several threads at once:
    the reconciler validates the jobs of an invoice on a worker pool.
    Every getter raises NotFoundError for a missing record and
    RecordStoreError when the store itself fails.
    """

    @abstractmethod
    def get_job(self, job_id: str) -> Job:
        """Fetch a job."""

    @abstractmethod
    def get_rate_card(self, job_type_id: str) -> RateCard:
        """Fetch a job type (rate card)."""

    @abstractmethod
    def get_dispatcher(self, dispatcher_id: str) -> Dispatcher:
        """Fetch a dispatcher."""

    @abstractmethod
    def get_driver(self, driver_id: str) -> Driver:
        """Fetch a driver."""

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Invoice:
        """Fetch an invoice."""

    @abstractmethod
    def list_invoice_ids(self) -> List[str]:
        """List all invoice identifiers."""

    @abstractmethod
    def get_invoice_jobs(self, invoice_id: str) -> List[InvoiceJobLink]:
        """List the job associations of an invoice (empty if none)."""

    @abstractmethod
    def get_relationship_amount(self, job_id: str, invoice_id: str) -> Optional[Decimal]:
        """
        Read the cached amount of a job-invoice association.

        Raises:
            NotAssociatedError: If the job is not attached to the invoice
        """

    @abstractmethod
    def set_relationship_amount(
        self,
        job_id: str,
        invoice_id: str,
        amount: Decimal,
        expected: Any = ANY_AMOUNT,
    ) -> None:
        """
        Replace the cached amount of a job-invoice association.

        When ``expected`` is given (None included) the write only happens if
        the stored amount still equals it; the check and the write are one
        atomic step. A write that cannot be persisted leaves the stored
        amount unchanged.

        Raises:
            NotAssociatedError: If the job is not attached to the invoice
            ConcurrentUpdateError: If the stored amount differs from ``expected``
            RecordStoreError: If the write cannot be persisted
        """

    def get_job_with_rate_card(self, job_id: str) -> Tuple[Job, RateCard]:
        """
        Fetch a job together with its rate card.

        Raises:
            NotFoundError: If the job, or its job type, does not exist
        """
        job = self.get_job(job_id)
        if not job.job_type_id:
            raise NotFoundError("job type", None, f"Job {job_id} has no job type")
        return job, self.get_rate_card(job.job_type_id)

    def get_dispatcher_commission(self, dispatcher_id: str) -> Decimal:
        """Fetch a dispatcher's commission percentage (0-100)."""
        return self.get_dispatcher(dispatcher_id).commission_percent
