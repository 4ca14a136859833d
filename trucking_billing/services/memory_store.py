"""
In-memory record store.

Holds every record in dictionaries guarded by a single lock. Used by the
tests, as the base of the JSON file store, and by any caller that already
has its records loaded.
"""

import logging
import threading
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from trucking_billing.models import (
    Dispatcher,
    Driver,
    Invoice,
    InvoiceJobLink,
    Job,
    RateCard,
)
from trucking_billing.services.record_store import (
    ANY_AMOUNT,
    ConcurrentUpdateError,
    NotAssociatedError,
    NotFoundError,
    RecordStore,
)

logger = logging.getLogger(__name__)

RecordInput = Union[Mapping[str, Any], Any]


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-memory implementation of RecordStore.

    Records can be added as models or as plain dictionaries. Invoice job
    associations keep their insertion order.

    Example:
        >>> store = InMemoryRecordStore()
        >>> store.add_rate_card({"job_type_id": "JT-1", "dispatch_type": "Load", "rate": 50})
        >>> store.add_job({"job_id": "J-1", "job_type_id": "JT-1", "load_count": 3})
        >>> store.add_invoice({"invoice_id": "INV-1", "dispatcher_id": None})
        >>> store.attach_job("INV-1", "J-1", Decimal("120.00"))
        >>> store.get_relationship_amount("J-1", "INV-1")
        Decimal('120.00')
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, Job] = OrderedDict()
        self._rate_cards: Dict[str, RateCard] = OrderedDict()
        self._dispatchers: Dict[str, Dispatcher] = OrderedDict()
        self._drivers: Dict[str, Driver] = OrderedDict()
        self._invoices: Dict[str, Invoice] = OrderedDict()
        self._links: Dict[str, Dict[str, Optional[Decimal]]] = OrderedDict()

        self._lock = threading.RLock()

        self._stats = {"reads": 0, "writes": 0}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def add_job(self, job: RecordInput) -> None:
        record = job if isinstance(job, Job) else Job.model_validate(job)
        with self._lock:
            self._jobs[record.job_id] = record

    def add_rate_card(self, rate_card: RecordInput) -> None:
        record = (
            rate_card
            if isinstance(rate_card, RateCard)
            else RateCard.model_validate(rate_card)
        )
        with self._lock:
            self._rate_cards[record.job_type_id] = record

    def add_dispatcher(self, dispatcher: RecordInput) -> None:
        record = (
            dispatcher
            if isinstance(dispatcher, Dispatcher)
            else Dispatcher.model_validate(dispatcher)
        )
        with self._lock:
            self._dispatchers[record.dispatcher_id] = record

    def add_driver(self, driver: RecordInput) -> None:
        record = driver if isinstance(driver, Driver) else Driver.model_validate(driver)
        with self._lock:
            self._drivers[record.driver_id] = record

    def add_invoice(self, invoice: RecordInput) -> None:
        record = (
            invoice if isinstance(invoice, Invoice) else Invoice.model_validate(invoice)
        )
        with self._lock:
            self._invoices[record.invoice_id] = record
            self._links.setdefault(record.invoice_id, OrderedDict())

    def attach_job(
        self, invoice_id: str, job_id: str, amount: Optional[Decimal] = None
    ) -> None:
        """
        Attach a job to an invoice with the amount cached at invoicing time.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        link = InvoiceJobLink(
            job_id=job_id, invoice_id=invoice_id, relationship_amount=amount
        )
        with self._lock:
            if invoice_id not in self._invoices:
                raise NotFoundError("invoice", invoice_id)
            self._links[invoice_id][job_id] = link.relationship_amount

    def remove_job(self, job_id: str) -> None:
        """Delete a job record, leaving any invoice associations dangling."""
        with self._lock:
            self._jobs.pop(job_id, None)

    def update_job(self, job_id: str, **changes: Any) -> None:
        """Edit fields of an existing job."""
        with self._lock:
            data = self.get_job(job_id).model_dump()
            data.update(changes)
            self._jobs[job_id] = Job.model_validate(data)

    def update_rate_card(self, job_type_id: str, **changes: Any) -> None:
        """Edit fields of an existing rate card."""
        with self._lock:
            card = self.get_rate_card(job_type_id)
            data = card.model_dump()
            data.update(changes)
            self._rate_cards[job_type_id] = RateCard.model_validate(data)

    # ------------------------------------------------------------------
    # RecordStore interface
    # ------------------------------------------------------------------

    def _get(self, table: Dict[str, Any], entity: str, key: Optional[str]) -> Any:
        with self._lock:
            self._stats["reads"] += 1
            if key is None or key not in table:
                raise NotFoundError(entity, key)
            return table[key]

    def get_job(self, job_id: str) -> Job:
        return self._get(self._jobs, "job", job_id)

    def get_rate_card(self, job_type_id: str) -> RateCard:
        return self._get(self._rate_cards, "job type", job_type_id)

    def get_dispatcher(self, dispatcher_id: str) -> Dispatcher:
        return self._get(self._dispatchers, "dispatcher", dispatcher_id)

    def get_driver(self, driver_id: str) -> Driver:
        return self._get(self._drivers, "driver", driver_id)

    def get_invoice(self, invoice_id: str) -> Invoice:
        return self._get(self._invoices, "invoice", invoice_id)

    def list_invoice_ids(self) -> List[str]:
        with self._lock:
            return list(self._invoices)

    def get_invoice_jobs(self, invoice_id: str) -> List[InvoiceJobLink]:
        with self._lock:
            self._stats["reads"] += 1
            if invoice_id not in self._invoices:
                raise NotFoundError("invoice", invoice_id)
            return [
                InvoiceJobLink(
                    job_id=job_id, invoice_id=invoice_id, relationship_amount=amount
                )
                for job_id, amount in self._links[invoice_id].items()
            ]

    def get_relationship_amount(self, job_id: str, invoice_id: str) -> Optional[Decimal]:
        with self._lock:
            self._stats["reads"] += 1
            links = self._links.get(invoice_id)
            if links is None or job_id not in links:
                raise NotAssociatedError(job_id, invoice_id)
            return links[job_id]

    def set_relationship_amount(
        self,
        job_id: str,
        invoice_id: str,
        amount: Decimal,
        expected: Any = ANY_AMOUNT,
    ) -> None:
        with self._lock:
            links = self._links.get(invoice_id)
            if links is None or job_id not in links:
                raise NotAssociatedError(job_id, invoice_id)

            previous = links[job_id]
            if expected is not ANY_AMOUNT and previous != expected:
                raise ConcurrentUpdateError(job_id, invoice_id, expected, previous)

            links[job_id] = Decimal(amount)
            try:
                self._after_write()
            except Exception:
                links[job_id] = previous
                raise
            self._stats["writes"] += 1

    def _after_write(self) -> None:
        """Hook run under the lock after every association write.

        If it raises, the write is rolled back.
        """

    @property
    def write_count(self) -> int:
        """Number of association writes performed so far."""
        with self._lock:
            return self._stats["writes"]

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "jobs": len(self._jobs),
                "job_types": len(self._rate_cards),
                "dispatchers": len(self._dispatchers),
                "drivers": len(self._drivers),
                "invoices": len(self._invoices),
                "associations": sum(len(links) for links in self._links.values()),
                "reads": self._stats["reads"],
                "writes": self._stats["writes"],
            }
