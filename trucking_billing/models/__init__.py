"""Data models for the trucking billing engine.

This package contains Pydantic models for the records the engine reads:
- BaseDataModel: Base class with common configuration
- DispatchType: Billing method enum
- Job / RateCard: Unit of work and its job type
- Dispatcher / Driver: Parties paid from a job or invoice
- Invoice / InvoiceJobLink: Invoice and its cached job amounts
"""

from trucking_billing.models.base import BaseDataModel
from trucking_billing.models.dispatch import DispatchType
from trucking_billing.models.invoice import Invoice, InvoiceJobLink
from trucking_billing.models.job import Job, RateCard
from trucking_billing.models.parties import Dispatcher, Driver

__all__ = [
    "BaseDataModel",
    "DispatchType",
    "Dispatcher",
    "Driver",
    "Invoice",
    "InvoiceJobLink",
    "Job",
    "RateCard",
]
