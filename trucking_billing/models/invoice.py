"""Invoice and job-invoice association models."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from trucking_billing.models.base import BaseDataModel
from trucking_billing.models.fields import coerce_decimal


class Invoice(BaseDataModel):
    """An invoice billed through a dispatcher.

    Attributes:
        invoice_id: Unique invoice identifier
        invoice_number: Optional human-facing invoice number
        dispatcher_id: Dispatcher the invoice is billed by (None if unset)
    """

    invoice_id: str = Field(..., min_length=1)
    invoice_number: Optional[str] = Field(None)
    dispatcher_id: Optional[str] = Field(None)


class InvoiceJobLink(BaseDataModel):
    """Association of a job with an invoice.

    ``relationship_amount`` is the amount cached on the association when
    the job was attached. It can go stale when the job or its rate card is
    edited afterwards; only the reconciler overwrites it. For display,
    prefer the freshly calculated amount and keep this one for audit.

    Attributes:
        job_id: Attached job
        invoice_id: Invoice the job is attached to
        relationship_amount: Cached amount (None when never recorded)
    """

    job_id: str = Field(..., min_length=1)
    invoice_id: str = Field(..., min_length=1)
    relationship_amount: Optional[Decimal] = Field(None)

    @field_validator("relationship_amount", mode="before")
    @classmethod
    def convert_amount(cls, v: Any) -> Optional[Decimal]:
        return coerce_decimal(v)
