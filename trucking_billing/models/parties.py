"""Dispatcher and driver models."""

from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, field_validator

from trucking_billing.models.base import BaseDataModel
from trucking_billing.models.fields import coerce_decimal


class Dispatcher(BaseDataModel):
    """A dispatcher that bills invoices and takes a commission.

    Attributes:
        dispatcher_id: Unique dispatcher identifier
        name: Dispatcher name
        commission_percent: Commission on the invoice subtotal (0-100)
    """

    dispatcher_id: str = Field(..., min_length=1)
    name: str = Field("", description="Dispatcher name")
    commission_percent: Decimal = Field(Decimal("0"), ge=0, le=100)

    @field_validator("commission_percent", mode="before")
    @classmethod
    def convert_commission(cls, v: Any) -> Decimal:
        # A null commission on the stored record means "no commission"
        converted = coerce_decimal(v)
        return Decimal("0") if converted is None else converted


class Driver(BaseDataModel):
    """A driver assigned to jobs.

    Attributes:
        driver_id: Unique driver identifier
        name: Driver name
        pay_percent: Share of the job amount paid to the driver (0-100);
            None when the driver has no rate on file
    """

    driver_id: str = Field(..., min_length=1)
    name: str = Field("", description="Driver name")
    pay_percent: Optional[Decimal] = Field(None, ge=0, le=100)

    @field_validator("pay_percent", mode="before")
    @classmethod
    def convert_pay_percent(cls, v: Any) -> Optional[Decimal]:
        return coerce_decimal(v)
