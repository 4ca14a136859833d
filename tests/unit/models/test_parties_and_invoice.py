"""Unit tests for dispatcher, driver and invoice models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from trucking_billing.models import Dispatcher, DispatchType, Driver, Invoice, InvoiceJobLink


class TestDispatchType:
    """Test dispatch type parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Hourly", DispatchType.HOURLY),
            (" load ", DispatchType.LOAD),
            ("TONNAGE", DispatchType.TONNAGE),
            ("fixed", DispatchType.FIXED),
            (DispatchType.FIXED, DispatchType.FIXED),
        ],
    )
    def test_parse(self, value, expected):
        assert DispatchType.parse(value) is expected

    @pytest.mark.parametrize("value", ["per-km", "", None, 3])
    def test_parse_unknown(self, value):
        assert DispatchType.parse(value) is None


class TestDispatcher:
    """Test Dispatcher model."""

    def test_null_commission_is_zero(self):
        dispatcher = Dispatcher(dispatcher_id="D-1", commission_percent=None)
        assert dispatcher.commission_percent == Decimal("0")

    def test_commission_above_hundred_rejected(self):
        with pytest.raises(ValidationError):
            Dispatcher(dispatcher_id="D-1", commission_percent="150")


class TestDriver:
    """Test Driver model."""

    def test_pay_percent_optional(self):
        assert Driver(driver_id="DR-1").pay_percent is None

    def test_pay_percent_parsed(self):
        assert Driver(driver_id="DR-1", pay_percent="30").pay_percent == Decimal("30")


class TestInvoice:
    """Test Invoice and InvoiceJobLink models."""

    def test_invoice_without_dispatcher(self):
        assert Invoice(invoice_id="INV-1").dispatcher_id is None

    def test_link_amount_coerced(self):
        link = InvoiceJobLink(job_id="J-1", invoice_id="INV-1", relationship_amount=120.5)
        assert link.relationship_amount == Decimal("120.5")

    def test_link_amount_may_be_null(self):
        link = InvoiceJobLink(job_id="J-1", invoice_id="INV-1", relationship_amount=None)
        assert link.relationship_amount is None
