"""Unit tests for the in-memory record store."""

import threading
from decimal import Decimal
from unittest.mock import patch

import pytest

from trucking_billing.models import Job
from trucking_billing.services import (
    ConcurrentUpdateError,
    InMemoryRecordStore,
    NotAssociatedError,
    NotFoundError,
)


class TestReads:
    """Test record lookups."""

    def test_get_job(self, store):
        job = store.get_job("J-1")
        assert isinstance(job, Job)
        assert job.job_type_id == "JT-HOURLY"

    @pytest.mark.parametrize(
        "getter,key,entity",
        [
            ("get_job", "J-404", "job"),
            ("get_rate_card", "JT-404", "job type"),
            ("get_dispatcher", "D-404", "dispatcher"),
            ("get_driver", "DR-404", "driver"),
            ("get_invoice", "INV-404", "invoice"),
        ],
    )
    def test_missing_records_raise_not_found(self, store, getter, key, entity):
        with pytest.raises(NotFoundError) as exc_info:
            getattr(store, getter)(key)
        assert exc_info.value.entity == entity
        assert exc_info.value.entity_id == key

    def test_invoice_jobs_keep_attach_order(self, store):
        links = store.get_invoice_jobs("INV-1")
        assert [link.job_id for link in links] == ["J-1", "J-2", "J-3"]
        assert links[1].relationship_amount == Decimal("120.00")
        assert links[2].relationship_amount is None

    def test_invoice_with_no_jobs(self, store):
        assert store.get_invoice_jobs("INV-EMPTY") == []

    def test_unknown_invoice_jobs(self, store):
        with pytest.raises(NotFoundError):
            store.get_invoice_jobs("INV-404")

    def test_list_invoice_ids(self, store):
        assert store.list_invoice_ids() == ["INV-1", "INV-EMPTY", "INV-NODISP"]

    def test_get_job_with_rate_card(self, store):
        job, card = store.get_job_with_rate_card("J-2")
        assert job.job_id == "J-2"
        assert card.rate == Decimal("50")

    def test_get_dispatcher_commission(self, store):
        assert store.get_dispatcher_commission("D-1") == Decimal("10")


class TestRelationshipAmounts:
    """Test the single write the engine performs."""

    def test_get_and_set(self, store):
        store.set_relationship_amount("J-2", "INV-1", Decimal("150.00"))
        assert store.get_relationship_amount("J-2", "INV-1") == Decimal("150.00")
        assert store.write_count == 1

    def test_not_associated(self, store):
        with pytest.raises(NotAssociatedError):
            store.get_relationship_amount("J-4", "INV-1")
        with pytest.raises(NotAssociatedError):
            store.set_relationship_amount("J-4", "INV-1", Decimal("1"))
        assert store.write_count == 0

    def test_not_associated_is_a_not_found(self):
        assert issubclass(NotAssociatedError, NotFoundError)

    def test_attach_to_missing_invoice(self, store):
        with pytest.raises(NotFoundError):
            store.attach_job("INV-404", "J-1")

    def test_concurrent_writes_are_all_counted(self, store):
        def write(n):
            store.set_relationship_amount("J-1", "INV-1", Decimal(n))

        threads = [threading.Thread(target=write, args=(n,)) for n in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.write_count == 20

    def test_write_with_matching_expected_amount(self, store):
        store.set_relationship_amount(
            "J-2", "INV-1", Decimal("150.00"), expected=Decimal("120")
        )
        assert store.get_relationship_amount("J-2", "INV-1") == Decimal("150.00")

    def test_expected_null_amount(self, store):
        store.set_relationship_amount("J-3", "INV-1", Decimal("400.00"), expected=None)
        assert store.get_relationship_amount("J-3", "INV-1") == Decimal("400.00")

    def test_write_with_changed_amount_rejected(self, store):
        with pytest.raises(ConcurrentUpdateError) as exc_info:
            store.set_relationship_amount(
                "J-2", "INV-1", Decimal("150.00"), expected=Decimal("99.00")
            )
        assert exc_info.value.actual == Decimal("120.00")
        assert store.get_relationship_amount("J-2", "INV-1") == Decimal("120.00")
        assert store.write_count == 0

    def test_only_one_conditional_write_wins(self, store):
        outcomes = []

        def write():
            try:
                store.set_relationship_amount(
                    "J-2", "INV-1", Decimal("150.00"), expected=Decimal("120.00")
                )
                outcomes.append("written")
            except ConcurrentUpdateError:
                outcomes.append("rejected")

        threads = [threading.Thread(target=write) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("written") == 1
        assert store.write_count == 1

    def test_failed_persist_rolls_back(self, store):
        with patch.object(store, "_after_write", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.set_relationship_amount("J-2", "INV-1", Decimal("150.00"))
        assert store.get_relationship_amount("J-2", "INV-1") == Decimal("120.00")
        assert store.write_count == 0


class TestEdits:
    """Test the upstream-edit helpers used to make amounts stale."""

    def test_update_job(self, store):
        store.update_job("J-2", load_count=4)
        assert store.get_job("J-2").load_count == 4

    def test_update_rate_card(self, store):
        store.update_rate_card("JT-LOAD", rate="55")
        assert store.get_rate_card("JT-LOAD").rate == Decimal("55")

    def test_remove_job_leaves_association(self, store):
        store.remove_job("J-2")
        with pytest.raises(NotFoundError):
            store.get_job("J-2")
        assert store.get_relationship_amount("J-2", "INV-1") == Decimal("120.00")

    def test_statistics(self, store):
        stats = store.get_statistics()
        assert stats["jobs"] == 4
        assert stats["invoices"] == 3
        assert stats["associations"] == 4

    def test_add_records_as_dicts(self):
        store = InMemoryRecordStore()
        store.add_rate_card({"job_type_id": "JT", "dispatch_type": "Fixed", "rate": 10})
        store.add_job({"job_id": "J", "job_type_id": "JT"})
        assert store.get_job("J").job_type_id == "JT"
