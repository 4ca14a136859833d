"""Unit tests for the amount breakdown writer."""

import pandas as pd
import pytest

from trucking_billing.writers import AmountBreakdownWriter


@pytest.fixture
def writer(engine):
    return AmountBreakdownWriter(engine)


class TestGenerate:
    """Test DataFrame generation."""

    def test_job_rows(self, writer):
        data = writer.generate(["INV-1"])
        assert list(data.jobs.columns) == AmountBreakdownWriter.JOB_COLUMNS
        assert list(data.jobs["Job"]) == ["J-1", "J-2", "J-3"]
        assert list(data.jobs["Calculated Amount"]) == [380.0, 150.0, 400.0]
        assert list(data.jobs["Matches"]) == [True, False, False]

    def test_difference_column(self, writer):
        data = writer.generate(["INV-1"])
        assert list(data.jobs["Difference"]) == [0.0, 30.0, 400.0]

    def test_hourly_row_formatting(self, writer):
        row = writer.generate(["INV-1"]).jobs.iloc[0]
        assert row["Start Time"] == "22:00"
        assert row["End Time"] == "02:00"
        assert row["Hours"] == 4.0

    def test_invoice_rows(self, writer):
        data = writer.generate(["INV-1", "INV-NODISP"])
        assert list(data.invoices["Total"]) == [945.81, 0.0]
        assert list(data.invoices["Missing Dispatcher"]) == [False, True]

    def test_empty_invoice(self, writer):
        data = writer.generate(["INV-EMPTY"])
        assert data.jobs.empty
        assert list(data.jobs.columns) == AmountBreakdownWriter.JOB_COLUMNS
        assert len(data.invoices) == 1

    def test_missing_job_row_has_error(self, store, writer):
        store.remove_job("J-2")
        data = writer.generate(["INV-1"])
        row = data.jobs.set_index("Job").loc["J-2"]
        assert "not found" in row["Error"]
        invoice = data.invoices.iloc[0]
        assert invoice["Subtotal"] == 780.0
        assert invoice["Missing Jobs"] == "J-2"


class TestWriteCsv:
    """Test CSV output."""

    def test_write_csv(self, writer, tmp_path):
        output = tmp_path / "out" / "breakdown.csv"
        totals = tmp_path / "out" / "totals.csv"
        writer.write_csv(["INV-1"], output, totals_path=totals)

        jobs = pd.read_csv(output)
        assert len(jobs) == 3
        assert list(jobs["Job"]) == ["J-1", "J-2", "J-3"]
        assert pd.read_csv(totals)["Subtotal"].iloc[0] == 930.0

    def test_does_not_write_amounts(self, store, writer, tmp_path):
        writer.write_csv(["INV-1"], tmp_path / "breakdown.csv")
        assert store.write_count == 0
