"""Amount breakdown writer for invoice review exports.

This module turns the job amount details of one or more invoices into a
pandas DataFrame (one row per attached job) and writes it to CSV, so an
operator can review calculated and cached amounts side by side.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from trucking_billing.aggregators.invoice_aggregator import InvoiceCalculation
from trucking_billing.engine import BillingEngine
from trucking_billing.validators.amount_reconciler import JobAmountDetails

logger = logging.getLogger(__name__)


@dataclass
class AmountBreakdownData:
    """Container for the breakdown output.

    Attributes:
        jobs: One row per job-invoice association
        invoices: One row per invoice with its totals
    """

    jobs: pd.DataFrame
    invoices: pd.DataFrame


class AmountBreakdownWriter:
    """Generate amount breakdown DataFrames from the billing engine.

    A job that cannot be read still gets a row, with its error in the
    ``Error`` column, so the export always covers the whole invoice.

    Example:
        >>> writer = AmountBreakdownWriter(engine)
        >>> data = writer.generate(["INV-1"])
        >>> list(data.jobs["Calculated Amount"])
        [380.0, 150.0, 400.0]
        >>> writer.write_csv(["INV-1"], "breakdown.csv")
    """

    JOB_COLUMNS = [
        "Invoice",
        "Job",
        "Dispatch Type",
        "Rate",
        "Start Time",
        "End Time",
        "Hours",
        "Loads",
        "Total Weight",
        "Cached Amount",
        "Calculated Amount",
        "Difference",
        "Matches",
        "Fallback Reasons",
        "Error",
    ]

    INVOICE_COLUMNS = [
        "Invoice",
        "Jobs",
        "Subtotal",
        "Commission %",
        "Commission",
        "Tax",
        "Total",
        "Missing Dispatcher",
        "Missing Jobs",
    ]

    def __init__(self, engine: BillingEngine):
        self.engine = engine

    def generate(self, invoice_ids: List[str]) -> AmountBreakdownData:
        """Build the job and invoice DataFrames.

        Args:
            invoice_ids: Invoices to include, in output order

        Returns:
            AmountBreakdownData

        Raises:
            NotFoundError: If an invoice does not exist
        """
        job_rows = []
        invoice_rows = []
        for invoice_id in invoice_ids:
            for link in self.engine.store.get_invoice_jobs(invoice_id):
                job_rows.append(self._build_job_row(invoice_id, link.job_id))
            totals = self.engine.get_invoice_calculations(invoice_id)
            invoice_rows.append(self._build_invoice_row(invoice_id, totals))

        jobs_df = pd.DataFrame(job_rows, columns=self.JOB_COLUMNS)
        invoices_df = pd.DataFrame(invoice_rows, columns=self.INVOICE_COLUMNS)
        return AmountBreakdownData(jobs=jobs_df, invoices=invoices_df)

    def _build_job_row(self, invoice_id: str, job_id: str) -> Dict:
        try:
            details = self.engine.get_job_amount_details(job_id, invoice_id)
        except Exception as e:
            logger.warning(f"No breakdown for job {job_id} on invoice {invoice_id}: {e}")
            row = dict.fromkeys(self.JOB_COLUMNS)
            row.update({"Invoice": invoice_id, "Job": job_id, "Error": str(e)})
            return row

        return self._details_to_row(details)

    def _details_to_row(self, details: JobAmountDetails) -> Dict:
        cached = details.cached_amount
        return {
            "Invoice": details.invoice_id,
            "Job": details.job_id,
            "Dispatch Type": details.dispatch_type,
            "Rate": self._to_float(details.rate),
            "Start Time": self._format_time(details.start_time),
            "End Time": self._format_time(details.end_time),
            "Hours": self._to_float(details.hours),
            "Loads": details.load_count,
            "Total Weight": self._to_float(details.total_weight),
            "Cached Amount": self._to_float(cached),
            "Calculated Amount": self._to_float(details.calculated_amount),
            "Difference": self._to_float(
                details.calculated_amount - (cached or 0)
            ),
            "Matches": details.amounts_match,
            "Fallback Reasons": ", ".join(r.value for r in details.fallback_reasons),
            "Error": None,
        }

    def _build_invoice_row(self, invoice_id: str, totals: InvoiceCalculation) -> Dict:
        return {
            "Invoice": invoice_id,
            "Jobs": totals.job_count,
            "Subtotal": self._to_float(totals.sub_total),
            "Commission %": self._to_float(totals.commission_percent),
            "Commission": self._to_float(totals.commission),
            "Tax": self._to_float(totals.tax),
            "Total": self._to_float(totals.total),
            "Missing Dispatcher": totals.missing_dispatcher,
            "Missing Jobs": ", ".join(totals.missing_jobs),
        }

    def write_csv(
        self,
        invoice_ids: List[str],
        output_path: Union[str, Path],
        totals_path: Optional[Union[str, Path]] = None,
    ) -> AmountBreakdownData:
        """Generate the breakdown and write it to CSV.

        Args:
            invoice_ids: Invoices to include
            output_path: CSV file for the job rows
            totals_path: Optional CSV file for the invoice totals

        Returns:
            The generated AmountBreakdownData
        """
        data = self.generate(invoice_ids)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        data.jobs.to_csv(output_path, index=False)
        logger.info(f"Wrote {len(data.jobs)} job rows to {output_path}")

        if totals_path:
            totals_path = Path(totals_path)
            totals_path.parent.mkdir(parents=True, exist_ok=True)
            data.invoices.to_csv(totals_path, index=False)
            logger.info(f"Wrote {len(data.invoices)} invoice rows to {totals_path}")

        return data

    @staticmethod
    def _to_float(value) -> Optional[float]:
        return None if value is None else float(value)

    @staticmethod
    def _format_time(value) -> str:
        return value.strftime("%H:%M") if value else ""
