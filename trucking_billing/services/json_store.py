"""
JSON file record store.

Loads all records from a single JSON document and writes the document
back, atomically, after every association amount change. This is the
store the CLI works against.

File layout::

    {
      "version": "1.0",
      "job_types":   [{"job_type_id": "JT-1", "dispatch_type": "Hourly", "rate": "95"}],
      "jobs":        [{"job_id": "J-1", "job_type_id": "JT-1",
                       "start_time": "22:00", "end_time": "02:00"}],
      "dispatchers": [{"dispatcher_id": "D-1", "name": "North", "commission_percent": "5"}],
      "drivers":     [{"driver_id": "DR-1", "name": "Sam", "pay_percent": "30"}],
      "invoices":    [{"invoice_id": "INV-1", "dispatcher_id": "D-1",
                       "jobs": [{"job_id": "J-1", "amount": "380.00"}]}]
    }
"""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from trucking_billing.services.memory_store import InMemoryRecordStore
from trucking_billing.services.record_store import RecordStoreError

logger = logging.getLogger(__name__)


class JsonFileRecordStore(InMemoryRecordStore):
    """
    Record store backed by a JSON file.

    Example:
        >>> store = JsonFileRecordStore("data/records.json")
        >>> store.get_invoice_jobs("INV-1")
        [InvoiceJobLink(job_id='J-1', invoice_id='INV-1', ...)]
    """

    FILE_VERSION = "1.0"

    def __init__(self, file_path: Union[str, Path]):
        """
        Load records from a JSON file.

        Args:
            file_path: Path of the JSON record file

        Raises:
            RecordStoreError: If the file is missing, corrupted, or holds
                invalid records
        """
        super().__init__()
        self.file_path = Path(file_path)
        self._load_from_disk()

    def _load_from_disk(self) -> None:
        if not self.file_path.exists():
            raise RecordStoreError(f"Record file not found: {self.file_path}")

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise RecordStoreError(
                f"Failed to parse record file {self.file_path} (corrupted JSON): {e}"
            ) from e
        except OSError as e:
            raise RecordStoreError(f"Failed to read record file {self.file_path}: {e}") from e

        version = document.get("version", self.FILE_VERSION)
        if version != self.FILE_VERSION:
            raise RecordStoreError(
                f"Unsupported record file version {version!r} "
                f"(expected {self.FILE_VERSION})"
            )

        try:
            for record in document.get("job_types", []):
                self.add_rate_card(record)
            for record in document.get("jobs", []):
                self.add_job(record)
            for record in document.get("dispatchers", []):
                self.add_dispatcher(record)
            for record in document.get("drivers", []):
                self.add_driver(record)
            for record in document.get("invoices", []):
                attached = record.get("jobs", [])
                invoice = {k: v for k, v in record.items() if k != "jobs"}
                self.add_invoice(invoice)
                for link in attached:
                    self.attach_job(invoice["invoice_id"], link["job_id"], link.get("amount"))
        except (ValidationError, KeyError, TypeError, AttributeError) as e:
            raise RecordStoreError(f"Invalid record in {self.file_path}: {e}") from e

        stats = self.get_statistics()
        logger.info(
            f"Loaded {stats['jobs']} jobs, {stats['invoices']} invoices and "
            f"{stats['associations']} associations from {self.file_path}"
        )

    def _to_document(self) -> Dict[str, Any]:
        invoices: List[Dict[str, Any]] = []
        for invoice_id, invoice in self._invoices.items():
            data = invoice.model_dump(mode="json")
            data["jobs"] = [
                {"job_id": job_id, "amount": None if amount is None else str(amount)}
                for job_id, amount in self._links[invoice_id].items()
            ]
            invoices.append(data)

        return {
            "version": self.FILE_VERSION,
            "last_updated": datetime.now().isoformat(),
            "job_types": [r.model_dump(mode="json") for r in self._rate_cards.values()],
            "jobs": [r.model_dump(mode="json") for r in self._jobs.values()],
            "dispatchers": [r.model_dump(mode="json") for r in self._dispatchers.values()],
            "drivers": [r.model_dump(mode="json") for r in self._drivers.values()],
            "invoices": invoices,
        }

    def _after_write(self) -> None:
        self._save_to_disk()

    def _save_to_disk(self) -> None:
        """
        Write the document using an atomic temp file + rename.

        Raises:
            RecordStoreError: If the file cannot be written
        """
        document = self._to_document()
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(dir=self.file_path.parent, suffix=".tmp")
        except OSError as e:
            raise RecordStoreError(f"Failed to save record file {self.file_path}: {e}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, default=str)
            os.replace(temp_path, self.file_path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise RecordStoreError(f"Failed to save record file {self.file_path}: {e}") from e

        logger.debug(f"Saved record file {self.file_path}")
