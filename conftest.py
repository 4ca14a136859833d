"""
Global pytest configuration and fixtures.
"""
import json
import os
from decimal import Decimal
from typing import Any, Dict

import pytest

from trucking_billing.config import TruckingBillingConfig, reload_config
from trucking_billing.config.logging_config import reset_logging
from trucking_billing.engine import BillingEngine
from trucking_billing.services import InMemoryRecordStore, JobAmountService


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'TAX_RATE': '0.13',
        'DEFAULT_HOURLY_RATE': '100',
        'AMOUNT_TOLERANCE': '0.01',
        'RECONCILE_MAX_WORKERS': '4',
        'RECONCILE_BATCH_LIMIT': '100',
        'DATA_FILE': 'data/test-records.json',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import trucking_billing.config.settings
    trucking_billing.config.settings._config = None

    yield test_env_vars

    # Clean up
    trucking_billing.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> TruckingBillingConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def sample_records() -> Dict[str, Any]:
    """Sample record document (the JSON record file layout).

    INV-1 holds one job of each billable kind with a mix of fresh, stale
    and missing cached amounts; INV-EMPTY has no jobs; INV-NODISP has no
    dispatcher.
    """
    return {
        "version": "1.0",
        "job_types": [
            {"job_type_id": "JT-HOURLY", "dispatch_type": "Hourly", "rate": "95", "title": "Hourly haul"},
            {"job_type_id": "JT-LOAD", "dispatch_type": "Load", "rate": "50"},
            {"job_type_id": "JT-TON", "dispatch_type": "Tonnage", "rate": "20"},
            {"job_type_id": "JT-FIXED", "dispatch_type": "Fixed", "rate": "250"},
            {"job_type_id": "JT-NORATE", "dispatch_type": "hourly", "rate": None},
            {"job_type_id": "JT-ODD", "dispatch_type": "per-km", "rate": "40"},
        ],
        "jobs": [
            {"job_id": "J-1", "job_type_id": "JT-HOURLY", "driver_id": "DR-1",
             "start_time": "22:00", "end_time": "02:00"},
            {"job_id": "J-2", "job_type_id": "JT-LOAD", "load_count": 3},
            {"job_id": "J-3", "job_type_id": "JT-TON", "weight": "[12.5, 7.5]"},
            {"job_id": "J-4", "job_type_id": "JT-FIXED", "start_time": "08:00",
             "end_time": "17:00", "load_count": 9, "weight": "30 40"},
        ],
        "dispatchers": [
            {"dispatcher_id": "D-1", "name": "North Dispatch", "commission_percent": "10"},
        ],
        "drivers": [
            {"driver_id": "DR-1", "name": "Sam", "pay_percent": "30"},
            {"driver_id": "DR-2", "name": "Alex", "pay_percent": None},
        ],
        "invoices": [
            {"invoice_id": "INV-1", "invoice_number": "2024-001", "dispatcher_id": "D-1",
             "jobs": [
                 {"job_id": "J-1", "amount": "380.00"},
                 {"job_id": "J-2", "amount": "120.00"},
                 {"job_id": "J-3", "amount": None},
             ]},
            {"invoice_id": "INV-EMPTY", "dispatcher_id": "D-1", "jobs": []},
            {"invoice_id": "INV-NODISP", "dispatcher_id": None,
             "jobs": [{"job_id": "J-4", "amount": "250.00"}]},
        ],
    }


def _seed_store(store: InMemoryRecordStore, records: Dict[str, Any]) -> InMemoryRecordStore:
    for record in records["job_types"]:
        store.add_rate_card(record)
    for record in records["jobs"]:
        store.add_job(record)
    for record in records["dispatchers"]:
        store.add_dispatcher(record)
    for record in records["drivers"]:
        store.add_driver(record)
    for record in records["invoices"]:
        invoice = {k: v for k, v in record.items() if k != "jobs"}
        store.add_invoice(invoice)
        for link in record["jobs"]:
            store.attach_job(invoice["invoice_id"], link["job_id"], link["amount"])
    return store


@pytest.fixture
def store(sample_records) -> InMemoryRecordStore:
    """In-memory record store seeded with the sample records."""
    return _seed_store(InMemoryRecordStore(), sample_records)


@pytest.fixture
def job_amount_service(store, test_config) -> JobAmountService:
    """Job amount service over the seeded store."""
    return JobAmountService(store, test_config)


@pytest.fixture
def engine(store, test_config) -> BillingEngine:
    """Billing engine over the seeded store."""
    return BillingEngine(store, test_config)


@pytest.fixture
def records_file(tmp_path, sample_records):
    """The sample records written to a JSON record file."""
    path = tmp_path / "records.json"
    path.write_text(json.dumps(sample_records, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Drop handlers installed by CLI invocations."""
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    # Remove test coverage files in case they're created
    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


# Expected amounts for the sample records
SAMPLE_AMOUNTS = {
    "J-1": Decimal("380.00"),
    "J-2": Decimal("150.00"),
    "J-3": Decimal("400.00"),
    "J-4": Decimal("250.00"),
}


@pytest.fixture
def sample_amounts() -> Dict[str, Decimal]:
    return dict(SAMPLE_AMOUNTS)


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Add integration marker for tests in tests/integration/
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def cli_runner(mock_env, monkeypatch):
    """Click test runner with log output kept off the command output."""
    from click.testing import CliRunner

    monkeypatch.setenv("LOG_LEVEL", "CRITICAL")
    return CliRunner()
