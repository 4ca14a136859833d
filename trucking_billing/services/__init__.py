"""
Record store access and store-backed services.

This package provides:
- The RecordStore interface and its error hierarchy
- In-memory and JSON file record stores
- Rate resolution for job types
- Store-backed job amount calculation
"""

from .job_amount_service import JobAmountService
from .json_store import JsonFileRecordStore
from .memory_store import InMemoryRecordStore
from .rate_resolver import RateResolver, ResolvedRate
from .record_store import (
    ANY_AMOUNT,
    ConcurrentUpdateError,
    MissingDispatcherError,
    NotAssociatedError,
    NotFoundError,
    RecordStore,
    RecordStoreError,
)

__all__ = [
    "RecordStore",
    "RecordStoreError",
    "ConcurrentUpdateError",
    "ANY_AMOUNT",
    "NotFoundError",
    "NotAssociatedError",
    "MissingDispatcherError",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RateResolver",
    "ResolvedRate",
    "JobAmountService",
]
