"""Base model for all record models in the trucking billing engine.

This module provides a base Pydantic model with common configuration
shared by jobs, rate cards, dispatchers, drivers and invoices.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all record models.

    Records arrive from the record store as plain dictionaries, so the
    models validate on construction and on assignment, accept Decimal,
    date and time values, and reject unknown keys to catch store/schema
    drift early.

    Example:
        >>> class Unit(BaseDataModel):
        ...     unit_id: str
        ...     plate: str
        >>> Unit(unit_id="U1", plate="ABCD123").model_dump()
        {'unit_id': 'U1', 'plate': 'ABCD123'}
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        strict=False,
        extra="forbid",
        frozen=False,
    )
