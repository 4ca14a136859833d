"""
Rate resolution for job types.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from trucking_billing.models import DispatchType, RateCard
from trucking_billing.services.record_store import NotFoundError, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class ResolvedRate:
    """
    Dispatch type and rate of a job type.

    Attributes:
        dispatch_type: Parsed dispatch type (None when unrecognized)
        raw_dispatch_type: Dispatch type as stored
        rate: Per-unit rate (None when the job type has no rate)
        rate_card: The job type record itself
    """

    dispatch_type: Optional[DispatchType]
    raw_dispatch_type: str
    rate: Optional[Decimal]
    rate_card: RateCard


class RateResolver:
    """
    Looks up the dispatch type and rate that apply to a job type.

    Example:
        >>> resolver = RateResolver(store)
        >>> resolver.resolve("JT-1").dispatch_type
        <DispatchType.HOURLY: 'Hourly'>
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def resolve(self, job_type_id: Optional[str]) -> ResolvedRate:
        """
        Resolve the rate card for a job type reference.

        Args:
            job_type_id: Job type referenced by a job

        Returns:
            ResolvedRate for the job type

        Raises:
            NotFoundError: If the reference is empty or the job type no
                longer exists
        """
        if not job_type_id:
            raise NotFoundError("job type", None, "Job has no job type")

        rate_card = self.store.get_rate_card(job_type_id)
        dispatch_type = rate_card.resolved_dispatch_type
        if dispatch_type is None:
            logger.debug(
                f"Job type {job_type_id} has unrecognized dispatch type "
                f"{rate_card.dispatch_type!r}"
            )

        return ResolvedRate(
            dispatch_type=dispatch_type,
            raw_dispatch_type=rate_card.dispatch_type,
            rate=rate_card.rate,
            rate_card=rate_card,
        )
