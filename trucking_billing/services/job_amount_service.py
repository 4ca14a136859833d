"""
Store-backed job amount calculation.

Wraps the pure job amount calculator with record lookups: fetch the job,
resolve its rate card, price it with the configured default hourly rate.
"""

import logging
from decimal import Decimal
from typing import Optional

from trucking_billing.calculators.job_amount_calculator import (
    JobAmountResult,
    calculate_driver_pay,
    calculate_job_amount_breakdown,
    job_type_not_found_result,
)
from trucking_billing.config.settings import TruckingBillingConfig
from trucking_billing.models import Job
from trucking_billing.services.rate_resolver import RateResolver
from trucking_billing.services.record_store import NotFoundError, RecordStore

logger = logging.getLogger(__name__)


class JobAmountService:
    """
    Calculates job amounts from stored records.

    A job that cannot be read raises NotFoundError. A job whose job type
    is missing is priced at zero with ``JOB_TYPE_NOT_FOUND`` recorded, since
    it cannot be priced but is still a valid job.

    Example:
        >>> service = JobAmountService(store, config)
        >>> service.calculate_job_amount("J-1")
        Decimal('380.00')
    """

    def __init__(
        self,
        store: RecordStore,
        config: TruckingBillingConfig,
        rate_resolver: Optional[RateResolver] = None,
    ):
        self.store = store
        self.config = config
        self.rate_resolver = rate_resolver or RateResolver(store)

    def price_job(self, job: Job) -> JobAmountResult:
        """
        Price an already-loaded job.

        Args:
            job: Job record

        Returns:
            JobAmountResult with amount and fallback reasons
        """
        try:
            resolved = self.rate_resolver.resolve(job.job_type_id)
        except NotFoundError:
            logger.debug(f"Job {job.job_id} references a missing job type, pricing at 0")
            return job_type_not_found_result()

        result = calculate_job_amount_breakdown(
            job,
            resolved.rate_card,
            default_hourly_rate=self.config.default_hourly_rate,
        )
        if result.is_fallback:
            reasons = ", ".join(reason.value for reason in result.fallback_reasons)
            logger.debug(f"Job {job.job_id} priced via fallback ({reasons}): {result.amount}")
        return result

    def calculate_job_breakdown(self, job_id: str) -> JobAmountResult:
        """
        Calculate a job's amount with its breakdown.

        Raises:
            NotFoundError: If the job does not exist
        """
        return self.price_job(self.store.get_job(job_id))

    def calculate_job_amount(self, job_id: str) -> Decimal:
        """
        Calculate a job's amount (2 decimal places).

        Raises:
            NotFoundError: If the job does not exist
        """
        return self.calculate_job_breakdown(job_id).amount

    def calculate_driver_pay(self, job_id: str) -> Decimal:
        """
        Calculate the pay owed to a job's driver.

        Returns 0.00 when no driver is assigned, the driver record is gone,
        or the driver has no pay percentage.

        Raises:
            NotFoundError: If the job does not exist
        """
        job = self.store.get_job(job_id)
        if not job.driver_id:
            return Decimal("0.00")

        try:
            driver = self.store.get_driver(job.driver_id)
        except NotFoundError:
            logger.warning(f"Driver {job.driver_id} of job {job_id} not found")
            return Decimal("0.00")

        return calculate_driver_pay(self.price_job(job).amount, driver.pay_percent)
