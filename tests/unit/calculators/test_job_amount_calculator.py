"""Unit tests for the job amount calculation engine."""

from decimal import Decimal

import pytest

from trucking_billing.calculators.job_amount_calculator import (
    FallbackReason,
    calculate_driver_pay,
    calculate_job_amount,
    calculate_job_amount_breakdown,
    job_type_not_found_result,
)
from trucking_billing.calculators.money import MAX_JOB_AMOUNT, round_amount
from trucking_billing.models import DispatchType, Job, RateCard


def card(dispatch_type, rate):
    return RateCard(job_type_id="JT", dispatch_type=dispatch_type, rate=rate)


class TestHourly:
    """Test hourly pricing."""

    def test_overnight_hourly_job(self):
        job = Job(job_id="J", start_time="22:00", end_time="02:00")
        result = calculate_job_amount_breakdown(job, card("Hourly", "95"))

        assert result.amount == Decimal("380.00")
        assert result.hours == Decimal("4")
        assert result.dispatch_type is DispatchType.HOURLY
        assert not result.is_fallback

    def test_fractional_hours_rounded_only_at_the_end(self):
        # 500 minutes at 100/h = 833.333... -> 833.33
        job = Job(job_id="J", start_time="06:10", end_time="14:30")
        assert calculate_job_amount(job, card("Hourly", "100")) == Decimal("833.33")

    def test_missing_time_prices_zero_with_reason(self):
        job = Job(job_id="J", start_time="08:00")
        result = calculate_job_amount_breakdown(job, card("Hourly", "95"))

        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.MISSING_TIMES]
        assert result.is_fallback

    def test_missing_rate_uses_default_hourly_rate(self):
        job = Job(job_id="J", start_time="08:00", end_time="10:00")
        result = calculate_job_amount_breakdown(
            job, card("Hourly", None), default_hourly_rate=Decimal("100")
        )

        assert result.amount == Decimal("200.00")
        assert result.fallback_reasons == [FallbackReason.DEFAULT_HOURLY_RATE]

    def test_zero_rate_is_not_replaced_by_default(self):
        job = Job(job_id="J", start_time="08:00", end_time="10:00")
        result = calculate_job_amount_breakdown(
            job, card("Hourly", "0"), default_hourly_rate=Decimal("100")
        )

        assert result.amount == Decimal("0.00")
        assert not result.is_fallback

    def test_dispatch_type_is_case_insensitive(self):
        job = Job(job_id="J", start_time="08:00", end_time="09:00")
        assert calculate_job_amount(job, card("HOURLY", "60")) == Decimal("60.00")


class TestLoad:
    """Test load pricing."""

    def test_three_loads_at_fifty(self):
        job = Job(job_id="J", load_count=3)
        assert calculate_job_amount(job, card("Load", "50")) == Decimal("150.00")

    def test_missing_load_count(self):
        result = calculate_job_amount_breakdown(Job(job_id="J"), card("Load", "50"))
        assert result.amount == Decimal("0.00")
        assert result.load_count == 0
        assert result.fallback_reasons == [FallbackReason.MISSING_LOAD_COUNT]

    def test_zero_loads_is_a_computed_zero(self):
        result = calculate_job_amount_breakdown(Job(job_id="J", load_count=0), card("Load", "50"))
        assert result.amount == Decimal("0.00")
        assert not result.is_fallback


class TestTonnage:
    """Test tonnage pricing."""

    def test_json_weights(self):
        job = Job(job_id="J", weight="[12.5, 7.5]")
        result = calculate_job_amount_breakdown(job, card("Tonnage", "20"))
        assert result.amount == Decimal("400.00")
        assert result.total_weight == Decimal("20.0")

    def test_all_weight_encodings_price_the_same(self):
        amounts = {
            calculate_job_amount(Job(job_id="J", weight=weight), card("Tonnage", "20"))
            for weight in ["[12.5,7.5]", "12.5 7.5", [12.5, 7.5]]
        }
        assert amounts == {Decimal("400.00")}

    def test_no_weights(self):
        result = calculate_job_amount_breakdown(Job(job_id="J"), card("Tonnage", "20"))
        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.NO_WEIGHTS]

    def test_partially_unparsable_weights(self):
        job = Job(job_id="J", weight="10 oops 5")
        result = calculate_job_amount_breakdown(job, card("Tonnage", "2"))
        assert result.amount == Decimal("30.00")
        assert result.fallback_reasons == [FallbackReason.UNPARSABLE_WEIGHT_TOKENS]


class TestFixed:
    """Test fixed pricing."""

    def test_fixed_ignores_job_fields(self):
        job = Job(
            job_id="J",
            start_time="08:00",
            end_time="17:00",
            load_count=9,
            weight="30 40",
        )
        assert calculate_job_amount(job, card("Fixed", "250")) == Decimal("250.00")

    def test_unrecognized_dispatch_type_priced_as_flat_rate(self):
        result = calculate_job_amount_breakdown(Job(job_id="J", load_count=4), card("per-km", "40"))
        assert result.amount == Decimal("40.00")
        assert result.dispatch_type is None
        assert result.raw_dispatch_type == "per-km"
        assert result.fallback_reasons == [FallbackReason.UNRECOGNIZED_DISPATCH_TYPE]

    def test_missing_rate(self):
        result = calculate_job_amount_breakdown(Job(job_id="J"), card("Fixed", None))
        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.MISSING_RATE]


class TestOutOfRange:
    """Test amounts too large to bill."""

    def test_huge_weight_priced_at_zero(self):
        job = Job(job_id="J", weight="1e27")
        result = calculate_job_amount_breakdown(job, card("Tonnage", "50"))
        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.AMOUNT_OUT_OF_RANGE]

    def test_huge_flat_rate_priced_at_zero(self):
        result = calculate_job_amount_breakdown(Job(job_id="J"), card("Fixed", "1e30"))
        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.AMOUNT_OUT_OF_RANGE]

    def test_amount_above_cap_priced_at_zero(self):
        job = Job(job_id="J", load_count=3)
        result = calculate_job_amount_breakdown(job, card("Load", "600000000"))
        assert result.amount == Decimal("0.00")
        assert result.is_fallback

    def test_amount_at_cap_is_kept(self):
        job = Job(job_id="J", load_count=2)
        result = calculate_job_amount_breakdown(job, card("Load", "500000000"))
        assert result.amount == MAX_JOB_AMOUNT
        assert result.fallback_reasons == []


class TestPurity:
    """Test that pricing depends only on its inputs."""

    def test_repeated_calls_return_same_amount(self):
        job = Job(job_id="J", start_time="21:17", end_time="03:41")
        rate_card = card("Hourly", "87.35")
        amounts = {calculate_job_amount(job, rate_card) for _ in range(5)}
        assert len(amounts) == 1

    def test_amount_is_never_negative(self):
        job = Job(job_id="J", start_time="10:00", end_time="09:00")
        assert calculate_job_amount(job, card("Hourly", "10")) >= 0


class TestHelpers:
    """Test the not-found result, driver pay and rounding."""

    def test_job_type_not_found_result(self):
        result = job_type_not_found_result()
        assert result.amount == Decimal("0.00")
        assert result.fallback_reasons == [FallbackReason.JOB_TYPE_NOT_FOUND]

    def test_driver_pay(self):
        assert calculate_driver_pay(Decimal("380.00"), Decimal("30")) == Decimal("114.00")

    def test_driver_pay_without_percent(self):
        assert calculate_driver_pay(Decimal("380.00"), None) == Decimal("0.00")

    @pytest.mark.parametrize(
        "value,expected",
        [("10.005", "10.01"), ("10.004", "10.00"), ("2.675", "2.68"), ("0", "0.00")],
    )
    def test_round_half_up(self, value, expected):
        assert round_amount(Decimal(value)) == Decimal(expected)
