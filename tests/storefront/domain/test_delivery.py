"""Tests for delivery options, shipping fees and business-day arithmetic."""

from datetime import date

import pytest
from storefront.shared.delivery import (
    DeliveryOption,
    add_business_days,
    estimate_delivery,
    shipping_fee_for,
)

MONDAY = date(2024, 6, 3)
WEDNESDAY = date(2024, 6, 5)
FRIDAY = date(2024, 6, 7)
SATURDAY = date(2024, 6, 8)
SUNDAY = date(2024, 6, 9)


class TestAddBusinessDays:
    def test_zero_days_is_the_start_day(self):
        assert add_business_days(WEDNESDAY, 0) == WEDNESDAY

    def test_start_day_is_not_counted(self):
        assert add_business_days(MONDAY, 1) == date(2024, 6, 4)

    def test_friday_plus_one_is_monday(self):
        assert add_business_days(FRIDAY, 1) == date(2024, 6, 10)

    def test_monday_plus_five_is_next_monday(self):
        assert add_business_days(MONDAY, 5) == date(2024, 6, 10)

    def test_saturday_plus_one_is_monday(self):
        assert add_business_days(SATURDAY, 1) == date(2024, 6, 10)

    def test_sunday_plus_two_is_tuesday(self):
        assert add_business_days(SUNDAY, 2) == date(2024, 6, 11)

    def test_result_never_falls_on_a_weekend(self):
        for offset in range(7):
            start = date(2024, 6, 3 + offset)
            for days in range(1, 8):
                assert add_business_days(start, days).weekday() < 5


class TestShippingFees:
    def test_standard_fee(self):
        assert shipping_fee_for("Standard") == 150.0

    def test_express_fee(self):
        assert shipping_fee_for("Express") == 300.0

    def test_unknown_option_is_rejected(self):
        with pytest.raises(ValueError):
            shipping_fee_for("Overnight")


class TestEstimateDelivery:
    def test_standard_is_five_business_days(self):
        assert estimate_delivery(DeliveryOption.STANDARD.value, today=WEDNESDAY) == date(2024, 6, 12)

    def test_express_is_two_business_days(self):
        assert estimate_delivery(DeliveryOption.EXPRESS.value, today=FRIDAY) == date(2024, 6, 11)

    def test_defaults_to_today(self):
        assert estimate_delivery("Express") > date.today()
