"""Delivery options, shipping fees and business-day arithmetic."""

from datetime import date, timedelta
from enum import Enum


class DeliveryOption(Enum):
    STANDARD = "Standard"
    EXPRESS = "Express"


class PaymentMethod(Enum):
    CARD = "Card"
    PAYPAL = "PayPal"
    COD = "COD"


SHIPPING_FEES = {
    DeliveryOption.STANDARD: 150.0,
    DeliveryOption.EXPRESS: 300.0,
}

DELIVERY_BUSINESS_DAYS = {
    DeliveryOption.STANDARD: 5,
    DeliveryOption.EXPRESS: 2,
}

_WEEKEND = (5, 6)  # Saturday, Sunday


def add_business_days(start: date, days: int) -> date:
    """Walk forward one calendar day at a time, counting only Monday-Friday.

    The start day itself is never counted, so Friday + 1 is the next Monday
    and Monday + 5 is the Monday after.
    """
    current = start
    added = 0
    while added < days:
        current += timedelta(days=1)
        if current.weekday() not in _WEEKEND:
            added += 1
    return current


def shipping_fee_for(option: str) -> float:
    return SHIPPING_FEES[DeliveryOption(option)]


def estimate_delivery(option: str, today: date | None = None) -> date:
    """Estimated delivery date for a delivery option, counted from ``today``."""
    return add_business_days(today or date.today(), DELIVERY_BUSINESS_DAYS[DeliveryOption(option)])
