"""Shopper session aggregate: the state one shopper carries across requests.

Replaces ambient HTTP session storage: the member id handed over by the
authentication layer, the applied promo code and its discount, the
anti-forgery token, and a one-shot flash message for the next page.
A session lapses once it has been idle for longer than its TTL.
"""

import secrets
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from storefront.domain import storefront
from storefront.shared.clock import naive_utc


class FlashLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"


@storefront.aggregate
class ShopperSession:
    member_id = Integer(default=0)  # 0 for anonymous shoppers
    promo_code = String(max_length=100)
    discount = Float(default=0.0, min_value=0.0)
    csrf_token = String(max_length=64)
    flash_level = String(choices=FlashLevel)
    flash_message = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, member_id=0):
        now = datetime.now(UTC)
        return cls(
            member_id=member_id or 0,
            discount=0.0,
            csrf_token=secrets.token_urlsafe(32),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Promotions
    # -------------------------------------------------------------------
    def apply_promo(self, promo_code, amount):
        """Remember a validated promo code and the flat discount it grants."""
        if amount is None or amount <= 0:
            raise ValidationError({"promo_code": ["Invalid or expired promo code."]})

        self.promo_code = promo_code
        self.discount = float(amount)
        self.updated_at = datetime.now(UTC)

    def clear_promo(self):
        self.promo_code = None
        self.discount = 0.0
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Flash messages
    # -------------------------------------------------------------------
    def flash(self, level, message):
        self.flash_level = FlashLevel(level).value
        self.flash_message = message

    def pop_flash(self):
        """Return the pending flash message (if any) and forget it."""
        if not self.flash_message:
            return None
        message = {"level": self.flash_level, "message": self.flash_message}
        self.flash_level = None
        self.flash_message = None
        return message

    # -------------------------------------------------------------------
    # Idle expiry
    # -------------------------------------------------------------------
    def touch(self, as_of=None):
        self.updated_at = as_of or datetime.now(UTC)

    def is_expired(self, ttl_seconds, as_of=None) -> bool:
        last_seen = self.updated_at or self.created_at
        if last_seen is None:
            return False
        as_of = naive_utc(as_of or datetime.now(UTC))
        return as_of >= naive_utc(last_seen) + timedelta(seconds=ttl_seconds)

    def verify_csrf_token(self, token):
        return bool(token) and bool(self.csrf_token) and secrets.compare_digest(token, self.csrf_token)
