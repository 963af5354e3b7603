"""Order confirmation snapshot: the receipt handed from checkout to the confirmation page.

Created once an order has been accepted by sp_PlaceOrder. Its id doubles as
the ticket carried in the redirect URL. A snapshot can be read exactly once,
only by the shopper session that placed the order, and only until it
expires; after that the shopper is sent back to the catalogue instead.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Date, DateTime, Float, Identifier, Integer, List, String, ValueObject

from storefront.domain import storefront
from storefront.shared.clock import naive_utc
from storefront.shared.delivery import DeliveryOption


class OrderStatus(Enum):
    PLACED = "Placed"


@storefront.value_object
class ConfirmedItem:
    """A line item copied from the cart at the moment the order was placed."""

    product_id = Integer(required=True)
    product_name = String(required=True, max_length=255)
    image_url = String(max_length=500)
    size = String(max_length=20, default="")
    color = String(max_length=50, default="")
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)


@storefront.aggregate
class OrderConfirmation:
    session_id = Identifier(required=True)
    order_id = String(required=True, max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)

    full_name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(max_length=50)
    address = String(max_length=500)
    city = String(max_length=100)
    postal_code = String(max_length=20)

    delivery_option = String(choices=DeliveryOption, default=DeliveryOption.STANDARD.value)
    estimated_delivery = Date()
    items = List(content_type=ValueObject(ConfirmedItem))

    subtotal = Float(default=0.0)
    shipping_fee = Float(default=0.0)
    discount = Float(default=0.0, min_value=0.0)

    created_at = DateTime()
    expires_at = DateTime()
    consumed_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def capture(
        cls,
        session_id,
        order_id,
        shipping,
        delivery_option,
        estimated_delivery,
        items_data,
        pricing,
        ttl_seconds,
        now=None,
    ):
        """Capture an accepted order for the confirmation page.

        Args:
            session_id: The shopper session allowed to read the snapshot.
            order_id: Id generated by sp_PlaceOrder.
            shipping: Dict with full_name, email, phone, address, city, postal_code.
            delivery_option: "Standard" or "Express".
            estimated_delivery: Date the order is expected to arrive.
            items_data: List of dicts with product_id, product_name, image_url,
                        size, color, unit_price, quantity.
            pricing: Dict with subtotal, shipping_fee, discount.
            ttl_seconds: How long the snapshot stays claimable.
        """
        now = now or datetime.now(UTC)
        items = [
            ConfirmedItem(
                product_id=item["product_id"],
                product_name=item["product_name"],
                image_url=item.get("image_url"),
                size=item.get("size") or "",
                color=item.get("color") or "",
                unit_price=item["unit_price"],
                quantity=item["quantity"],
            )
            for item in items_data
        ]
        return cls(
            session_id=session_id,
            order_id=order_id,
            status=OrderStatus.PLACED.value,
            full_name=shipping["full_name"],
            email=shipping["email"],
            phone=shipping.get("phone"),
            address=shipping.get("address"),
            city=shipping.get("city"),
            postal_code=shipping.get("postal_code"),
            delivery_option=delivery_option,
            estimated_delivery=estimated_delivery,
            items=items,
            subtotal=pricing.get("subtotal", 0.0),
            shipping_fee=pricing.get("shipping_fee", 0.0),
            discount=pricing.get("discount", 0.0),
            created_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )

    @property
    def total(self) -> float:
        return (self.subtotal or 0.0) + (self.shipping_fee or 0.0) - (self.discount or 0.0)

    # -------------------------------------------------------------------
    # Single-use hand-off
    # -------------------------------------------------------------------
    def belongs_to(self, session_id) -> bool:
        return str(self.session_id) == str(session_id)

    def is_expired(self, as_of=None) -> bool:
        as_of = naive_utc(as_of or datetime.now(UTC))
        return self.expires_at is not None and as_of >= naive_utc(self.expires_at)

    def is_claimable(self, as_of=None) -> bool:
        return self.consumed_at is None and not self.is_expired(as_of)

    def consume(self, as_of=None):
        """Mark the snapshot as read. A snapshot can only be consumed once."""
        as_of = as_of or datetime.now(UTC)
        if not self.is_claimable(as_of):
            raise ValidationError({"ticket": ["Confirmation is no longer available"]})
        self.consumed_at = as_of
