"""Cart aggregate: a member's line items with the checkout money-flow.

The line items themselves are owned by the database (sp_GetCartByMember);
this aggregate is rebuilt from those rows on every request and is never
persisted. It carries the arithmetic that must hold for every cart:

    subtotal     = sum(unit_price * quantity)
    shipping_fee = fee of the delivery option when the cart has items, else 0
    total        = subtotal + shipping_fee - discount
"""

from datetime import date

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Date, Float, HasMany, Integer, String

from storefront.domain import storefront
from storefront.gateway.port import CartItemRecord
from storefront.shared.delivery import DeliveryOption, estimate_delivery, shipping_fee_for


@storefront.entity(part_of="Cart")
class CartItem:
    cart_item_id = Integer(required=True)
    product_id = Integer(required=True)
    product_name = String(required=True, max_length=255)
    image_url = String(max_length=500)
    size = String(max_length=20, default="")
    color = String(max_length=50, default="")
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    is_in_stock = Boolean(default=True)

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@storefront.aggregate
class Cart:
    member_id = Integer(default=0)
    items = HasMany(CartItem)
    promo_code = String(max_length=100)
    discount = Float(default=0.0, min_value=0.0)
    delivery_option = String(choices=DeliveryOption, default=DeliveryOption.STANDARD.value)
    estimated_delivery = Date()

    @invariant.post
    def discount_cannot_be_negative(self):
        if self.discount is not None and self.discount < 0:
            raise ValidationError({"discount": ["Discount cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def build(
        cls,
        member_id,
        records: list[CartItemRecord],
        discount=0.0,
        promo_code=None,
        delivery_option=DeliveryOption.STANDARD.value,
        today: date | None = None,
    ):
        """Assemble a cart from sp_GetCartByMember rows and the session's promo state."""
        cart = cls(
            member_id=member_id,
            promo_code=promo_code,
            discount=discount or 0.0,
            delivery_option=delivery_option,
            estimated_delivery=estimate_delivery(delivery_option, today),
        )
        for record in records:
            cart.add_items(
                CartItem(
                    cart_item_id=record.cart_item_id,
                    product_id=record.product_id,
                    product_name=record.product_name,
                    image_url=record.image_url,
                    size=record.size or "",
                    color=record.color or "",
                    unit_price=record.unit_price,
                    quantity=record.quantity,
                    is_in_stock=record.is_in_stock,
                )
            )
        return cart

    # -------------------------------------------------------------------
    # Money flow
    # -------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def shipping_fee(self) -> float:
        if self.is_empty:
            return 0.0
        return shipping_fee_for(self.delivery_option)

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping_fee - (self.discount or 0.0)

    def find_item(self, cart_item_id):
        return next((i for i in self.items if i.cart_item_id == cart_item_id), None)
