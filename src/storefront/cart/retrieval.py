"""Cart retrieval: loads a member's cart fresh from sp_GetCartByMember."""

from datetime import date

from storefront.cart.cart import Cart
from storefront.gateway import get_gateway
from storefront.shared.delivery import DeliveryOption


def get_cart(session, delivery_option=DeliveryOption.STANDARD.value, today: date | None = None) -> Cart:
    """Build the cart for a shopper session.

    Totals are always recomputed here from the database rows and the session's
    discount; nothing the client sends is trusted.
    """
    records = get_gateway().get_cart_by_member(session.member_id)
    return Cart.build(
        member_id=session.member_id,
        records=records,
        discount=session.discount,
        promo_code=session.promo_code,
        delivery_option=delivery_option,
        today=today,
    )
