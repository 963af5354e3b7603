"""Checkout page state."""

from dataclasses import dataclass, field
from datetime import date

from storefront.cart.cart import Cart
from storefront.cart.retrieval import get_cart
from storefront.shared.delivery import DeliveryOption

EMPTY_CART_MESSAGE = "Your cart is empty."


@dataclass
class CheckoutView:
    """What the checkout page renders, and what a rejected order is sent back with."""

    cart: Cart
    form: dict = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def empty_cart(self) -> bool:
        return self.cart.is_empty


def get_checkout_view(session, today: date | None = None) -> CheckoutView:
    """Load the shopper's cart for checkout with Standard shipping pre-selected.

    Callers check ``empty_cart`` and send the shopper back to the cart page
    rather than showing an empty checkout.
    """
    cart = get_cart(session, delivery_option=DeliveryOption.STANDARD.value, today=today)
    return CheckoutView(cart=cart)
