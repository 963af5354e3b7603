"""Order placement: from a submitted checkout form to a confirmation ticket.

``place_order`` is the entry point. It reloads the cart, recomputes every
total from the database rows and the session, and validates the form. Only
a valid form for a non-empty cart becomes a PlaceOrder command; the handler
submits sp_PlaceOrder, clears the session's promo and stores the
single-use confirmation snapshot.

Card details are checked for presence and then dropped; they never reach
the command, the gateway or the snapshot.
"""

import json
from dataclasses import dataclass
from datetime import date

import structlog
from protean import handle
from protean.fields import Date, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.retrieval import get_cart
from storefront.checkout.validation import validate_checkout
from storefront.checkout.view import EMPTY_CART_MESSAGE, CheckoutView
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.gateway import get_gateway
from storefront.gateway.port import OrderSubmission
from storefront.order.claim import purge_expired_confirmations
from storefront.order.confirmation import OrderConfirmation
from storefront.session.session import ShopperSession
from storefront.shared.delivery import DeliveryOption, PaymentMethod

logger = structlog.get_logger(__name__)

CARD_SECRET_FIELDS = ("card_number", "card_expiry", "card_cvv")


@storefront.command(part_of="OrderConfirmation")
class PlaceOrder:
    session_id = Identifier(required=True)
    member_id = Integer(default=0)
    full_name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=50)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    delivery_option = String(choices=DeliveryOption, default=DeliveryOption.STANDARD.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CARD.value)
    items = Text(required=True)  # JSON: list of line item dicts
    subtotal = Float(required=True)
    shipping_fee = Float(required=True)
    discount = Float(default=0.0)
    total = Float(required=True)
    estimated_delivery = Date()


@dataclass(frozen=True)
class PlaceOrderOutcome:
    """Either an accepted order (order id + confirmation ticket) or the checkout page to redisplay."""

    order_id: str | None = None
    ticket_id: str | None = None
    view: CheckoutView | None = None

    @property
    def accepted(self) -> bool:
        return self.order_id is not None


def _public_form(form: dict) -> dict:
    return {key: value for key, value in form.items() if key not in CARD_SECRET_FIELDS}


def place_order(session_id, form: dict, today: date | None = None) -> PlaceOrderOutcome:
    """Validate a checkout form against a freshly loaded cart and place the order."""
    session = current_domain.repository_for(ShopperSession).get(session_id)

    form = {
        "delivery_option": DeliveryOption.STANDARD.value,
        "payment_method": PaymentMethod.CARD.value,
        **{key: value for key, value in form.items() if value is not None},
    }
    delivery_option = form["delivery_option"]
    if delivery_option not in {option.value for option in DeliveryOption}:
        delivery_option = DeliveryOption.STANDARD.value

    cart = get_cart(session, delivery_option=delivery_option, today=today)

    errors = validate_checkout(form)
    if cart.is_empty:
        errors = {"cart": [EMPTY_CART_MESSAGE], **errors}

    if errors:
        logger.info(
            "Checkout rejected",
            member_id=session.member_id,
            fields=sorted(errors),
        )
        return PlaceOrderOutcome(view=CheckoutView(cart=cart, form=_public_form(form), errors=errors))

    items_data = [
        {
            "product_id": item.product_id,
            "product_name": item.product_name,
            "image_url": item.image_url,
            "size": item.size,
            "color": item.color,
            "unit_price": item.unit_price,
            "quantity": item.quantity,
        }
        for item in cart.items
    ]

    result = current_domain.process(
        PlaceOrder(
            session_id=session_id,
            member_id=session.member_id,
            full_name=form["full_name"].strip(),
            email=form["email"].strip(),
            phone=form["phone"].strip(),
            address=form["address"].strip(),
            city=form["city"].strip(),
            postal_code=form["postal_code"].strip(),
            delivery_option=cart.delivery_option,
            payment_method=form["payment_method"],
            items=json.dumps(items_data),
            subtotal=cart.subtotal,
            shipping_fee=cart.shipping_fee,
            discount=cart.discount,
            total=cart.total,
            estimated_delivery=cart.estimated_delivery,
        ),
        asynchronous=False,
    )
    return PlaceOrderOutcome(order_id=result["order_id"], ticket_id=result["ticket_id"])


@storefront.command_handler(part_of=OrderConfirmation)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        submission = OrderSubmission(
            full_name=command.full_name,
            email=command.email,
            phone=command.phone,
            address=command.address,
            city=command.city,
            postal_code=command.postal_code,
            delivery_option=command.delivery_option,
            payment_method=command.payment_method,
            subtotal=command.subtotal,
            shipping_fee=command.shipping_fee,
            discount=command.discount or 0.0,
            total=command.total,
        )
        order_id = get_gateway().place_order(member_id=command.member_id, submission=submission)

        session_repo = current_domain.repository_for(ShopperSession)
        session = session_repo.get(command.session_id)
        session.clear_promo()
        session_repo.add(session)

        confirmation = OrderConfirmation.capture(
            order_id=order_id,
            session_id=command.session_id,
            shipping={
                "full_name": command.full_name,
                "email": command.email,
                "phone": command.phone,
                "address": command.address,
                "city": command.city,
                "postal_code": command.postal_code,
            },
            delivery_option=command.delivery_option,
            estimated_delivery=command.estimated_delivery,
            items_data=items_data,
            pricing={
                "subtotal": command.subtotal,
                "shipping_fee": command.shipping_fee,
                "discount": command.discount or 0.0,
            },
            ttl_seconds=get_settings().confirmation_ttl_seconds,
        )
        purge_expired_confirmations()
        current_domain.repository_for(OrderConfirmation).add(confirmation)

        logger.info(
            "Order placed",
            order_id=order_id,
            member_id=command.member_id,
            delivery_option=command.delivery_option,
            payment_method=command.payment_method,
            total=command.total,
        )
        return {"order_id": order_id, "ticket_id": str(confirmation.id)}
