"""Application tests for checkout and order placement."""

from datetime import date

import pytest
from protean import current_domain
from storefront.cart.promotions import ApplyPromoCode
from storefront.checkout.placement import place_order
from storefront.checkout.view import EMPTY_CART_MESSAGE, get_checkout_view
from storefront.gateway.port import GatewayError
from storefront.order.confirmation import OrderConfirmation
from storefront.session.management import StartSession
from storefront.session.session import ShopperSession

WEDNESDAY = date(2024, 6, 5)


@pytest.fixture()
def session_id(member_id):
    return current_domain.process(StartSession(member_id=member_id), asynchronous=False)


@pytest.fixture()
def filled_cart(gateway, member_id):
    gateway.add_to_cart(member_id, 1, 2)  # 2 x 7495
    gateway.add_to_cart(member_id, 4, 1)  # 1 x 1600
    return gateway


def _session(session_id):
    return current_domain.repository_for(ShopperSession).get(session_id)


class TestCheckoutView:
    def test_uses_standard_shipping(self, filled_cart, session_id):
        view = get_checkout_view(_session(session_id), today=WEDNESDAY)
        assert not view.empty_cart
        assert view.cart.delivery_option == "Standard"
        assert view.cart.shipping_fee == 150.0
        assert view.cart.total == 16740.0

    def test_empty_cart(self, session_id):
        assert get_checkout_view(_session(session_id)).empty_cart


class TestAcceptedOrders:
    def test_card_order(self, filled_cart, session_id, checkout_form):
        outcome = place_order(session_id, checkout_form, today=WEDNESDAY)

        assert outcome.accepted
        assert outcome.order_id.startswith("RG-")
        assert outcome.view is None

        confirmation = current_domain.repository_for(OrderConfirmation).get(outcome.ticket_id)
        assert confirmation.order_id == outcome.order_id
        assert str(confirmation.session_id) == session_id
        assert confirmation.estimated_delivery == date(2024, 6, 12)
        assert confirmation.total == 16740.0
        assert len(confirmation.items) == 2

    def test_totals_are_recomputed_server_side(self, filled_cart, session_id, checkout_form):
        form = {**checkout_form, "delivery_option": "Express", "subtotal": "1", "total": "1"}
        place_order(session_id, form)

        submission = filled_cart.calls_to("place_order")[0]["submission"]
        assert submission.subtotal == 16590.0
        assert submission.shipping_fee == 300.0
        assert submission.discount == 0.0
        assert submission.total == 16890.0

    def test_discount_is_applied_and_cleared(self, filled_cart, session_id, checkout_form):
        current_domain.process(ApplyPromoCode(session_id=session_id, promo_code="RUN100"), asynchronous=False)

        outcome = place_order(session_id, checkout_form)

        submission = filled_cart.calls_to("place_order")[0]["submission"]
        assert submission.discount == 100.0
        assert submission.total == 16640.0

        session = _session(session_id)
        assert session.promo_code is None
        assert session.discount == 0.0

        confirmation = current_domain.repository_for(OrderConfirmation).get(outcome.ticket_id)
        assert confirmation.discount == 100.0

    @pytest.mark.parametrize("method", ["PayPal", "COD"])
    def test_non_card_orders_need_no_card(self, filled_cart, session_id, checkout_form, method):
        form = {**checkout_form, "payment_method": method, "card_number": None, "card_expiry": None, "card_cvv": None}
        assert place_order(session_id, form).accepted
        assert filled_cart.calls_to("place_order")[0]["submission"].payment_method == method

    def test_card_details_never_reach_the_procedure(self, filled_cart, session_id, checkout_form):
        place_order(session_id, checkout_form)
        submission = filled_cart.calls_to("place_order")[0]["submission"]
        assert not hasattr(submission, "card_number")
        assert "4111111111111111" not in repr(submission)

    def test_shipping_fields_are_trimmed(self, filled_cart, session_id, checkout_form):
        place_order(session_id, {**checkout_form, "full_name": "  Juan Dela Cruz  "})
        assert filled_cart.calls_to("place_order")[0]["submission"].full_name == "Juan Dela Cruz"


class TestRejectedOrders:
    def test_missing_card_fields(self, filled_cart, session_id, checkout_form):
        form = {**checkout_form, "card_number": "", "card_cvv": ""}
        outcome = place_order(session_id, form)

        assert not outcome.accepted
        assert outcome.view.errors == {
            "card_number": ["Card number is required."],
            "card_cvv": ["CVV is required."],
        }
        assert filled_cart.calls_to("place_order") == []

    def test_redisplayed_form_omits_card_secrets(self, filled_cart, session_id, checkout_form):
        outcome = place_order(session_id, {**checkout_form, "city": ""})
        assert outcome.view.form["full_name"] == "Juan Dela Cruz"
        assert "card_number" not in outcome.view.form
        assert "card_cvv" not in outcome.view.form

    def test_rejected_view_keeps_cart_totals(self, filled_cart, session_id, checkout_form):
        outcome = place_order(session_id, {**checkout_form, "email": "nope", "delivery_option": "Express"})
        assert outcome.view.errors == {"email": ["Enter a valid email address."]}
        assert outcome.view.cart.shipping_fee == 300.0

    def test_empty_cart(self, session_id, checkout_form, gateway):
        outcome = place_order(session_id, checkout_form)
        assert outcome.view.empty_cart
        assert outcome.view.errors["cart"] == [EMPTY_CART_MESSAGE]
        assert gateway.calls_to("place_order") == []

    def test_unknown_delivery_option(self, filled_cart, session_id, checkout_form):
        outcome = place_order(session_id, {**checkout_form, "delivery_option": "Drone"})
        assert "delivery_option" in outcome.view.errors
        assert outcome.view.cart.delivery_option == "Standard"


class TestPlacementFailures:
    def test_procedure_failure_keeps_promo(self, filled_cart, session_id, checkout_form):
        current_domain.process(ApplyPromoCode(session_id=session_id, promo_code="RUN100"), asynchronous=False)
        filled_cart.configure(fail_procedures={"place_order"})

        with pytest.raises(GatewayError):
            place_order(session_id, checkout_form)

        assert _session(session_id).discount == 100.0
