"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.promotions import ApplyPromoCode
from storefront.session.management import StartSession
from storefront.session.session import ShopperSession


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def _session(session_id):
    return current_domain.repository_for(ShopperSession).get(session_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a shopper session for member {member:d}"), target_fixture="session_id")
def shopper_session(member):
    return current_domain.process(StartSession(member_id=member), asynchronous=False)


@given(parsers.cfparse("the cart holds {qty:d} of product {product_id:d}"))
def cart_holds(gateway, session_id, qty, product_id):
    gateway.add_to_cart(_session(session_id).member_id, product_id, qty)


@given("the cart is emptied")
def cart_is_emptied(gateway, session_id):
    for line in gateway.get_cart_by_member(_session(session_id).member_id):
        gateway.remove_from_cart(line.cart_item_id)


@given(parsers.cfparse('the promo code "{code}" is applied'))
@when(parsers.cfparse('the promo code "{code}" is applied'))
def apply_promo_code(session_id, code, error):
    try:
        current_domain.process(ApplyPromoCode(session_id=session_id, promo_code=code), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the session discount is {amount:f}"))
def session_discount_is(session_id, amount):
    assert _session(session_id).discount == amount


@then("the session has no promo code")
def session_has_no_promo(session_id):
    session = _session(session_id)
    assert session.promo_code is None
    assert session.discount == 0.0


@then(parsers.cfparse('the promo code is rejected with "{message}"'))
def promo_code_rejected(error, message):
    assert error["exc"] is not None
    assert message in error["exc"].messages["promo_code"]
