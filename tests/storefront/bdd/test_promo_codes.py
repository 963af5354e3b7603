"""BDD tests for promo code redemption."""

from pytest_bdd import scenarios

scenarios("features/promo_codes.feature")
