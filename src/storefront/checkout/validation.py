"""Checkout form validation.

Shipping fields are always required. Card details are only required when
paying by card; they are checked for presence and length only, never for
format. Over-long values get a message of their own rather than being cut.
"""

from storefront.shared.delivery import DeliveryOption, PaymentMethod
from storefront.shared.email import is_valid_email

SHIPPING_FIELDS = {
    "full_name": "Full name is required.",
    "email": "Email is required.",
    "phone": "Phone number is required.",
    "address": "Address is required.",
    "city": "City is required.",
    "postal_code": "Postal code is required.",
}

CARD_FIELDS = {
    "card_number": "Card number is required.",
    "card_expiry": "Expiry date is required.",
    "card_cvv": "CVV is required.",
}

MAX_LENGTHS = {
    "full_name": 255,
    "email": 254,
    "phone": 50,
    "address": 500,
    "city": 100,
    "postal_code": 20,
    "card_number": 30,
    "card_expiry": 10,
    "card_cvv": 4,
}

INVALID_EMAIL = "Enter a valid email address."
INVALID_DELIVERY_OPTION = "Choose Standard or Express delivery."
INVALID_PAYMENT_METHOD = "Choose a supported payment method."


def _blank(value) -> bool:
    return value is None or not str(value).strip()


def _field_errors(form: dict, field_name: str, required_message: str) -> list[str]:
    value = form.get(field_name)
    if _blank(value):
        return [required_message]
    limit = MAX_LENGTHS[field_name]
    if len(str(value).strip()) > limit:
        return [f"Must be at most {limit} characters."]
    return []


def validate_checkout(form: dict) -> dict[str, list[str]]:
    """Return field-level error messages for a checkout form; empty when valid."""
    errors: dict[str, list[str]] = {}

    for field_name, message in SHIPPING_FIELDS.items():
        messages = _field_errors(form, field_name, message)
        if messages:
            errors[field_name] = messages

    if "email" not in errors and not is_valid_email(form["email"].strip()):
        errors["email"] = [INVALID_EMAIL]

    if form.get("delivery_option") not in {option.value for option in DeliveryOption}:
        errors["delivery_option"] = [INVALID_DELIVERY_OPTION]

    payment_method = form.get("payment_method")
    if payment_method not in {method.value for method in PaymentMethod}:
        errors["payment_method"] = [INVALID_PAYMENT_METHOD]
    elif payment_method == PaymentMethod.CARD.value:
        for field_name, message in CARD_FIELDS.items():
            messages = _field_errors(form, field_name, message)
            if messages:
                errors[field_name] = messages

    return errors
