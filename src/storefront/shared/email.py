"""EmailAddress value object for the checkout contact address."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront


@storefront.value_object
class EmailAddress:
    """An email address that is structurally valid.

    Exactly one @, non-empty local and domain parts, a dotted domain, no
    whitespace, no consecutive dots and none of the characters mail servers
    reject outright.
    """

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        """Ensure that the email address follows a basic valid structure."""
        email = self.address
        invalid = ValidationError({"email": ["Enter a valid email address."]})

        if any(ch.isspace() for ch in email):
            raise invalid

        if email.count("@") != 1:
            raise invalid

        local_part, domain_part = email.split("@", 1)

        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            raise invalid

        if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            raise invalid

        if "." not in domain_part:
            raise invalid

        for label in domain_part.split("."):
            if label.startswith("-") or label.endswith("-"):
                raise invalid

        if ".." in local_part or ".." in domain_part:
            raise invalid

        for forbidden in (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\"):
            if forbidden in email:
                raise invalid


def is_valid_email(value: str) -> bool:
    try:
        EmailAddress(address=value)
    except ValidationError:
        return False
    return True
