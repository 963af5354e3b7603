"""Promo code redemption: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.gateway import get_gateway
from storefront.session.session import ShopperSession

logger = structlog.get_logger(__name__)

INVALID_PROMO_MESSAGE = "Invalid or expired promo code."


@storefront.command(part_of="ShopperSession")
class ApplyPromoCode:
    """Validate a promo code and, when it grants a discount, keep it on the session."""

    session_id = Identifier(required=True)
    promo_code = String(max_length=100)


@storefront.command_handler(part_of=ShopperSession)
class ApplyPromoCodeHandler:
    @handle(ApplyPromoCode)
    def apply_promo_code(self, command):
        promo_code = (command.promo_code or "").strip()
        amount = get_gateway().validate_promo(promo_code)

        if not amount or amount <= 0:
            logger.warning("Promo code rejected", session_id=str(command.session_id), promo_code=promo_code)
            raise ValidationError({"promo_code": [INVALID_PROMO_MESSAGE]})

        repo = current_domain.repository_for(ShopperSession)
        session = repo.get(command.session_id)
        session.apply_promo(promo_code, amount)
        repo.add(session)

        logger.info("Promo code applied", session_id=str(command.session_id), promo_code=promo_code, discount=amount)
        return amount
