"""Cart item management: commands and handler.

Each command maps onto one cart procedure. Quantity steps are always +1 or -1;
what happens when a line at quantity 1 is decremented is decided by the
``quantity_floor_policy`` setting.
"""

import structlog
from protean import handle
from protean.fields import Integer, String

from storefront.cart.cart import Cart
from storefront.config import QuantityFloorPolicy, get_settings
from storefront.domain import storefront
from storefront.gateway import get_gateway

logger = structlog.get_logger(__name__)

INCREASE = "increase"


@storefront.command(part_of="Cart")
class AddToCart:
    member_id = Integer(default=0)
    product_id = Integer(required=True)
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    cart_item_id = Integer(required=True)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    member_id = Integer(default=0)
    cart_item_id = Integer(required=True)
    direction = String(max_length=20)  # "increase"; anything else decreases


def quantity_change(direction) -> int:
    return 1 if direction == INCREASE else -1


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        get_gateway().add_to_cart(
            member_id=command.member_id,
            product_id=command.product_id,
            quantity=command.quantity or 1,
        )
        logger.info(
            "Item added to cart",
            member_id=command.member_id,
            product_id=command.product_id,
            quantity=command.quantity,
        )

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        get_gateway().remove_from_cart(cart_item_id=command.cart_item_id)
        logger.info("Item removed from cart", cart_item_id=command.cart_item_id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        gateway = get_gateway()
        change = quantity_change(command.direction)
        policy = get_settings().quantity_floor_policy

        if change < 0 and policy != QuantityFloorPolicy.DELEGATE:
            cart = Cart.build(member_id=command.member_id, records=gateway.get_cart_by_member(command.member_id))
            current = cart.find_item(command.cart_item_id)
            if current is not None and current.quantity <= 1:
                if policy == QuantityFloorPolicy.REMOVE:
                    gateway.remove_from_cart(cart_item_id=command.cart_item_id)
                    logger.info("Item removed at quantity floor", cart_item_id=command.cart_item_id)
                else:
                    logger.info("Quantity already at floor", cart_item_id=command.cart_item_id)
                return

        gateway.update_cart_qty(cart_item_id=command.cart_item_id, change=change)
        logger.info("Cart quantity updated", cart_item_id=command.cart_item_id, change=change)
