"""Store gateway port (abstract interface).

Defines the contract for the stored-procedure surface the storefront runs
on. One method per procedure; adapters own connection handling and map rows
into the records below. This lets the domain switch between FakeStoreGateway
(dev/test) and SqlServerGateway (production) without any other change.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


class GatewayError(Exception):
    """A stored procedure call failed (connectivity or procedure error)."""

    def __init__(self, procedure: str, reason: str = "") -> None:
        self.procedure = procedure
        self.reason = reason
        super().__init__(f"{procedure} failed" + (f": {reason}" if reason else ""))


@dataclass(frozen=True)
class ProductRecord:
    """A row returned by sp_GetProducts."""

    product_id: int
    name: str
    image_url: str
    category: str
    brand: str
    size: str  # CSV, e.g. "8,9,10"
    price: float
    original_price: float | None = None
    rating: float = 0.0
    review_count: int = 0
    is_in_stock: bool = True
    is_new: bool = False


@dataclass(frozen=True)
class CartItemRecord:
    """A row returned by sp_GetCartByMember."""

    cart_item_id: int
    product_id: int
    product_name: str
    image_url: str
    unit_price: float
    quantity: int
    size: str = ""
    color: str = ""
    is_in_stock: bool = True


@dataclass(frozen=True)
class OrderSubmission:
    """Parameters of sp_PlaceOrder (besides the member id)."""

    full_name: str
    email: str
    phone: str
    address: str
    city: str
    postal_code: str
    delivery_option: str
    payment_method: str
    subtotal: float
    shipping_fee: float
    discount: float
    total: float


class StoreGateway(ABC):
    """Abstract stored-procedure gateway."""

    @abstractmethod
    def get_products(
        self,
        categories: str | None,
        brands: str | None,
        sizes: str | None,
        max_price: float,
        sort_by: str,
    ) -> list[ProductRecord]:
        """sp_GetProducts: filters are CSV strings, or None for "any"."""
        ...

    @abstractmethod
    def add_to_cart(self, member_id: int, product_id: int, quantity: int) -> None:
        """sp_AddToCart: append a line item or increase an existing one."""
        ...

    @abstractmethod
    def get_cart_by_member(self, member_id: int) -> list[CartItemRecord]:
        """sp_GetCartByMember."""
        ...

    @abstractmethod
    def remove_from_cart(self, cart_item_id: int) -> None:
        """sp_RemoveFromCart."""
        ...

    @abstractmethod
    def update_cart_qty(self, cart_item_id: int, change: int) -> None:
        """sp_UpdateCartQty: ``change`` is +1 or -1."""
        ...

    @abstractmethod
    def validate_promo(self, promo_code: str) -> float:
        """sp_ValidatePromo: returns the discount amount, 0 when the code is not valid."""
        ...

    @abstractmethod
    def place_order(self, member_id: int, submission: OrderSubmission) -> str:
        """sp_PlaceOrder: returns the generated order id."""
        ...
