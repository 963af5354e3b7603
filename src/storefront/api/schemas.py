"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands and aggregates.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class FlashSchema(BaseModel):
    level: str
    message: str


class ProductSchema(BaseModel):
    product_id: int
    name: str
    image_url: str | None = None
    category: str | None = None
    brand: str | None = None
    size: str | None = None
    price: float
    original_price: float | None = None
    discount_percent: int = 0
    rating: float = 0.0
    review_count: int = 0
    is_in_stock: bool = True
    is_new: bool = False


class CartItemSchema(BaseModel):
    cart_item_id: int
    product_id: int
    product_name: str
    image_url: str | None = None
    size: str = ""
    color: str = ""
    unit_price: float
    quantity: int
    is_in_stock: bool = True
    line_total: float


class OrderItemSchema(BaseModel):
    product_id: int
    product_name: str
    image_url: str | None = None
    size: str = ""
    color: str = ""
    unit_price: float
    quantity: int


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: int
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    action: str = "increase"


class ApplyPromoRequest(BaseModel):
    promo_code: str = ""


class CheckoutRequest(BaseModel):
    """The checkout form. Presence and length are enforced by checkout validation,
    not here, so that every missing or over-long field gets its own message on
    the redisplayed form."""

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    delivery_option: str = "Standard"
    payment_method: str = "Card"
    card_number: str | None = None
    card_expiry: str | None = None
    card_cvv: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Juan Dela Cruz",
                    "email": "juan@example.com",
                    "phone": "+63 917 555 0101",
                    "address": "12 Katipunan Ave",
                    "city": "Quezon City",
                    "postal_code": "1108",
                    "delivery_option": "Express",
                    "payment_method": "Card",
                    "card_number": "4111111111111111",
                    "card_expiry": "12/28",
                    "card_cvv": "123",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PageResponse(BaseModel):
    csrf_token: str | None = None
    flash: FlashSchema | None = None
    cart_count: int = 0


class CatalogueResponse(PageResponse):
    title: str
    products: list[ProductSchema]
    categories: list[str]
    brand_counts: dict[str, int]
    selected_categories: list[str]
    selected_brands: list[str]
    selected_sizes: list[str]
    max_price: float
    sort_by: str


class CartResponse(PageResponse):
    items: list[CartItemSchema]
    subtotal: float
    shipping_fee: float
    discount: float
    total: float
    applied_promo_code: str | None = None
    estimated_delivery: date | None = None


class CheckoutResponse(PageResponse):
    items: list[CartItemSchema]
    subtotal: float
    shipping_fee: float
    discount: float
    total: float
    form: dict[str, str] = Field(default_factory=dict)
    errors: dict[str, list[str]] = Field(default_factory=dict)


class OrderConfirmationResponse(PageResponse):
    order_id: str
    status: str
    full_name: str
    email: str
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    delivery_option: str
    estimated_delivery: date | None = None
    items: list[OrderItemSchema]
    subtotal: float
    shipping_fee: float
    discount: float
    total: float
