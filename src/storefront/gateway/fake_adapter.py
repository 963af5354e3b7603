"""In-memory stand-in for the RunGear stored procedures.

Simulates the database side of the storefront without a SQL Server:
a small running-gear catalogue, per-member carts, a promo code table and an
order ledger. Useful for:
- Local development of the HTTP surface
- Automated tests with predictable data
- Reproducing remote failures (``configure(fail_procedures=...)``)

Every call is appended to ``calls`` so tests can assert on what reached the
"database".
"""

from datetime import date
from itertools import count

from storefront.gateway.port import (
    CartItemRecord,
    GatewayError,
    OrderSubmission,
    ProductRecord,
    StoreGateway,
)

MAX_LINE_QUANTITY = 10

SORT_KEYS = {
    "price_asc": (lambda p: p.price, False),
    "price_desc": (lambda p: p.price, True),
    "rating": (lambda p: (p.rating, p.review_count), True),
    "newest": (lambda p: p.is_new, True),
}

DEFAULT_PRODUCTS = [
    ProductRecord(
        product_id=1,
        name="Pegasus 41",
        image_url="/img/products/pegasus-41.jpg",
        category="Running Shoes",
        brand="Nike",
        size="7,8,9,10,11",
        price=7495.0,
        original_price=8295.0,
        rating=4.7,
        review_count=312,
        is_in_stock=True,
        is_new=True,
    ),
    ProductRecord(
        product_id=2,
        name="Adizero Boston 12",
        image_url="/img/products/boston-12.jpg",
        category="Running Shoes",
        brand="Adidas",
        size="8,9,10",
        price=8000.0,
        rating=4.5,
        review_count=128,
    ),
    ProductRecord(
        product_id=3,
        name="Cloudmonster 2",
        image_url="/img/products/cloudmonster-2.jpg",
        category="Running Shoes",
        brand="On Running",
        size="9,10,11,12",
        price=9490.0,
        rating=4.8,
        review_count=87,
        is_new=True,
    ),
    ProductRecord(
        product_id=4,
        name="Dri-FIT Race Singlet",
        image_url="/img/products/race-singlet.jpg",
        category="Apparel",
        brand="Nike",
        size="S,M,L,XL",
        price=1600.0,
        original_price=2000.0,
        rating=4.3,
        review_count=54,
    ),
    ProductRecord(
        product_id=5,
        name="Own The Run Shorts",
        image_url="/img/products/otr-shorts.jpg",
        category="Apparel",
        brand="Adidas",
        size="S,M,L",
        price=1400.0,
        rating=4.1,
        review_count=40,
        is_in_stock=False,
    ),
    ProductRecord(
        product_id=6,
        name="Performance Running Socks (3-pack)",
        image_url="/img/products/running-socks.jpg",
        category="Accessories",
        brand="On Running",
        size="M,L",
        price=950.0,
        rating=4.6,
        review_count=201,
    ),
]

DEFAULT_PROMO_CODES = {
    "RUN100": 100.0,
    "WELCOME250": 250.0,
    "EXPIRED": 0.0,
}


def _csv_set(value: str | None) -> set[str]:
    if not value:
        return set()
    return {part.strip() for part in value.split(",") if part.strip()}


class FakeStoreGateway(StoreGateway):
    """Configurable in-memory store gateway."""

    def __init__(
        self,
        products: list[ProductRecord] | None = None,
        promo_codes: dict[str, float] | None = None,
    ) -> None:
        self.products: list[ProductRecord] = list(DEFAULT_PRODUCTS if products is None else products)
        self.promo_codes: dict[str, float] = dict(DEFAULT_PROMO_CODES if promo_codes is None else promo_codes)
        self.carts: dict[int, list[dict]] = {}
        self.orders: dict[str, dict] = {}
        self.calls: list[dict] = []
        self.fail_procedures: set[str] = set()
        self.failure_reason: str = "Connection refused"
        self._cart_item_ids = count(1001)
        self._order_numbers = count(1)

    def configure(self, fail_procedures: set[str] | None = None, failure_reason: str = "Connection refused") -> None:
        """Make the named procedures (e.g. ``{"place_order"}``) raise GatewayError."""
        self.fail_procedures = set(fail_procedures or ())
        self.failure_reason = failure_reason

    def _record(self, method: str, **params) -> None:
        self.calls.append({"method": method, **params})
        if method in self.fail_procedures:
            raise GatewayError(method, self.failure_reason)

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def _find_line(self, cart_item_id: int) -> tuple[int, dict] | None:
        for member_id, lines in self.carts.items():
            for line in lines:
                if line["cart_item_id"] == cart_item_id:
                    return member_id, line
        return None

    # -------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------
    def get_products(
        self,
        categories: str | None,
        brands: str | None,
        sizes: str | None,
        max_price: float,
        sort_by: str,
    ) -> list[ProductRecord]:
        self._record(
            "get_products",
            categories=categories,
            brands=brands,
            sizes=sizes,
            max_price=max_price,
            sort_by=sort_by,
        )
        wanted_categories = _csv_set(categories)
        wanted_brands = _csv_set(brands)
        wanted_sizes = _csv_set(sizes)

        matches = [
            product
            for product in self.products
            if (not wanted_categories or product.category in wanted_categories)
            and (not wanted_brands or product.brand in wanted_brands)
            and (not wanted_sizes or wanted_sizes & _csv_set(product.size))
            and product.price <= max_price
        ]

        # Unknown sort keys fall back to relevance (catalogue order)
        if sort_by in SORT_KEYS:
            key, reverse = SORT_KEYS[sort_by]
            matches.sort(key=key, reverse=reverse)
        return matches

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def add_to_cart(self, member_id: int, product_id: int, quantity: int) -> None:
        self._record("add_to_cart", member_id=member_id, product_id=product_id, quantity=quantity)

        product = next((p for p in self.products if p.product_id == product_id), None)
        if product is None:
            raise GatewayError("add_to_cart", f"Unknown product {product_id}")

        lines = self.carts.setdefault(member_id, [])
        existing = next((line for line in lines if line["product_id"] == product_id), None)
        if existing:
            existing["quantity"] = min(existing["quantity"] + quantity, MAX_LINE_QUANTITY)
        else:
            lines.append(
                {
                    "cart_item_id": next(self._cart_item_ids),
                    "product_id": product.product_id,
                    "product_name": product.name,
                    "image_url": product.image_url,
                    "size": "",
                    "color": "",
                    "unit_price": product.price,
                    "quantity": min(quantity, MAX_LINE_QUANTITY),
                    "is_in_stock": product.is_in_stock,
                }
            )

    def get_cart_by_member(self, member_id: int) -> list[CartItemRecord]:
        self._record("get_cart_by_member", member_id=member_id)
        return [CartItemRecord(**line) for line in self.carts.get(member_id, [])]

    def remove_from_cart(self, cart_item_id: int) -> None:
        self._record("remove_from_cart", cart_item_id=cart_item_id)
        found = self._find_line(cart_item_id)
        if found:
            member_id, line = found
            self.carts[member_id].remove(line)

    def update_cart_qty(self, cart_item_id: int, change: int) -> None:
        self._record("update_cart_qty", cart_item_id=cart_item_id, change=change)
        found = self._find_line(cart_item_id)
        if found:
            _, line = found
            # The procedure clamps quantities to 1..MAX_LINE_QUANTITY
            line["quantity"] = max(1, min(line["quantity"] + change, MAX_LINE_QUANTITY))

    # -------------------------------------------------------------------
    # Promotions and orders
    # -------------------------------------------------------------------
    def validate_promo(self, promo_code: str) -> float:
        self._record("validate_promo", promo_code=promo_code)
        return self.promo_codes.get((promo_code or "").strip().upper(), 0.0)

    def place_order(self, member_id: int, submission: OrderSubmission) -> str:
        self._record("place_order", member_id=member_id, submission=submission)

        order_id = f"RG-{date.today().year}-{next(self._order_numbers):06d}"
        self.orders[order_id] = {
            "member_id": member_id,
            "submission": submission,
            "items": self.carts.pop(member_id, []),
        }
        return order_id
