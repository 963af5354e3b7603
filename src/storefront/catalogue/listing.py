"""Catalogue listing: turns filter selections into one sp_GetProducts call."""

from collections import Counter
from dataclasses import dataclass, field

import structlog

from storefront.catalogue.product import Product
from storefront.gateway import get_gateway

logger = structlog.get_logger(__name__)

CATEGORY_TITLE = "Running Gear"
CATEGORIES = ("Running Shoes", "Apparel", "Accessories")
DEFAULT_SORT = "relevance"


def _as_csv(values: list[str]) -> str | None:
    """Join selections for the procedure; an empty selection means "no filter"."""
    cleaned = [v.strip() for v in values if v and v.strip()]
    return ",".join(cleaned) if cleaned else None


@dataclass(frozen=True)
class ProductFilter:
    categories: list[str] = field(default_factory=list)
    brands: list[str] = field(default_factory=list)
    sizes: list[str] = field(default_factory=list)
    max_price: float = 10000.0
    sort_by: str | None = DEFAULT_SORT

    @property
    def effective_sort(self) -> str:
        return self.sort_by if self.sort_by and self.sort_by.strip() else DEFAULT_SORT


@dataclass(frozen=True)
class CatalogueBrowse:
    """Everything the listing page shows."""

    products: list[Product]
    filters: ProductFilter
    categories: tuple[str, ...] = CATEGORIES
    brand_counts: dict[str, int] = field(default_factory=dict)
    title: str = CATEGORY_TITLE
    cart_count: int = 0


def search_products(filters: ProductFilter) -> list[Product]:
    """Run sp_GetProducts for the given filters, preserving the procedure's ordering."""
    records = get_gateway().get_products(
        categories=_as_csv(filters.categories),
        brands=_as_csv(filters.brands),
        sizes=_as_csv(filters.sizes),
        max_price=filters.max_price,
        sort_by=filters.effective_sort,
    )
    return [Product.from_record(record) for record in records]


def cart_count(member_id: int) -> int:
    """Total units in a member's cart (the header badge). Anonymous shoppers have none."""
    if not member_id:
        return 0
    return sum(item.quantity for item in get_gateway().get_cart_by_member(member_id))


def browse_catalogue(filters: ProductFilter, member_id: int = 0) -> CatalogueBrowse:
    products = search_products(filters)
    logger.debug(
        "Catalogue browsed",
        product_count=len(products),
        sort_by=filters.effective_sort,
        member_id=member_id,
    )
    return CatalogueBrowse(
        products=products,
        filters=filters,
        brand_counts=dict(Counter(p.brand for p in products if p.brand)),
        cart_count=cart_count(member_id),
    )
