"""Product: a card on the catalogue listing page."""

from protean.fields import Boolean, Float, Integer, String

from storefront.domain import storefront
from storefront.gateway.port import ProductRecord


@storefront.value_object
class Product:
    """A product as returned by sp_GetProducts.

    ``size`` is the comma-separated list of available sizes. ``original_price``
    is only set when the product is marked down.
    """

    product_id: Integer(required=True)
    name: String(required=True, max_length=255)
    image_url: String(max_length=500)
    category: String(max_length=100)
    brand: String(max_length=100)
    size: String(max_length=255)
    price: Float(required=True, min_value=0.0)
    original_price: Float()
    rating: Float(default=0.0)
    review_count: Integer(default=0)
    is_in_stock: Boolean(default=True)
    is_new: Boolean(default=False)

    @property
    def discount_percent(self) -> int:
        """Percentage off the original price, e.g. 20 for 80 down from 100."""
        if self.original_price is None or self.original_price <= 0:
            return 0
        return round((1 - self.price / self.original_price) * 100)

    @property
    def sizes(self) -> list[str]:
        return [s.strip() for s in (self.size or "").split(",") if s.strip()]

    @classmethod
    def from_record(cls, record: ProductRecord) -> "Product":
        return cls(
            product_id=record.product_id,
            name=record.name,
            image_url=record.image_url,
            category=record.category,
            brand=record.brand,
            size=record.size,
            price=record.price,
            original_price=record.original_price,
            rating=record.rating,
            review_count=record.review_count,
            is_in_stock=record.is_in_stock,
            is_new=record.is_new,
        )
