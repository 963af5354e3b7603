"""SQL Server gateway adapter: executes the RunGear stored procedures.

Each call opens a connection from the SQLAlchemy pool for exactly one
procedure and returns it when the block exits, whether the call succeeded or
not. Driver errors are re-raised as GatewayError; nothing is retried.

Output parameters are read back with ``DECLARE ... OUTPUT; SELECT`` batches,
which is how pyodbc exposes them.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.gateway.port import (
    CartItemRecord,
    GatewayError,
    OrderSubmission,
    ProductRecord,
    StoreGateway,
)

logger = structlog.get_logger(__name__)

GET_PRODUCTS = text(
    "EXEC sp_GetProducts @Categories = :categories, @Brands = :brands, @Sizes = :sizes, "
    "@MaxPrice = :max_price, @SortBy = :sort_by"
)
ADD_TO_CART = text("EXEC sp_AddToCart @MemberId = :member_id, @ProductId = :product_id, @Quantity = :quantity")
GET_CART_BY_MEMBER = text("EXEC sp_GetCartByMember @MemberId = :member_id")
REMOVE_FROM_CART = text("EXEC sp_RemoveFromCart @CartItemId = :cart_item_id")
UPDATE_CART_QTY = text("EXEC sp_UpdateCartQty @CartItemId = :cart_item_id, @Change = :change")
VALIDATE_PROMO = text(
    "SET NOCOUNT ON; "
    "DECLARE @DiscountAmount DECIMAL(18, 2); "
    "EXEC sp_ValidatePromo @PromoCode = :promo_code, @DiscountAmount = @DiscountAmount OUTPUT; "
    "SELECT @DiscountAmount AS DiscountAmount;"
)
PLACE_ORDER = text(
    "SET NOCOUNT ON; "
    "DECLARE @OrderId NVARCHAR(50); "
    "EXEC sp_PlaceOrder @MemberId = :member_id, @FullName = :full_name, @Email = :email, "
    "@Phone = :phone, @Address = :address, @City = :city, @PostalCode = :postal_code, "
    "@DeliveryOption = :delivery_option, @PaymentMethod = :payment_method, "
    "@Subtotal = :subtotal, @ShippingFee = :shipping_fee, @Discount = :discount, @Total = :total, "
    "@OrderId = @OrderId OUTPUT; "
    "SELECT @OrderId AS OrderId;"
)


def _product_from_row(row: Mapping) -> ProductRecord:
    original_price = row["OriginalPrice"]
    return ProductRecord(
        product_id=int(row["ProductId"]),
        name=row["Name"],
        image_url=row["ImageUrl"],
        category=row["Category"],
        brand=row["Brand"],
        size=row["Size"],
        price=float(row["Price"]),
        original_price=float(original_price) if original_price is not None else None,
        rating=float(row["Rating"]),
        review_count=int(row["ReviewCount"]),
        is_in_stock=bool(row["IsInStock"]),
        is_new=bool(row["IsNew"]),
    )


def _cart_item_from_row(row: Mapping) -> CartItemRecord:
    return CartItemRecord(
        cart_item_id=int(row["CartItemId"]),
        product_id=int(row["ProductId"]),
        product_name=row["ProductName"],
        image_url=row["ImageUrl"],
        size=row["Size"] or "",
        color=row["Color"] or "",
        unit_price=float(row["UnitPrice"]),
        quantity=int(row["Quantity"]),
        is_in_stock=bool(row["IsInStock"]),
    )


class SqlServerGateway(StoreGateway):
    """Production gateway backed by the RunGearDB stored procedures."""

    def __init__(self, database_uri: str | None = None, engine: Engine | None = None) -> None:
        if engine is None and database_uri is None:
            raise ValueError("SqlServerGateway needs a database_uri or an engine")
        self.engine = engine if engine is not None else create_engine(database_uri, pool_pre_ping=True)

    @contextmanager
    def _procedure(self, name: str) -> Iterator[Connection]:
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as exc:
            logger.error("Stored procedure call failed", procedure=name, error=str(exc))
            raise GatewayError(name, str(exc)) from exc

    def get_products(
        self,
        categories: str | None,
        brands: str | None,
        sizes: str | None,
        max_price: float,
        sort_by: str,
    ) -> list[ProductRecord]:
        params = {
            "categories": categories,
            "brands": brands,
            "sizes": sizes,
            "max_price": max_price,
            "sort_by": sort_by,
        }
        with self._procedure("sp_GetProducts") as conn:
            rows = conn.execute(GET_PRODUCTS, params).mappings().all()
        return [_product_from_row(row) for row in rows]

    def add_to_cart(self, member_id: int, product_id: int, quantity: int) -> None:
        with self._procedure("sp_AddToCart") as conn:
            conn.execute(ADD_TO_CART, {"member_id": member_id, "product_id": product_id, "quantity": quantity})

    def get_cart_by_member(self, member_id: int) -> list[CartItemRecord]:
        with self._procedure("sp_GetCartByMember") as conn:
            rows = conn.execute(GET_CART_BY_MEMBER, {"member_id": member_id}).mappings().all()
        return [_cart_item_from_row(row) for row in rows]

    def remove_from_cart(self, cart_item_id: int) -> None:
        with self._procedure("sp_RemoveFromCart") as conn:
            conn.execute(REMOVE_FROM_CART, {"cart_item_id": cart_item_id})

    def update_cart_qty(self, cart_item_id: int, change: int) -> None:
        with self._procedure("sp_UpdateCartQty") as conn:
            conn.execute(UPDATE_CART_QTY, {"cart_item_id": cart_item_id, "change": change})

    def validate_promo(self, promo_code: str) -> float:
        with self._procedure("sp_ValidatePromo") as conn:
            amount = conn.execute(VALIDATE_PROMO, {"promo_code": promo_code or ""}).scalar()
        return float(amount) if amount is not None else 0.0

    def place_order(self, member_id: int, submission: OrderSubmission) -> str:
        params = {
            "member_id": member_id,
            "full_name": submission.full_name,
            "email": submission.email,
            "phone": submission.phone,
            "address": submission.address,
            "city": submission.city,
            "postal_code": submission.postal_code,
            "delivery_option": submission.delivery_option,
            "payment_method": submission.payment_method,
            "subtotal": submission.subtotal,
            "shipping_fee": submission.shipping_fee,
            "discount": submission.discount,
            "total": submission.total,
        }
        with self._procedure("sp_PlaceOrder") as conn:
            order_id = conn.execute(PLACE_ORDER, params).scalar()
        if not order_id:
            raise GatewayError("sp_PlaceOrder", "no order id returned")
        return str(order_id)
