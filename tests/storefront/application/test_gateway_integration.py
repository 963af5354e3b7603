"""Tests for the store gateway port and its adapters."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from storefront.gateway import get_gateway, reset_gateway, set_gateway
from storefront.gateway.fake_adapter import MAX_LINE_QUANTITY, FakeStoreGateway
from storefront.gateway.port import CartItemRecord, GatewayError, OrderSubmission, ProductRecord
from storefront.gateway.sqlserver_adapter import SqlServerGateway


def _submission(**overrides):
    values = {
        "full_name": "Juan Dela Cruz",
        "email": "juan@example.com",
        "phone": "+63 917 555 0101",
        "address": "12 Katipunan Ave",
        "city": "Quezon City",
        "postal_code": "1108",
        "delivery_option": "Standard",
        "payment_method": "COD",
        "subtotal": 950.0,
        "shipping_fee": 150.0,
        "discount": 0.0,
        "total": 1100.0,
    }
    values.update(overrides)
    return OrderSubmission(**values)


def _mock_engine():
    engine = MagicMock()
    conn = engine.begin.return_value.__enter__.return_value
    return engine, conn


class TestFakeStoreGateway:
    def test_same_product_merges_into_one_line(self):
        gateway = FakeStoreGateway()
        gateway.add_to_cart(7, 1, 1)
        gateway.add_to_cart(7, 1, 2)
        lines = gateway.get_cart_by_member(7)
        assert len(lines) == 1
        assert lines[0].quantity == 3
        assert isinstance(lines[0], CartItemRecord)

    def test_line_quantity_is_capped(self):
        gateway = FakeStoreGateway()
        gateway.add_to_cart(7, 1, MAX_LINE_QUANTITY + 5)
        assert gateway.get_cart_by_member(7)[0].quantity == MAX_LINE_QUANTITY

    def test_decrement_stops_at_one(self):
        gateway = FakeStoreGateway()
        gateway.add_to_cart(7, 1, 1)
        cart_item_id = gateway.get_cart_by_member(7)[0].cart_item_id
        gateway.update_cart_qty(cart_item_id, -1)
        assert gateway.get_cart_by_member(7)[0].quantity == 1

    def test_unknown_product(self):
        with pytest.raises(GatewayError):
            FakeStoreGateway().add_to_cart(7, 999, 1)

    def test_carts_are_per_member(self):
        gateway = FakeStoreGateway()
        gateway.add_to_cart(7, 1, 1)
        assert gateway.get_cart_by_member(8) == []

    def test_promo_lookup_ignores_case(self):
        gateway = FakeStoreGateway()
        assert gateway.validate_promo("run100") == 100.0
        assert gateway.validate_promo("UNKNOWN") == 0.0
        assert gateway.validate_promo("") == 0.0

    def test_place_order_empties_cart(self):
        gateway = FakeStoreGateway()
        gateway.add_to_cart(7, 6, 1)
        order_id = gateway.place_order(7, _submission())
        assert order_id.startswith("RG-") and order_id.endswith("-000001")
        assert gateway.get_cart_by_member(7) == []
        assert len(gateway.orders[order_id]["items"]) == 1

    def test_configured_failure(self):
        gateway = FakeStoreGateway()
        gateway.configure(fail_procedures={"get_products"}, failure_reason="Timeout")
        with pytest.raises(GatewayError) as exc:
            gateway.get_products(None, None, None, 10000.0, "relevance")
        assert exc.value.reason == "Timeout"

    def test_call_logging(self):
        gateway = FakeStoreGateway()
        gateway.remove_from_cart(1234)
        assert gateway.calls == [{"method": "remove_from_cart", "cart_item_id": 1234}]


class TestGatewayFactory:
    def test_get_gateway_returns_fake_by_default(self):
        reset_gateway()
        assert isinstance(get_gateway(), FakeStoreGateway)

    def test_get_gateway_is_memoized(self):
        reset_gateway()
        assert get_gateway() is get_gateway()

    def test_set_gateway_overrides(self):
        custom = FakeStoreGateway(promo_codes={})
        set_gateway(custom)
        assert get_gateway() is custom

    def test_sqlserver_from_settings(self, configure_settings):
        configure_settings(gateway="sqlserver", database_uri="sqlite://")
        reset_gateway()
        gateway = get_gateway()
        assert isinstance(gateway, SqlServerGateway)
        assert str(gateway.engine.url) == "sqlite://"


class TestSqlServerGateway:
    def test_needs_uri_or_engine(self):
        with pytest.raises(ValueError):
            SqlServerGateway()

    def test_get_products_maps_rows(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.mappings.return_value.all.return_value = [
            {
                "ProductId": 1,
                "Name": "Pegasus 41",
                "ImageUrl": "/img/p41.jpg",
                "Category": "Running Shoes",
                "Brand": "Nike",
                "Size": "8,9",
                "Price": Decimal("7495.00"),
                "OriginalPrice": None,
                "Rating": Decimal("4.7"),
                "ReviewCount": 312,
                "IsInStock": 1,
                "IsNew": 0,
            }
        ]

        products = SqlServerGateway(engine=engine).get_products("Running Shoes", None, None, 10000.0, "relevance")

        assert products == [
            ProductRecord(
                product_id=1,
                name="Pegasus 41",
                image_url="/img/p41.jpg",
                category="Running Shoes",
                brand="Nike",
                size="8,9",
                price=7495.0,
                original_price=None,
                rating=4.7,
                review_count=312,
                is_in_stock=True,
                is_new=False,
            )
        ]
        params = conn.execute.call_args.args[1]
        assert params["categories"] == "Running Shoes"
        assert params["brands"] is None

    def test_cart_rows_without_size_or_color(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.mappings.return_value.all.return_value = [
            {
                "CartItemId": 1001,
                "ProductId": 6,
                "ProductName": "Socks",
                "ImageUrl": "/img/socks.jpg",
                "Size": None,
                "Color": None,
                "UnitPrice": Decimal("950.00"),
                "Quantity": 2,
                "IsInStock": True,
            }
        ]

        (line,) = SqlServerGateway(engine=engine).get_cart_by_member(42)

        assert line.size == ""
        assert line.color == ""
        assert line.unit_price == 950.0

    def test_validate_promo_reads_output_parameter(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.scalar.return_value = Decimal("100.00")
        assert SqlServerGateway(engine=engine).validate_promo("RUN100") == 100.0

    def test_validate_promo_without_amount(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.scalar.return_value = None
        assert SqlServerGateway(engine=engine).validate_promo("NOPE") == 0.0

    def test_place_order_returns_generated_id(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.scalar.return_value = "RG-2024-001847"

        order_id = SqlServerGateway(engine=engine).place_order(42, _submission())

        assert order_id == "RG-2024-001847"
        params = conn.execute.call_args.args[1]
        assert params["member_id"] == 42
        assert params["total"] == 1100.0

    def test_place_order_without_id(self):
        engine, conn = _mock_engine()
        conn.execute.return_value.scalar.return_value = None
        with pytest.raises(GatewayError):
            SqlServerGateway(engine=engine).place_order(42, _submission())

    def test_driver_errors_become_gateway_errors(self):
        gateway = SqlServerGateway(engine=create_engine("sqlite://"))
        with pytest.raises(GatewayError) as exc:
            gateway.remove_from_cart(1001)
        assert exc.value.procedure == "sp_RemoveFromCart"
