"""Store gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeStoreGateway for development and testing
- SqlServerGateway for production (RUNGEAR_GATEWAY=sqlserver)
"""

from storefront.config import GatewayKind, get_settings
from storefront.gateway.fake_adapter import FakeStoreGateway
from storefront.gateway.port import StoreGateway

_current_gateway: StoreGateway | None = None


def get_gateway() -> StoreGateway:
    """Return the current store gateway, building it from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.gateway == GatewayKind.SQLSERVER:
            from storefront.gateway.sqlserver_adapter import SqlServerGateway

            _current_gateway = SqlServerGateway(database_uri=settings.database_uri)
        else:
            _current_gateway = FakeStoreGateway()
    return _current_gateway


def set_gateway(gateway: StoreGateway) -> None:
    """Override the active store gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to the configured default gateway."""
    global _current_gateway
    _current_gateway = None
