"""Runtime settings for the storefront.

Read from ``RUNGEAR_*`` environment variables (or a local ``.env``).
``PROTEAN_ENV`` still selects the Protean configuration overlay.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayKind(Enum):
    FAKE = "fake"
    SQLSERVER = "sqlserver"


class QuantityFloorPolicy(Enum):
    """What a decrement does to a line item that is already at quantity 1."""

    DELEGATE = "delegate"  # send -1 and let sp_UpdateCartQty decide
    FLOOR = "floor"  # keep the line item at 1
    REMOVE = "remove"  # drop the line item


class Settings(BaseSettings):
    gateway: GatewayKind = GatewayKind.FAKE
    database_uri: str = "mssql+pyodbc://localhost/RunGearDB?driver=ODBC+Driver+18+for+SQL+Server"

    default_max_price: float = Field(default=10000.0, ge=0)
    confirmation_ttl_seconds: int = Field(default=600, ge=1)
    session_ttl_seconds: int = Field(default=1200, ge=1)
    quantity_floor_policy: QuantityFloorPolicy = QuantityFloorPolicy.DELEGATE

    session_cookie_name: str = "rungear_session"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(env_prefix="RUNGEAR_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
