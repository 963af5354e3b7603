"""Storefront bounded context: catalogue browsing, cart, checkout and order confirmation.

Every stateful operation on the shop floor is backed by a stored procedure
reached through the gateway port (``storefront.gateway``). The domain keeps
the shopper session, the cart arithmetic, checkout validation and the
single-use confirmation snapshot in-process.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir="logs", log_file_prefix="rungear")

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
