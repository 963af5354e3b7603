"""Confirmation hand-off: command and handler that consume a confirmation ticket.

A claimed or expired snapshot is deleted, so the store only ever holds
confirmations that are still waiting to be read.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.confirmation import OrderConfirmation

logger = structlog.get_logger(__name__)


@storefront.command(part_of="OrderConfirmation")
class ClaimConfirmation:
    ticket_id = Identifier(required=True)
    session_id = Identifier(required=True)
    as_of = DateTime()  # Optional: defaults to now


def purge_expired_confirmations(as_of=None) -> int:
    """Delete every snapshot whose TTL has run out. Returns how many were dropped."""
    as_of = as_of or datetime.now(UTC)
    repo = current_domain.repository_for(OrderConfirmation)
    stored = repo._dao.query.limit(None).all().items

    purged = 0
    for confirmation in stored:
        if confirmation.is_expired(as_of):
            repo._dao.delete(confirmation)
            purged += 1

    if purged:
        logger.info("Expired confirmations purged", count=purged)
    return purged


@storefront.command_handler(part_of=OrderConfirmation)
class ClaimConfirmationHandler:
    @handle(ClaimConfirmation)
    def claim_confirmation(self, command):
        """Return the snapshot and delete it, or None when it is gone or not ours."""
        repo = current_domain.repository_for(OrderConfirmation)
        try:
            confirmation = repo.get(command.ticket_id)
        except ObjectNotFoundError:
            logger.info("Confirmation ticket not found", ticket_id=str(command.ticket_id))
            return None

        if not confirmation.belongs_to(command.session_id):
            logger.warning(
                "Confirmation ticket presented by another session",
                ticket_id=str(command.ticket_id),
                session_id=str(command.session_id),
            )
            return None

        if not confirmation.is_claimable(command.as_of):
            logger.info(
                "Confirmation ticket expired",
                ticket_id=str(command.ticket_id),
                order_id=confirmation.order_id,
            )
            repo._dao.delete(confirmation)
            return None

        confirmation.consume(command.as_of)
        repo._dao.delete(confirmation)
        return confirmation
