"""Shopper session lifecycle: commands and handler."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.session.session import ShopperSession

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShopperSession")
class StartSession:
    member_id = Integer(default=0)


@storefront.command(part_of="ShopperSession")
class ResumeSession:
    """Pick up the session named by a cookie, if it is still alive."""

    session_id = Identifier(required=True)
    as_of = DateTime()  # Optional: defaults to now


@storefront.command(part_of="ShopperSession")
class PostFlashMessage:
    """Queue a message for the next page the shopper sees."""

    session_id = Identifier(required=True)
    level = String(required=True, max_length=10)
    message = String(required=True, max_length=255)


@storefront.command(part_of="ShopperSession")
class ConsumeFlashMessage:
    session_id = Identifier(required=True)


def purge_expired_sessions(as_of=None) -> int:
    """Delete every session idle for longer than the session TTL."""
    as_of = as_of or datetime.now(UTC)
    ttl_seconds = get_settings().session_ttl_seconds
    repo = current_domain.repository_for(ShopperSession)

    purged = 0
    for session in repo._dao.query.limit(None).all().items:
        if session.is_expired(ttl_seconds, as_of):
            repo._dao.delete(session)
            purged += 1

    if purged:
        logger.info("Idle sessions purged", count=purged)
    return purged


@storefront.command_handler(part_of=ShopperSession)
class ManageSessionHandler:
    @handle(StartSession)
    def start_session(self, command):
        purge_expired_sessions()
        session = ShopperSession.start(member_id=command.member_id)
        current_domain.repository_for(ShopperSession).add(session)
        return str(session.id)

    @handle(ResumeSession)
    def resume_session(self, command):
        """Return the session id and refresh its idle clock, or None once it has lapsed."""
        repo = current_domain.repository_for(ShopperSession)
        try:
            session = repo.get(command.session_id)
        except ObjectNotFoundError:
            return None

        if session.is_expired(get_settings().session_ttl_seconds, command.as_of):
            repo._dao.delete(session)
            logger.info("Session expired", session_id=str(command.session_id))
            return None

        session.touch(command.as_of)
        repo.add(session)
        return str(session.id)

    @handle(PostFlashMessage)
    def post_flash_message(self, command):
        repo = current_domain.repository_for(ShopperSession)
        session = repo.get(command.session_id)
        session.flash(command.level, command.message)
        repo.add(session)

    @handle(ConsumeFlashMessage)
    def consume_flash_message(self, command):
        repo = current_domain.repository_for(ShopperSession)
        session = repo.get(command.session_id)
        message = session.pop_flash()
        if message is not None:
            repo.add(session)
        return message
