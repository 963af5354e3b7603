"""Request-scoped collaborators: the shopper session and anti-forgery checks.

The session id travels in a cookie. A request without a known cookie
starts a new session, and so does a cookie whose session has sat idle
past the session TTL. The member id for a new session comes from the
authentication layer in front of the app, which forwards it as
``X-Member-Id``. ``session_cookie_middleware`` writes the cookie for
sessions started here.
"""

import structlog
from fastapi import Depends, Header, HTTPException, Request
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.session.management import ResumeSession, StartSession
from storefront.session.session import ShopperSession

logger = structlog.get_logger(__name__)

MEMBER_ID_HEADER = "X-Member-Id"


def _member_id_from(request: Request) -> int:
    raw = request.headers.get(MEMBER_ID_HEADER, "")
    try:
        return int(raw)
    except ValueError:
        return 0


async def current_session(request: Request) -> ShopperSession:
    repo = current_domain.repository_for(ShopperSession)
    session_id = request.cookies.get(get_settings().session_cookie_name)

    if session_id:
        resumed = current_domain.process(ResumeSession(session_id=session_id), asynchronous=False)
        if resumed:
            return repo.get(resumed)
        logger.info("Unknown or expired session cookie, starting a new session")

    session_id = current_domain.process(StartSession(member_id=_member_id_from(request)), asynchronous=False)
    request.state.new_session_id = session_id
    return repo.get(session_id)


async def verified_session(
    session: ShopperSession = Depends(current_session),
    x_csrf_token: str = Header(default=""),
) -> ShopperSession:
    """The shopper session, after checking the anti-forgery token of a state-changing request."""
    if not session.verify_csrf_token(x_csrf_token):
        logger.warning("Anti-forgery token mismatch", session_id=str(session.id))
        raise HTTPException(status_code=403, detail="Invalid anti-forgery token")
    return session
