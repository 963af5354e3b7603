"""HTTP middleware for the storefront API."""

from fastapi import Request

from storefront.config import get_settings
from storefront.utils.logging import bind_request_context, clear_request_context


async def session_cookie_middleware(request: Request, call_next):
    """Tag the request's log events, and hand out the cookie of a session started while serving it."""
    settings = get_settings()
    clear_request_context()
    bind_request_context(
        method=request.method,
        path=request.url.path,
        session_id=request.cookies.get(settings.session_cookie_name),
    )
    try:
        response = await call_next(request)
    finally:
        clear_request_context()

    session_id = getattr(request.state, "new_session_id", None)
    if session_id:
        response.set_cookie(
            key=settings.session_cookie_name,
            value=session_id,
            httponly=True,
            samesite="lax",
        )
    return response
