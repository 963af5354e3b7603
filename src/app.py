"""RunGear storefront FastAPI application.

Serves the catalogue, cart, checkout and order confirmation pages as JSON
view models. Commands are processed synchronously; every request runs in
the storefront domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.config import get_settings
from storefront.domain import storefront

storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="RunGear Storefront API",
    description="Running gear shop: catalogue, cart, checkout and order confirmation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from storefront.api import register_error_handlers, router, session_cookie_middleware  # noqa: E402

app.middleware("http")(session_cookie_middleware)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


register_error_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": {"name": storefront.name},
            "gateway": get_settings().gateway.value,
        }
    )
