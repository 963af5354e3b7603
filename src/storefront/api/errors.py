"""Translate domain and gateway failures into HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from storefront.gateway.port import GatewayError

logger = structlog.get_logger(__name__)

UNAVAILABLE_MESSAGE = "The store is temporarily unavailable. Please try again."


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    # Procedure and driver details stay in the logs.
    logger.error(
        "Stored procedure call failed",
        procedure=exc.procedure,
        reason=exc.reason,
        path=request.url.path,
    )
    return JSONResponse(status_code=502, content={"detail": UNAVAILABLE_MESSAGE})


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"errors": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
