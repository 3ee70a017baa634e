"""Map domain errors onto HTTP responses.

Every error body has the same shape: ``{"error": kind, "message": text}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import OrderingError

logger = structlog.get_logger(__name__)


def error_body(kind: str, message: str) -> dict:
    return {"error": kind, "message": message}


async def _ordering_error(request: Request, exc: OrderingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, kind=exc.kind, detail=exc.message, **exc.context)
    else:
        logger.info("request.rejected", path=request.url.path, kind=exc.kind, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.public_message))


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or {}
    if isinstance(messages, dict):
        text = "; ".join(f"{field}: {', '.join(map(str, errors))}" for field, errors in messages.items())
    else:
        text = str(messages)
    return JSONResponse(status_code=400, content=error_body("validation_error", text or "Invalid request"))


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body("not_found", str(exc) or "Not found"))


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's default handlers, then the ordering-specific ones."""
    register_exception_handlers(app)
    app.add_exception_handler(OrderingError, _ordering_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
