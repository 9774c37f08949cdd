"""HTTP glue shared by every context's router.

``register_exception_handlers`` renders ``MarketplaceError`` subclasses with
their own status code and body, and reshapes request validation failures
into the same ``ValidationFailed`` body.
"""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from shared.errors import MarketplaceError, ValidationFailed
from shared.logging import add_context, clear_context

logger = structlog.get_logger(__name__)


def _render(error: MarketplaceError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        logger.info("request_rejected", error=exc.code, status=exc.status_code)
        return _render(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _render(ValidationFailed.from_pydantic(exc))

    @app.exception_handler(PydanticValidationError)
    async def model_validation_handler(request: Request, exc: PydanticValidationError):
        return _render(ValidationFailed.from_pydantic(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "internal_error", "message": "Server error"})


def register_request_context(app: FastAPI) -> None:
    """Bind a request id and path to every log line emitted while handling a request."""

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        clear_context()
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        add_context(request_id=request_id, path=request.url.path, method=request.method)
        try:
            response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response
