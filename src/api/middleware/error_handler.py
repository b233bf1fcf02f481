"""
Global error handling middleware for the FastAPI application.

Catches EchoVoiceError subclasses, request validation errors, and
unhandled exceptions, converting them into the ``{"error": ...}`` body
the chat front end expects.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.exceptions import EchoVoiceError
from src.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers four handlers in priority order:
    1. ``EchoVoiceError`` — maps domain errors to their status code.
    2. ``HTTPException`` — framework errors such as unparseable multipart
       bodies or unknown routes.
    3. ``RequestValidationError`` — malformed requests (422).
    4. ``Exception`` — catch-all for unexpected server errors (500).

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(EchoVoiceError)
    async def echovoice_error_handler(_request: Request, exc: EchoVoiceError) -> JSONResponse:
        """Convert domain-specific errors into a JSON error body."""
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Keep framework-raised HTTP errors in the same error body."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (malformed body/params)."""
        return _error_response(422, str(exc))

    @app.exception_handler(Exception)
    async def generic_error_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler — prevents stack traces from leaking to clients."""
        logger.error("Unhandled error: %s", exc)
        return _error_response(500, "Internal server error")
