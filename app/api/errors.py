"""
Error types and handlers producing the API's ``{success: false, ...}`` bodies.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from app.models.base import ErrorResponse

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """A request failed after validation; reported as a 500 with the underlying error."""

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.message = message
        self.details = details


def error_response(status_code: int, error: str, details: Optional[str] = None, headers=None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed form fields and bodies are client errors, reported as 400."""
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
        return error_response(400, "Invalid request", "; ".join(messages))

    @app.exception_handler(ProcessingError)
    async def processing_error_handler(request: Request, exc: ProcessingError):
        return error_response(500, exc.message, exc.details)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unexpected errors."""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return error_response(500, "An unexpected error occurred", str(exc))
