"""Error types and FastAPI exception handlers.

Every failure leaves the API as ``{"error": "<message>"}`` with the status
code of its category. Unexpected exceptions are logged with their traceback
and reported with a generic message only.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    status_code = 500
    default_message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


def error_body(message: str) -> dict:
    return {"error": message}


def add_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app.

    - ApiError -> its own status code and message
    - HTTPException -> its status code, detail as message
    - RequestValidationError -> 400
    - Unhandled Exception -> 500 with a generic message
    """

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("query", "path"))
            message = f"Invalid parameter '{field}': {first.get('msg', 'invalid value')}"
        else:
            message = ValidationError.default_message
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=error_body(INTERNAL_ERROR_MESSAGE))
