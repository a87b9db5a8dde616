"""Exception handlers producing ``{"status": "failure", "message": ...}`` bodies."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from avoroute.errors import AvoRouteError

logger = logging.getLogger(__name__)


def failure_response(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "failure", "message": message, **extra},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Malformed parameters are client errors (400)."""
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        logger.warning(f"Validation error on {request.url.path}: {len(errors)} field(s) failed")
        message = errors[0]["message"] if errors else "Invalid request"
        return failure_response(400, message, errors=errors)

    @app.exception_handler(AvoRouteError)
    async def avoroute_exception_handler(request: Request, exc: AvoRouteError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        return failure_response(exc.http_status, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return failure_response(500, str(exc) or "Internal server error")
