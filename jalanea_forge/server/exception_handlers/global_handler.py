"""
Exception Handlers for the FastAPI Application.

Domain errors (``ForgeError``) become JSON responses carrying their own
status and machine-readable code. Anything else is caught by the global
handler, logged with an error id and request context, and answered with 500.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jalanea_forge.core.logging_config import get_logger
from jalanea_forge.core.monitoring import log_error
from jalanea_forge.errors import ForgeError, GenerationLimitError

logger = get_logger(__name__)


async def forge_error_handler(request: Request, exc: ForgeError) -> JSONResponse:
    """
    Map a domain error to its HTTP response.

    Args:
        request: The HTTP request that raised the error
        exc: The domain error

    Returns:
        JSONResponse with ``detail`` and ``code``
    """
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    content = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, GenerationLimitError):
        content["used"] = exc.used
        content["limit"] = exc.limit
    return JSONResponse(status_code=exc.status_code, content=content)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler to log detailed error information.

    This handler is called for any unhandled exception in the application.
    It logs the full error context and returns a JSON response with an error ID
    that clients can use to reference the error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(ForgeError, forge_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
