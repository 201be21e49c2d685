from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.core.exceptions import APIException, NotFoundError, SourceUnavailable
from storefront.core.logging import get_logger

logger = get_logger(__name__)

_SENSITIVE_KEYS = ("consumer_key", "consumer_secret", "api_key", "x-publishable-api-key")


def _error_response(
    status_code: int,
    code: str,
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    error: Dict[str, Any] = {"code": code, "message": message, "status_code": status_code}
    if context is not None:
        error["context"] = context
    return JSONResponse(status_code=status_code, content={"error": error})


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Render any ``APIException`` with its own status code and context.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Error envelope built from ``exc.to_dict()``
    """
    logger.error(
        f"API Exception on {request.url.path}: {exc.detail}",
        extra={"status_code": exc.status_code, "error_code": exc.code, "context": exc.context}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_not_found_exception(request: Request, exc: NotFoundError) -> JSONResponse:
    """A product or category that no source has. Logged at info level."""
    logger.info(
        f"{exc.context.get('resource_type')} not found: {exc.context.get('resource_id')}",
        extra={"request_path": request.url.path}
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_source_exception(request: Request, exc: SourceUnavailable) -> JSONResponse:
    """
    Handle catalog source errors that escaped the fallback chain.

    Credentials are removed from the response context but kept in the logs.
    """
    logger.error(f"Catalog source error: {exc.detail}", extra={"context": exc.context})

    safe_context = {
        key: ("[REDACTED]" if key in _SENSITIVE_KEYS else value)
        for key, value in exc.context.items()
    }
    return _error_response(exc.status_code, exc.code, exc.detail, safe_context)


async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "validation_error",
        "Request validation error",
        {"errors": errors},
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_server_error",
        "An unexpected error occurred",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach the error handlers to the application.

    Starlette resolves handlers by walking the exception's MRO, so the
    subclasses registered here win over ``APIException``.
    """
    app.add_exception_handler(NotFoundError, handle_not_found_exception)
    app.add_exception_handler(SourceUnavailable, handle_source_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)
