# inventory/api/error_handlers.py
"""
FastAPI exception handlers that turn failures into the HTML error page.

    - InventoryError        -> the classified error's status and user message
    - HTTPException         -> its status ("Page not found" for 404)
    - RequestValidationError -> 404 (only path ids are typed, so a bad id is a missing page)
    - Exception             -> 500, generic message in production

Server-side failures are always logged with method, path, client and the stack,
whatever the environment.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory.core.logging.filters import get_request_id
from inventory.core.logging.middleware import REQUEST_ID_HEADER
from inventory.exceptions.base import ErrorKind, InventoryError
from .rendering import Renderer

logger = logging.getLogger(__name__)

PAGE_NOT_FOUND = "Page not found"
GENERIC_MESSAGE = "Something went wrong. Please try again later."


def _renderer(request: Request) -> Renderer:
    return request.app.state.renderer


def _request_extra(request: Request, status_code: int) -> dict:
    return {
        "method": request.method,
        "path": request.url.path,
        "client": request.client.host if request.client else None,
        "status_code": status_code,
    }


async def inventory_error_handler(request: Request, exc: InventoryError) -> Response:
    renderer = _renderer(request)
    error = exc.error
    status = error.http_status

    if error.kind is ErrorKind.INTERNAL:
        logger.error(
            "Internal error: %s",
            error.message,
            exc_info=error.cause if error.cause is not None else exc,
            extra=_request_extra(request, status),
        )
    else:
        logger.info("inventory.domain_error", extra={**_request_extra(request, status), **error.to_payload()})

    return renderer.error_page(
        request,
        status_code=status,
        message=error.user_message(production=renderer.production),
        exc=error.cause if error.kind is ErrorKind.INTERNAL else None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    message = PAGE_NOT_FOUND if exc.status_code == 404 else str(exc.detail)
    logger.info("HTTP %s for %s %s", exc.status_code, request.method, request.url.path,
                extra=_request_extra(request, exc.status_code))
    response = _renderer(request).error_page(request, status_code=exc.status_code, message=message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    logger.info("Unroutable parameters for %s %s", request.method, request.url.path,
                extra=_request_extra(request, 404))
    return _renderer(request).error_page(request, status_code=404, message=PAGE_NOT_FOUND)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.error(
        "Unhandled error for %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
        extra=_request_extra(request, 500),
    )
    renderer = _renderer(request)
    message = GENERIC_MESSAGE if renderer.production else str(exc) or GENERIC_MESSAGE
    response = renderer.error_page(request, status_code=500, message=message, exc=exc)
    # Runs in ServerErrorMiddleware, outside RequestIDMiddleware
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


# Call from the app factory
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InventoryError, inventory_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
