"""HTTP mapping of storefront errors.

Protean's exceptions are mapped by ``protean.integrations.fastapi``; field
validation errors and storefront errors are then given the storefront body
shape, ``{"error": ..., "error_type": ...}``. Storefront errors are mapped by
walking the exception's class hierarchy.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from storefront.errors import (
    InsufficientStock,
    NotAuthorized,
    NotFound,
    StorefrontError,
    TransactionConflict,
)

ERROR_STATUS_CODES = {
    NotAuthorized: 401,
    NotFound: 404,
    InsufficientStock: 409,
    TransactionConflict: 409,
}


def status_code_for(exc: StorefrontError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to appropriate HTTP responses."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": exc.reason, "error_type": type(exc).__name__},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": exc.messages, "error_type": "ValidationError"},
    )


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": str(exc), "error_type": "NotFound"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(StorefrontError, storefront_error_handler)
