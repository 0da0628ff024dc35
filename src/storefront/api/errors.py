"""HTTP status mapping for storefront failures.

Protean's default handlers already turn ``ValidationError`` into 400 and
``ObjectNotFoundError`` into 404. The handlers here cover the storefront
errors that need a different status; Starlette picks the handler registered
for the most specific class in the exception's MRO.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    OutOfStockError,
    VoucherNotFoundError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR = {
    ForbiddenError: 403,
    VoucherNotFoundError: 404,
    ConflictError: 409,
    OutOfStockError: 409,
    ExternalServiceError: 502,
}


def _handler_for(status_code: int):
    async def handle_error(request: Request, exc) -> JSONResponse:
        if status_code >= 500:
            logger.error("upstream_failure", path=request.url.path, error=exc.messages)
        return JSONResponse(status_code=status_code, content={"error": exc.messages})

    return handle_error


def register_storefront_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    for error_class, status_code in _STATUS_BY_ERROR.items():
        app.add_exception_handler(error_class, _handler_for(status_code))
