"""Global exception handlers for FastAPI.

Finance failures map to fixed status codes and error codes. The order of
registration doesn't matter: Starlette picks the most specific class in
the exception's MRO.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from core.exceptions import (
    FinanceError,
    IllegalDelete,
    InvalidAmount,
    InvalidState,
    InvalidTransition,
    InvoiceNotFound,
    UnsupportedCurrency,
)

logger = logging.getLogger(__name__)

# exception class -> (status, code)
FINANCE_ERRORS: dict[type[FinanceError], tuple[int, str]] = {
    InvoiceNotFound: (404, ErrorCodes.NOT_FOUND),
    InvalidTransition: (409, ErrorCodes.INVALID_STATUS_TRANSITION),
    IllegalDelete: (409, ErrorCodes.INVOICE_NOT_DELETABLE),
    InvalidState: (409, ErrorCodes.INVOICE_NOT_PAYABLE),
    InvalidAmount: (400, ErrorCodes.INVALID_AMOUNT),
    UnsupportedCurrency: (400, ErrorCodes.UNSUPPORTED_CURRENCY),
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, _request_id(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(FinanceError)
    async def finance_error_handler(request: Request, exc: FinanceError):
        status_code, code = FINANCE_ERRORS.get(type(exc), (400, ErrorCodes.INVALID_REQUEST))
        return _error(request, status_code, code, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _error(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
