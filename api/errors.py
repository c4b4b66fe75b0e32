"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from clients.email_client import EmailGatewayError
from core.errors import (
    ConcurrentUpdateError,
    InvalidStatusTransitionError,
    LedgerError,
    ProfileMissingError,
    StoreError,
)

logger = logging.getLogger(__name__)

# LedgerError subclasses not listed here map to 400
_LEDGER_STATUS = {
    ProfileMissingError: 412,
    InvalidStatusTransitionError: 409,
    ConcurrentUpdateError: 409,
}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _json(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, _request_id(request)).model_dump(mode="json"),
    )


def _format_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        status_code = _LEDGER_STATUS.get(type(exc), 400)
        return _json(request, status_code, exc.code, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _json(request, 404, ErrorCodes.NOT_FOUND, message)
        if "already" in message.lower():
            return _json(request, 409, ErrorCodes.ALREADY_EXISTS, message)
        return _json(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return _json(request, 422, ErrorCodes.VALIDATION_ERROR, _format_validation_errors(exc.errors()))

    @app.exception_handler(ValidationError)
    async def model_validation_error_handler(request: Request, exc: ValidationError):
        return _json(request, 422, ErrorCodes.VALIDATION_ERROR, _format_validation_errors(exc.errors()))

    @app.exception_handler(EmailGatewayError)
    async def email_error_handler(request: Request, exc: EmailGatewayError):
        return _json(request, 502, ErrorCodes.EMAIL_DELIVERY_FAILED, str(exc))

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Store unavailable: {exc}")
        return _json(request, 503, ErrorCodes.SERVICE_UNAVAILABLE, "Storage is unavailable")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
