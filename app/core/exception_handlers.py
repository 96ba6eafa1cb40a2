"""Error responses.

Every failure leaves the API as ``{"error", "message", "details"}``. Domain
exceptions pick their status from ERROR_CODE_STATUS; anything else is a 500
whose message is hidden outside debug mode.
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.tenant_context import get_tenant_context_or_none
from app.domain.exceptions import OfficeException

logger = logging.getLogger(__name__)

ERROR_CODE_STATUS: dict[str, int] = {
    "TENANT_REQUIRED": 400,
    "TENANT_NOT_FOUND": 404,
    "TENANT_SUSPENDED": 403,
    "TENANT_CONTEXT_MISSING": 500,
    "RESOURCE_NOT_FOUND": 404,
    "CONFLICT": 409,
    "VALIDATION_ERROR": 400,
    "BUSINESS_RULE_VIOLATION": 422,
    "DATABASE_CONNECTION_ERROR": 503,
    "EVENT_BUS_ERROR": 502,
    "EVENT_BUS_MODE_UNSUPPORTED": 400,
}


def status_for(exc: OfficeException) -> int:
    return ERROR_CODE_STATUS.get(exc.error_code, 400)


def _body(status: int, error: str, message: Any, details: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": error, "message": message, "details": details or {}},
    )


def _where(request: Request) -> str:
    ctx = get_tenant_context_or_none()
    return f"{request.method} {request.url.path} tenant={ctx.slug if ctx else '-'}"


async def _office_exception_handler(request: Request, exc: OfficeException) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s failed with %s: %s", _where(request), exc.error_code, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    return _body(422, "VALIDATION_ERROR", "Request validation failed", {"errors": errors})


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        error = HTTPStatus(exc.status_code).name
    except ValueError:
        error = "HTTP_ERROR"
    return _body(exc.status_code, error, exc.detail)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error in %s", _where(request))
    message = str(exc) if get_settings().debug else "Internal server error"
    return _body(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for domain, validation, HTTP and unexpected errors."""
    app.add_exception_handler(OfficeException, _office_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
