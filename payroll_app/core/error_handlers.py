"""
Global error handlers: every failure leaves the API as the same JSON envelope

    {"error": true, "status_code": ..., "detail": ..., "timestamp": ...,
     "error_code": ..., "error_data": ..., "request_id": ...}
"""

import logging
import traceback
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError

from payroll_app.core.exceptions import BaseAPIException
from payroll_app.core.config import settings

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    detail: Any,
    error_code: str = None,
    error_data: Dict[str, Any] = None,
    request_id: str = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    content = {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if error_code:
        content["error_code"] = error_code
    if error_data:
        content["error_data"] = error_data
    if request_id:
        content["request_id"] = request_id

    return JSONResponse(status_code=status_code, content=jsonable_encoder(content), headers=headers)


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method,
    }


async def api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    context = _request_context(request)
    logger.warning(f"API error {exc.error_code}: {exc.detail}", extra=context)

    return create_error_response(
        exc.status_code,
        exc.detail,
        exc.error_code,
        exc.error_data,
        context["request_id"],
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    context = _request_context(request)
    logger.warning(f"HTTP {exc.status_code}: {exc.detail}", extra=context)

    return create_error_response(
        exc.status_code,
        exc.detail,
        "HTTP_EXCEPTION",
        request_id=context["request_id"],
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    context = _request_context(request)
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed with {len(errors)} error(s)", extra=context)

    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        "VALIDATION_ERROR",
        {"validation_errors": errors},
        context["request_id"]
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    context = _request_context(request)

    if isinstance(exc, IntegrityError):
        status_code, error_code, detail = status.HTTP_409_CONFLICT, "INTEGRITY_ERROR", "Data integrity constraint violated"
    elif isinstance(exc, OperationalError):
        status_code, error_code, detail = status.HTTP_503_SERVICE_UNAVAILABLE, "DATABASE_UNAVAILABLE", "Database unavailable"
    else:
        status_code, error_code, detail = status.HTTP_500_INTERNAL_SERVER_ERROR, "DATABASE_ERROR", "Database error occurred"

    logger.error(f"Database error {error_code}: {str(exc)}", extra=context)

    error_data = {"exception_type": type(exc).__name__, "original_error": str(exc)} if settings.debug else None
    return create_error_response(status_code, detail, error_code, error_data, context["request_id"])


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    context = _request_context(request)
    logger.error(
        f"Unhandled {type(exc).__name__}: {str(exc)}",
        extra={**context, "traceback": traceback.format_exc()}
    )

    if settings.debug:
        detail = f"Internal server error: {str(exc)}"
        error_data = {"exception_type": type(exc).__name__}
    else:
        detail = "An unexpected error occurred. Please try again later."
        error_data = None

    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail,
        "INTERNAL_SERVER_ERROR",
        error_data,
        context["request_id"]
    )


def register_error_handlers(app):
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(BaseAPIException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.info("Error handlers registered successfully")
