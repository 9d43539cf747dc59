# src/therapy_center/api/responses.py
"""
Standardized API error responses.

Domain errors (therapy_center.errors) are rendered as:

    {
        "success": false,
        "error": {"code": "NOT_FOUND", "message": "Session not found", "detail": "..."},
        "meta": {"timestamp": "...", "version": "1.0"}
    }

with the HTTP status taken from ERROR_CODE_TO_HTTP_STATUS.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException

from ..errors import ErrorCode, TherapyCenterError, ValidationFailedError

logger = logging.getLogger(__name__)


# -------------------------
# HTTP Status Mappings
# -------------------------

ERROR_CODE_TO_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.MISSING_REQUIRED_FIELD: 400,
    ErrorCode.INVALID_STATUS_TRANSITION: 400,
    ErrorCode.ALREADY_EXISTS: 400,

    ErrorCode.AUTH_REQUIRED: 401,
    ErrorCode.AUTH_INVALID: 401,
    ErrorCode.PERMISSION_DENIED: 403,

    ErrorCode.NOT_FOUND: 404,

    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


# -------------------------
# Response Models
# -------------------------

class ResponseMeta(BaseModel):
    """Metadata included in all error responses."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None
    version: str = "1.0"


class FieldError(BaseModel):
    """Error for a specific field in validation."""
    field: str
    message: str
    code: str = "invalid"


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: ErrorCode
    message: str
    detail: Optional[str] = None
    field_errors: List[FieldError] = []
    trace_id: Optional[str] = None  # For server errors


class APIErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = False
    error: ErrorDetail
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


def error_response(
    code: ErrorCode,
    message: str,
    detail: Optional[str] = None,
    field_errors: Optional[List[Dict[str, str]]] = None,
    trace_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a standard error response dict."""
    errors = [FieldError(**e) for e in field_errors] if field_errors else []
    return APIErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            detail=detail,
            field_errors=errors,
            trace_id=trace_id,
        )
    ).model_dump(mode="json")


# -------------------------
# Exception Handlers
# -------------------------

async def handle_domain_error(request: Request, exc: TherapyCenterError) -> JSONResponse:
    status = get_http_status(exc.code)
    field_errors = None
    if isinstance(exc, ValidationFailedError) and exc.field:
        field_errors = [{"field": exc.field, "message": exc.message}]

    if status >= 500:
        trace_id = str(uuid.uuid4())
        logger.error(f"{exc.code.value} on {request.method} {request.url.path} [{trace_id}]: {exc.detail}")
        return JSONResponse(
            status_code=status,
            content=error_response(exc.code, "Internal server error", trace_id=trace_id),
        )

    return JSONResponse(
        status_code=status,
        content=error_response(exc.code, exc.message, exc.detail, field_errors),
    )


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]) or "body", "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_response(ErrorCode.VALIDATION_ERROR, "Validation failed", field_errors=field_errors),
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    code = {401: ErrorCode.AUTH_REQUIRED, 403: ErrorCode.PERMISSION_DENIED, 404: ErrorCode.NOT_FOUND}.get(
        exc.status_code, ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.VALIDATION_ERROR
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    trace_id = str(uuid.uuid4())
    logger.error(f"Unhandled error on {request.method} {request.url.path} [{trace_id}]", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_response(ErrorCode.INTERNAL_ERROR, "Internal server error", trace_id=trace_id),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TherapyCenterError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)


# -------------------------
# Success Helpers
# -------------------------

def as_doc(entity: Any) -> Dict[str, Any]:
    """Render a domain model in its stored camelCase shape."""
    return entity.to_doc()


def as_docs(entities: List[Any]) -> List[Dict[str, Any]]:
    return [entity.to_doc() for entity in entities]
