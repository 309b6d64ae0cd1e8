"""Exception to JSON response mapping for the FastAPI app.

Every error body has the shape {"error": CODE, "message": ..., ["details": ...]},
except early tenant responses and cron rejections, which raise HTTPException
with a dict detail that is returned unchanged.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.domain.exceptions import CrmException

logger = logging.getLogger(__name__)

# Domain error_code -> HTTP status; anything unlisted is a 400.
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "WORKFLOW_CONFIGURATION_ERROR": 400,
    "SERVICE_UNAVAILABLE": 503,
}


def status_for(exc: CrmException) -> int:
    """HTTP status for a domain exception (400 when the code is not mapped)."""
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _error_body(code: str, message: object, details: object = None) -> dict:
    body = {"error": code, "message": message}
    if details:
        body["details"] = details
    return body


async def _on_crm_exception(request: Request, exc: CrmException) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, status, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


async def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_ERROR", "Request validation failed", exc.errors()),
    )


async def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """A dict detail is the whole body; string details are wrapped."""
    content = (
        exc.detail
        if isinstance(exc.detail, dict)
        else _error_body("HTTP_ERROR", exc.detail)
    )
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def _on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(status_code=500, content=_error_body("INTERNAL_ERROR", message))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers above plus slowapi's 429 handler."""
    app.add_exception_handler(CrmException, _on_crm_exception)
    app.add_exception_handler(RequestValidationError, _on_request_validation)
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, _on_unhandled)
