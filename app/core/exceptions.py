"""
Error taxonomy for the booking API.

API errors carry the HTTP status they map to and the message that is safe to
return to the caller. Calendar gateway errors stay internal: the services
translate them into an ``UpstreamError`` (booking) or swallow them with a
warning (availability).
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Something went wrong on our end"


class BookingAPIError(Exception):
    """Base exception for errors that map to an HTTP response"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(BookingAPIError):
    """Malformed input, unknown service/business, bad time zone"""
    status_code = 400


class InvalidDate(ValidationError):
    def __init__(self, value: str):
        super().__init__(f"Invalid date '{value}', expected YYYY-MM-DD", {"value": value})


class InvalidTimeZone(ValidationError):
    def __init__(self, zone: Any):
        super().__init__(f"Invalid time zone '{zone}'", {"time_zone": str(zone)})
        self.zone = zone


class ServiceNotFound(ValidationError):
    def __init__(self, service_id: Any):
        super().__init__("Service not found", {"service_id": str(service_id)})


class NotFoundError(BookingAPIError):
    status_code = 404


class StateConflictError(BookingAPIError):
    """Inactive business, closed day, outside operating hours"""
    status_code = 400


class BookingConflictError(StateConflictError):
    """The requested window overlaps an existing appointment"""
    status_code = 409


class UpstreamError(BookingAPIError):
    """Calendar provider failure; detail is logged, never returned"""
    status_code = 500

    @property
    def public_message(self) -> str:
        return INTERNAL_ERROR_MESSAGE


# ============================================================================
# Calendar gateway errors
# ============================================================================

class CalendarGatewayError(Exception):
    """Base exception for calendar provider failures"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        if self.response_body:
            return f"{self.message}: {self.response_body}"
        return self.message


class AuthError(CalendarGatewayError):
    """Token refresh failed or the stored credential is unreadable"""


class CalendarAPIError(CalendarGatewayError):
    """Calendar API returned an error or an unusable payload"""


# ============================================================================
# FastAPI handlers
# ============================================================================

def _envelope(message: str) -> Dict[str, Any]:
    return {"success": False, "data": None, "message": message}


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto the JSON response envelope"""

    @app.exception_handler(BookingAPIError)
    async def booking_api_error_handler(request: Request, exc: BookingAPIError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=_envelope(exc.public_message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content=_envelope(f"Invalid request: {problems}"))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content=_envelope(INTERNAL_ERROR_MESSAGE))
