"""
RecipeShare API Errors
Error type raised by endpoints and the handlers that render every failure
as {error, message?, details?, timestamp}
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Optional
import structlog

from core.config import settings
from utils.date_utils import timestamp

logger = structlog.get_logger()


class APIError(HTTPException):
    """HTTP error carrying the public error payload"""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: Optional[str] = None,
        details: Any = None,
        headers: Optional[dict] = None,
    ):
        super().__init__(status_code=status_code, detail=message or error, headers=headers)
        self.error = error
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.message is not None:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        body["timestamp"] = timestamp()
        return body


def bad_request(error: str, message: Optional[str] = None, details: Any = None) -> APIError:
    return APIError(status.HTTP_400_BAD_REQUEST, error, message, details)


def unauthorized(message: str) -> APIError:
    return APIError(
        status.HTTP_401_UNAUTHORIZED, "Access denied", message, headers={"WWW-Authenticate": "Bearer"}
    )


def forbidden(message: str, error: str = "Access denied") -> APIError:
    return APIError(status.HTTP_403_FORBIDDEN, error, message)


def not_found(error: str, message: Optional[str] = None) -> APIError:
    return APIError(status.HTTP_404_NOT_FOUND, error, message)


def conflict(error: str, message: Optional[str] = None) -> APIError:
    return APIError(status.HTTP_409_CONFLICT, error, message)


def server_error(error: str, message: str = "Internal server error") -> APIError:
    return APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, error, message)


def error_response(status_code: int, error: str, message: Optional[str] = None, headers=None) -> JSONResponse:
    body = {"error": error}
    if message is not None:
        body["message"] = message
    body["timestamp"] = timestamp()
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render APIError payloads and give framework errors the same shape"""
    if isinstance(exc, APIError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return error_response(
            exc.status_code, "API endpoint not found", f"Cannot {request.method} {request.url.path}"
        )
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return error_response(
            exc.status_code, "Method not allowed", f"Cannot {request.method} {request.url.path}",
            headers=getattr(exc, "headers", None),
        )

    message = exc.detail if isinstance(exc.detail, str) else None
    return error_response(exc.status_code, message or "Request failed", headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """400 with one entry per invalid field"""
    errors = exc.errors()

    if any(error.get("type") == "json_invalid" for error in errors):
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Invalid JSON", "Request body contains invalid JSON"
        )

    details = []
    for error in errors:
        location = error.get("loc", ())
        field_path = [str(part) for part in location[1:]] or [str(part) for part in location]
        entry = {
            "field": ".".join(field_path),
            "message": error.get("msg", "Invalid value"),
            "location": str(location[0]) if location else "body",
        }
        if "input" in error and error.get("type") != "missing":
            value = error["input"]
            if isinstance(value, (str, int, float, bool)) or value is None:
                entry["value"] = value
        details.append(entry)

    logger.info("Request validation failed", path=request.url.path, errors=len(details))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details, "timestamp": timestamp()},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything an endpoint did not map itself"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    message = "Internal server error" if settings.is_production else str(exc) or "Internal server error"
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error", message)
