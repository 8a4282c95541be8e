"""
RecipeShare Logging Middleware
Per-request ids, structured request logs and domain event helpers
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import structlog
import time
import uuid
from typing import Any, Dict, Optional

from core.config import settings
from utils.request_utils import get_client_ip, get_user_agent, parse_user_agent

logger = structlog.get_logger()

SLOW_REQUEST_SECONDS = 2.0
MASKED = "***MASKED***"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every API request twice (started, completed) under one request id

    The id is bound into structlog's context so handler logs carry it too,
    and is returned to the client as X-Request-ID. Authenticated requests
    are tagged with the user id once the auth dependency has resolved it.
    """

    def __init__(self, app):
        super().__init__(app)
        self.quiet_paths = {"/favicon.ico", f"{settings.API_PREFIX}/health"}
        self.sensitive_headers = {"authorization", "cookie", "x-admin-key"}

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        if request.url.path in self.quiet_paths:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response

        started = time.perf_counter()
        logger.info("Request started", **self._describe(request), event_type="request_start")

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=self._elapsed_ms(started),
                error=str(e),
                error_type=type(e).__name__,
                event_type="request_error",
            )
            raise

        duration_ms = self._elapsed_ms(started)
        logger.log(
            self._level_for(response.status_code),
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            user_id=getattr(request.state, "user_id", None),
            event_type="request_complete",
        )
        if duration_ms > SLOW_REQUEST_SECONDS * 1000:
            logger.warning(
                "Slow request detected",
                endpoint=f"{request.method} {request.url.path}",
                duration_ms=duration_ms,
                event_type="slow_request",
            )

        response.headers["X-Request-ID"] = request_id
        return response

    def _describe(self, request: Request) -> Dict[str, Any]:
        return {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client_ip": get_client_ip(request),
            "user_agent": parse_user_agent(get_user_agent(request)),
            "headers": {
                key: MASKED if key.lower() in self.sensitive_headers else value
                for key, value in request.headers.items()
            },
        }

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return round((time.perf_counter() - started) * 1000)

    @staticmethod
    def _level_for(status_code: int) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400:
            return logging.WARNING
        return logging.INFO


def bind_user(user_id: str) -> None:
    """Tag the rest of the request's log lines with the authenticated user"""
    structlog.contextvars.bind_contextvars(user_id=user_id)


def get_request_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("request_id")


def log_user_activity(activity: str, details: Optional[Dict[str, Any]] = None):
    """Something a signed-in user did: login, like, comment, shopping list change"""
    logger.info("User activity", activity=activity, details=details or {}, event_type="user_activity")


def log_business_event(event: str, data: Optional[Dict[str, Any]] = None):
    """Platform-level change: registration, recipe lifecycle, follows, schema resets"""
    logger.info("Business event", business_event=event, data=data or {}, event_type="business_event")
