"""
RecipeShare Security Middleware
Rejects oversized bodies and adds security headers to every response
"""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from core.config import settings
from core.exceptions import error_response
from utils.request_utils import get_client_ip, is_secure_request

logger = structlog.get_logger()


class SecurityMiddleware(BaseHTTPMiddleware):
    """
    Security middleware that adds:
    - Request size enforcement (413)
    - Security headers
    - No-store caching for API responses
    """

    def __init__(self, app, max_request_size: int = None):
        super().__init__(app)
        self.max_request_size = max_request_size or settings.MAX_REQUEST_SIZE

    async def dispatch(self, request: Request, call_next):
        """Process request through security checks"""
        if self._is_oversized(request):
            logger.warning(
                "Oversized request rejected",
                client_ip=get_client_ip(request),
                path=request.url.path,
                content_length=request.headers.get("content-length"),
            )
            response = error_response(413, "Payload too large", "Request body exceeds size limit")
            self._add_security_headers(response, request)
            return response

        response = await call_next(request)
        self._add_security_headers(response, request)
        return response

    def _is_oversized(self, request: Request) -> bool:
        content_length = request.headers.get("content-length")
        if not content_length:
            return False
        try:
            return int(content_length) > self.max_request_size
        except ValueError:
            return False

    def _add_security_headers(self, response: Response, request: Request):
        """Add security headers to response"""
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"

        # HSTS (only for HTTPS)
        if is_secure_request(request):
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # API-specific headers
        if request.url.path.startswith(settings.API_PREFIX):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
