"""
RecipeShare Rate Limiting Middleware
Per-IP sliding windows, with a stricter window for authentication routes
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Dict, Optional
import structlog

from core.config import settings
from core.exceptions import error_response
from utils.rate_limiter import RateLimiter, RateLimitResult, rate_limiter as default_rate_limiter
from utils.request_utils import get_client_ip

logger = structlog.get_logger()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    IP-based rate limiting applied before authentication:
    - global window for every API request
    - auth window for sign-up and sign-in routes
    Health checks are exempt.
    """

    def __init__(
        self,
        app,
        limiter: Optional[RateLimiter] = None,
        global_requests: Optional[int] = None,
        auth_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.limiter = limiter or default_rate_limiter
        window = window_seconds or settings.RATE_LIMIT_WINDOW

        self.ip_limits = {
            "global": {"requests": global_requests or settings.RATE_LIMIT_REQUESTS, "window": window},
            "auth": {"requests": auth_requests or settings.AUTH_RATE_LIMIT_REQUESTS, "window": window},
        }
        self.exempt_paths = {"/", f"{settings.API_PREFIX}/health"}

    async def dispatch(self, request: Request, call_next):
        """Apply the global window, then the auth window for auth routes"""
        if request.url.path in self.exempt_paths or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = get_client_ip(request)

        result = await self._check("global", client_ip)
        if not result.allowed:
            return self._create_rate_limit_response(result, "Too many requests", client_ip, request)

        if request.url.path.startswith(settings.auth_path_prefix):
            auth_result = await self._check("auth", client_ip)
            if not auth_result.allowed:
                return self._create_rate_limit_response(
                    auth_result, "Too many authentication attempts", client_ip, request
                )
            result = auth_result

        response = await call_next(request)
        for key, value in self._headers(result).items():
            response.headers[key] = value
        return response

    async def _check(self, endpoint_type: str, client_ip: str) -> RateLimitResult:
        limit_config = self.ip_limits[endpoint_type]
        return await self.limiter.hit(
            f"{endpoint_type}:{client_ip}", limit_config["requests"], limit_config["window"]
        )

    def _headers(self, result: RateLimitResult) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_seconds),
        }

    def _create_rate_limit_response(self, result: RateLimitResult, error: str, client_ip: str, request: Request):
        """Create rate limit exceeded response"""
        logger.warning("Rate limit exceeded", client_ip=client_ip, path=request.url.path, limit=result.limit)
        headers = self._headers(result)
        headers["Retry-After"] = str(result.reset_seconds)
        return error_response(429, error, "Please try again later", headers=headers)
