"""
RecipeShare Core Dependencies
FastAPI dependencies for authentication, admin access and pagination
"""

from fastapi import Depends, Header, Query, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional, Annotated
import hmac
import logging

from core.config import settings
from core.database import get_db
from core.exceptions import forbidden, unauthorized
from middleware.logging import bind_user
from services.auth_service import auth_service, AuthenticationError
from models.users import User
from utils.request_utils import get_client_ip

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from the bearer token

    Raises:
        APIError: 401 when the token is missing, invalid, expired, or names
            a user that no longer exists or is deactivated
    """
    if not credentials or not credentials.credentials:
        raise unauthorized("No token provided")

    try:
        user = auth_service.get_current_user(credentials.credentials, db)
    except AuthenticationError as e:
        logger.warning(
            "Authentication failed: %s", e.message,
            extra={"ip": get_client_ip(request), "path": request.url.path},
        )
        raise unauthorized(e.message)

    request.state.user_id = user.id
    bind_user(user.id)
    return user


async def get_optional_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if authenticated, None otherwise

    Used for endpoints that personalize results for signed-in users
    but also serve anonymous requests
    """
    if not credentials or not credentials.credentials:
        return None

    try:
        user = auth_service.get_current_user(credentials.credentials, db)
    except AuthenticationError as e:
        logger.debug("Optional authentication ignored: %s", e.message)
        return None

    request.state.user_id = user.id
    bind_user(user.id)
    return user


async def require_admin_key(x_admin_key: Annotated[Optional[str], Header()] = None) -> None:
    """Guard destructive admin routes when an admin key is configured"""
    if not settings.ADMIN_API_KEY:
        return
    if not x_admin_key or not hmac.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        raise forbidden("A valid X-Admin-Key header is required")


class Pagination:
    """Page/limit query parameters with the derived offset"""

    def __init__(self, page: int, limit: int):
        self.page = page
        self.limit = limit
        self.offset = (page - 1) * limit


def pagination_params(default_limit: int = 10, max_limit: int = 100):
    """
    Dependency factory for page/limit query parameters

    Args:
        default_limit: Items per page when not given
        max_limit: Largest accepted limit
    """
    def dependency(
        page: int = Query(1, ge=1),
        limit: int = Query(default_limit, ge=1, le=max_limit),
    ) -> Pagination:
        return Pagination(page, limit)

    return dependency


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
DBSession = Annotated[Session, Depends(get_db)]
AdminAccess = Depends(require_admin_key)
