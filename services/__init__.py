"""
RecipeShare Services Module
Business logic shared across feature endpoints
"""

from .auth_service import AuthService, AuthenticationError, auth_service
from .recipe_service import RecipeService, recipe_service, author_summary
from .user_service import UserService, user_service

__all__ = [
    # Authentication
    "AuthService",
    "AuthenticationError",
    "auth_service",

    # Recipes
    "RecipeService",
    "recipe_service",
    "author_summary",

    # Users
    "UserService",
    "user_service",
]
