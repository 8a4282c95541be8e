"""
RecipeShare API Endpoints
All API endpoint modules
"""

# Import all endpoint modules
from . import (
    admin, auth, categories, comments, feed, follow, health, interactions,
    recipe_collections, recipes, search, shopping_list, statistics, users,
)

__all__ = [
    "admin",
    "auth",
    "categories",
    "comments",
    "feed",
    "follow",
    "health",
    "interactions",
    "recipe_collections",
    "recipes",
    "search",
    "shopping_list",
    "statistics",
    "users",
]
