"""
RecipeShare Database Models
Central import module for all database models
"""

from .users import User, UserFollower
from .categories import Category, DEFAULT_CATEGORIES
from .recipe_models import Recipe, RecipeIngredient, RecipeDifficulty, recipe_categories
from .interactions import RecipeLike, RecipeRating, RecipeComment
from .shopping import ShoppingListItem

__all__ = [
    # User models
    "User",
    "UserFollower",

    # Recipe models
    "Category",
    "DEFAULT_CATEGORIES",
    "Recipe",
    "RecipeIngredient",
    "RecipeDifficulty",
    "recipe_categories",

    # Interaction models
    "RecipeLike",
    "RecipeRating",
    "RecipeComment",

    # Shopping
    "ShoppingListItem",
]
