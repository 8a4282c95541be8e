"""
RecipeShare API Routes
Main router configuration for all API endpoints
"""

from fastapi import APIRouter
import structlog

from api.endpoints import (
    admin, auth, categories, comments, feed, follow, health, interactions,
    recipe_collections, recipes, search, shopping_list, statistics, users,
)
logger = structlog.get_logger()

# Create main API router
api_router = APIRouter()

api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"]
)

api_router.include_router(admin.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(follow.router)
api_router.include_router(recipes.router)
api_router.include_router(interactions.router)
api_router.include_router(comments.router)
api_router.include_router(categories.router)
api_router.include_router(feed.router)
api_router.include_router(shopping_list.router)
api_router.include_router(search.router)
api_router.include_router(statistics.router)
api_router.include_router(recipe_collections.router)

logger.info("API routes configured successfully")
