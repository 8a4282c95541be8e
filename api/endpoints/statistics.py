"""
RecipeShare Statistics Endpoints
Platform-wide counters and per-user engagement statistics
"""

from fastapi import APIRouter, Depends
from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.dependencies import CurrentUser
from core.exceptions import APIError, server_error
from models.categories import Category
from models.interactions import RecipeComment, RecipeLike, RecipeRating
from models.recipe_models import Recipe, recipe_categories
from models.shopping import ShoppingListItem
from models.users import User, UserFollower
from services.user_service import user_service
from utils.date_utils import days_ago
from utils.responses import round_average, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/statistics", tags=["Statistics"])

RECENT_WINDOW_DAYS = 7


def count_rows(db: Session, model, *criteria) -> int:
    return db.query(func.count()).select_from(model).filter(*criteria).scalar()


def category_counts(db: Session, *criteria):
    """Categories with the number of matching recipes filed under each"""
    recipe_count = func.count(Recipe.id)
    return (
        db.query(Category, recipe_count)
        .outerjoin(recipe_categories, recipe_categories.c.category_id == Category.id)
        .outerjoin(Recipe, and_(Recipe.id == recipe_categories.c.recipe_id, *criteria))
        .group_by(Category.id)
        .order_by(recipe_count.desc(), Category.name)
    )


@router.get("/platform")
async def get_platform_statistics(db: Session = Depends(get_db)):
    """Totals across the platform plus activity over the last week"""
    try:
        since = days_ago(RECENT_WINDOW_DAYS)

        average_rating = db.query(func.avg(RecipeRating.rating)).scalar()
        popular = (
            category_counts(db, Recipe.is_public.is_(True))
            .filter(Category.is_active.is_(True))
            .limit(10)
            .all()
        )

        return with_timestamp({
            "platformStats": {
                "totalUsers": count_rows(db, User, User.is_active.is_(True)),
                "totalRecipes": count_rows(db, Recipe, Recipe.is_public.is_(True)),
                "totalCategories": count_rows(db, Category, Category.is_active.is_(True)),
                "totalLikes": count_rows(db, RecipeLike),
                "totalComments": count_rows(db, RecipeComment),
                "totalRatings": count_rows(db, RecipeRating),
                "totalFollows": count_rows(db, UserFollower),
                "averageRating": round_average(average_rating),
            },
            "recentActivity": {
                "newUsersThisWeek": count_rows(db, User, User.created_at >= since),
                "newRecipesThisWeek": count_rows(
                    db, Recipe, Recipe.created_at >= since, Recipe.is_public.is_(True)
                ),
                "newLikesThisWeek": count_rows(db, RecipeLike, RecipeLike.created_at >= since),
                "newCommentsThisWeek": count_rows(db, RecipeComment, RecipeComment.created_at >= since),
            },
            "popularCategories": [
                {**category.to_summary(), "recipeCount": recipe_count} for category, recipe_count in popular
            ],
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get platform statistics: {e}")
        raise server_error("Failed to get platform statistics")


@router.get("/user")
async def get_user_statistics(current_user: CurrentUser, db: Session = Depends(get_db)):
    """
    Statistics for the requester

    Covers authored recipes, engagement received from others, engagement
    given, the most liked public recipe and the top categories used.
    """
    try:
        user_id = current_user.id

        total, public, featured, average_time = db.query(
            func.count(Recipe.id),
            func.coalesce(func.sum(case((Recipe.is_public.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(case((Recipe.is_featured.is_(True), 1), else_=0)), 0),
            func.avg(Recipe.prep_time_minutes + Recipe.cook_time_minutes),
        ).filter(Recipe.author_id == user_id).one()

        own_recipes = Recipe.author_id == user_id
        likes_received = db.query(func.count()).select_from(RecipeLike).join(
            Recipe, Recipe.id == RecipeLike.recipe_id
        ).filter(own_recipes).scalar()
        comments_received = db.query(func.count(RecipeComment.id)).join(
            Recipe, Recipe.id == RecipeComment.recipe_id
        ).filter(
            own_recipes, RecipeComment.user_id != user_id
        ).scalar()
        ratings_received, average_rating = db.query(
            func.count(RecipeRating.id), func.avg(RecipeRating.rating)
        ).join(Recipe, Recipe.id == RecipeRating.recipe_id).filter(own_recipes).one()

        likes_count = func.count(RecipeLike.user_id).label("likes_count")
        top = (
            db.query(Recipe.id, Recipe.title, Recipe.image_url, likes_count)
            .outerjoin(RecipeLike, RecipeLike.recipe_id == Recipe.id)
            .filter(own_recipes, Recipe.is_public.is_(True))
            .group_by(Recipe.id, Recipe.title, Recipe.image_url)
            .order_by(likes_count.desc(), Recipe.created_at.desc())
            .first()
        )

        breakdown = (
            category_counts(db, own_recipes)
            .having(func.count(Recipe.id) > 0)
            .limit(5)
            .all()
        )

        return with_timestamp({
            "recipeStats": {
                "totalRecipes": total,
                "publicRecipes": int(public),
                "privateRecipes": total - int(public),
                "featuredRecipes": int(featured),
                "averageTotalTime": round(float(average_time)) if average_time is not None else None,
            },
            "engagementStats": {
                "likesReceived": likes_received,
                "commentsReceived": comments_received,
                "ratingsReceived": ratings_received,
                "averageRating": round_average(average_rating),
                "followersCount": user_service.followers_count(db, user_id),
                "followingCount": user_service.following_count(db, user_id),
            },
            "activityStats": {
                "likesGiven": count_rows(db, RecipeLike, RecipeLike.user_id == user_id),
                "commentsMade": count_rows(db, RecipeComment, RecipeComment.user_id == user_id),
                "ratingsGiven": count_rows(db, RecipeRating, RecipeRating.user_id == user_id),
                "shoppingListItems": count_rows(db, ShoppingListItem, ShoppingListItem.user_id == user_id),
            },
            "topRecipe": {
                "id": top.id,
                "title": top.title,
                "imageUrl": top.image_url,
                "likesCount": top.likes_count,
            } if top else None,
            "categoryBreakdown": [
                {**category.to_summary(), "recipeCount": recipe_count} for category, recipe_count in breakdown
            ],
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get statistics for user {current_user.id}: {e}")
        raise server_error("Failed to get user statistics")
