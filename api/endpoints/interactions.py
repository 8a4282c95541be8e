"""
RecipeShare Interaction Endpoints
Likes and star ratings on recipes
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, not_found, server_error
from middleware.logging import log_user_activity
from models.interactions import RecipeLike, RecipeRating
from schemas.interaction_schemas import RatingCreate
from services.recipe_service import author_summary, recipe_service
from utils.date_utils import to_iso
from utils.responses import counted_pagination, round_average, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["Interactions"])


def serialize_rating(rating: RecipeRating) -> dict:
    return {
        "id": rating.id,
        "rating": rating.rating,
        "review": rating.review,
        "createdAt": to_iso(rating.created_at),
        "updatedAt": to_iso(rating.updated_at),
    }


@router.post("/{recipe_id}/like")
async def toggle_like(recipe_id: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Like the recipe, or remove the like when one already exists"""
    try:
        recipe = recipe_service.get_accessible_recipe(db, recipe_id, current_user, "Cannot like a private recipe")

        like = db.query(RecipeLike).filter(
            RecipeLike.recipe_id == recipe.id, RecipeLike.user_id == current_user.id
        ).first()
        if like:
            db.delete(like)
            is_liked = False
        else:
            db.add(RecipeLike(recipe_id=recipe.id, user_id=current_user.id))
            is_liked = True
        db.commit()

        log_user_activity("recipe_liked" if is_liked else "recipe_unliked", {"recipe_id": recipe.id})
        return with_timestamp({
            "message": "Recipe liked successfully" if is_liked else "Recipe unliked successfully",
            "recipe": {"id": recipe.id, "title": recipe.title},
            "isLiked": is_liked,
            "likesCount": recipe_service.likes_count(db, recipe.id),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to toggle like on recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to toggle like")


@router.post("/{recipe_id}/rate")
async def rate_recipe(
    recipe_id: str,
    rating_data: RatingCreate,
    current_user: CurrentUser,
    db: Session = Depends(get_db)
):
    """
    Create or replace the requester's rating

    Authors cannot rate their own recipes.
    """
    try:
        recipe = recipe_service.get_accessible_recipe(db, recipe_id, current_user, "Cannot rate a private recipe")
        if recipe.author_id == current_user.id:
            raise bad_request("Invalid operation", "You cannot rate your own recipe")

        rating = db.query(RecipeRating).filter(
            RecipeRating.recipe_id == recipe.id, RecipeRating.user_id == current_user.id
        ).first()
        created = rating is None
        if created:
            rating = RecipeRating(recipe_id=recipe.id, user_id=current_user.id)
            db.add(rating)
        rating.rating = rating_data.rating
        rating.review = rating_data.review
        db.commit()
        db.refresh(rating)

        log_user_activity("recipe_rated", {"recipe_id": recipe.id, "rating": rating.rating})
        return with_timestamp({
            "message": "Rating created successfully" if created else "Rating updated successfully",
            "rating": serialize_rating(rating),
            "recipe": {
                "id": recipe.id,
                "title": recipe.title,
                **recipe_service.rating_summary(db, recipe.id),
            },
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to rate recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to rate recipe")


@router.get("/{recipe_id}/ratings")
async def get_recipe_ratings(
    recipe_id: str,
    current_user: OptionalUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=100)),
    db: Session = Depends(get_db)
):
    """Ratings on a recipe, newest first, with a star distribution summary"""
    try:
        recipe = recipe_service.get_accessible_recipe(db, recipe_id, current_user, "This recipe is private")

        ratings = (
            db.query(RecipeRating)
            .options(joinedload(RecipeRating.user))
            .filter(RecipeRating.recipe_id == recipe.id)
            .order_by(RecipeRating.created_at.desc(), RecipeRating.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        distribution = {str(stars): 0 for stars in range(1, 6)}
        rows = (
            db.query(RecipeRating.rating, func.count(RecipeRating.id))
            .filter(RecipeRating.recipe_id == recipe.id)
            .group_by(RecipeRating.rating)
        )
        total = 0
        weighted = 0
        for stars, count in rows:
            distribution[str(stars)] = count
            total += count
            weighted += stars * count

        return with_timestamp({
            "ratings": [
                {**serialize_rating(rating), "user": author_summary(rating.user)} for rating in ratings
            ],
            "summary": {
                "averageRating": round_average(weighted / total) if total else None,
                "totalRatings": total,
                "distribution": distribution,
            },
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalRatings"),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get ratings for recipe {recipe_id}: {e}")
        raise server_error("Failed to get ratings")


@router.delete("/{recipe_id}/rating", status_code=status.HTTP_200_OK)
async def delete_rating(recipe_id: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Remove the requester's rating from a recipe"""
    try:
        rating = db.query(RecipeRating).filter(
            RecipeRating.recipe_id == recipe_id, RecipeRating.user_id == current_user.id
        ).first()
        if not rating:
            raise not_found("Rating not found", "You have not rated this recipe")

        db.delete(rating)
        db.commit()

        log_user_activity("rating_deleted", {"recipe_id": recipe_id})
        return with_timestamp({"message": "Rating deleted successfully"})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete rating on recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to delete rating")
