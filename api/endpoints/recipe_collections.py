"""
RecipeShare Collection Endpoints
Liked recipes and the requester's rating and comment history
"""

from collections import defaultdict
from fastapi import APIRouter, Depends
from sqlalchemy import and_, func, literal, select, union_all
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.dependencies import CurrentUser, Pagination, pagination_params
from core.exceptions import APIError, server_error
from models.interactions import RecipeComment, RecipeLike, RecipeRating
from models.recipe_models import Recipe
from services.recipe_service import recipe_service
from utils.date_utils import to_iso
from utils.responses import counted_pagination, page_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/collections", tags=["Collections"])

FAVORITE_SORTS = ("liked_at", "recipe_created", "title", "rating")
HISTORY_TYPES = ("all", "rated", "commented")


@router.get("/favorites")
async def get_favorite_recipes(
    current_user: CurrentUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=50)),
    sort: str = "liked_at",
    db: Session = Depends(get_db)
):
    """Recipes the requester liked that are still visible to them"""
    try:
        sort_name = sort if sort in FAVORITE_SORTS else "liked_at"
        ratings = recipe_service.rating_subquery()

        query = (
            db.query(Recipe, RecipeLike.created_at)
            .join(RecipeLike, and_(RecipeLike.recipe_id == Recipe.id, RecipeLike.user_id == current_user.id))
            .outerjoin(ratings, ratings.c.recipe_id == Recipe.id)
            .filter(recipe_service.visibility_filter(current_user))
        )
        total = query.count()

        orderings = {
            "liked_at": RecipeLike.created_at.desc(),
            "recipe_created": Recipe.created_at.desc(),
            "title": Recipe.title.asc(),
            "rating": ratings.c.average_rating.desc().nulls_last(),
        }
        rows = (
            recipe_service.with_relations(query)
            .order_by(orderings[sort_name], RecipeLike.created_at.desc(), Recipe.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        favorites = recipe_service.serialize_summaries(db, [recipe for recipe, _ in rows], current_user)
        for favorite, (_, liked_at) in zip(favorites, rows):
            favorite["likedAt"] = to_iso(liked_at)
            favorite["isLikedByUser"] = True

        return with_timestamp({
            "favoriteRecipes": favorites,
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalFavorites"),
            "sort": sort_name,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get favorites for user {current_user.id}: {e}")
        raise server_error("Failed to get favorite recipes")


def interaction_events(user_id: str, filter_type: str):
    """One row per (recipe, interaction kind) with the latest date of that kind"""
    rated = select(
        RecipeRating.recipe_id.label("recipe_id"),
        literal("rated").label("interaction_type"),
        RecipeRating.updated_at.label("interaction_date"),
    ).where(RecipeRating.user_id == user_id)
    commented = (
        select(
            RecipeComment.recipe_id.label("recipe_id"),
            literal("commented").label("interaction_type"),
            func.max(RecipeComment.created_at).label("interaction_date"),
        )
        .where(RecipeComment.user_id == user_id)
        .group_by(RecipeComment.recipe_id)
    )

    if filter_type == "rated":
        return rated.subquery()
    if filter_type == "commented":
        return commented.subquery()
    return union_all(rated, commented).subquery()


@router.get("/history")
async def get_recipe_history(
    current_user: CurrentUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=50)),
    type: str = "all",
    db: Session = Depends(get_db)
):
    """
    Recipes the requester rated or commented on, latest interaction first

    Each recipe appears once and carries every kind of interaction it had.
    """
    try:
        filter_type = type if type in HISTORY_TYPES else "all"
        events = interaction_events(current_user.id, filter_type)

        latest = func.max(events.c.interaction_date).label("interaction_date")
        page = db.execute(
            select(events.c.recipe_id, latest)
            .join(Recipe, Recipe.id == events.c.recipe_id)
            .where(recipe_service.visibility_filter(current_user))
            .group_by(events.c.recipe_id)
            .order_by(latest.desc(), events.c.recipe_id)
            .offset(pagination.offset)
            .limit(pagination.limit)
        ).all()
        recipe_ids = [row.recipe_id for row in page]

        kinds = defaultdict(list)
        if recipe_ids:
            rows = db.execute(
                select(events.c.recipe_id, events.c.interaction_type, events.c.interaction_date)
                .where(events.c.recipe_id.in_(recipe_ids))
                .order_by(events.c.interaction_date.desc())
            ).all()
            for row in rows:
                kinds[row.recipe_id].append(row.interaction_type)

        user_ratings = {}
        if recipe_ids:
            user_ratings = dict(
                db.query(RecipeRating.recipe_id, RecipeRating.rating).filter(
                    RecipeRating.user_id == current_user.id, RecipeRating.recipe_id.in_(recipe_ids)
                )
            )

        recipes = {
            recipe.id: recipe
            for recipe in recipe_service.with_relations(db.query(Recipe)).filter(Recipe.id.in_(recipe_ids))
        } if recipe_ids else {}
        ordered = [recipes[recipe_id] for recipe_id in recipe_ids if recipe_id in recipes]
        summaries = recipe_service.serialize_summaries(db, ordered, current_user)

        history = []
        for summary, row in zip(summaries, page):
            types = kinds[row.recipe_id]
            summary["interactionType"] = types[0] if types else filter_type
            summary["interactionTypes"] = sorted(set(types))
            summary["interactionDate"] = to_iso(row.interaction_date)
            summary["userRating"] = user_ratings.get(row.recipe_id)
            history.append(summary)

        return with_timestamp({
            "recipeHistory": history,
            "pagination": page_pagination(pagination.page, pagination.limit, len(history)),
            "filterType": filter_type,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get recipe history for user {current_user.id}: {e}")
        raise server_error("Failed to get recipe history")
