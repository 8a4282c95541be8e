"""
RecipeShare Search Endpoints
Global search across recipes, users and ingredients, plus filtered recipe search
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session
from typing import Annotated, List, Optional
import logging

from core.database import get_db
from core.dependencies import OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, server_error
from models.categories import Category
from models.recipe_models import Recipe, RecipeDifficulty, RecipeIngredient
from models.users import User, UserFollower
from services.recipe_service import contains, recipe_service
from services.user_service import user_service
from utils.date_utils import to_iso
from utils.responses import page_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/search", tags=["Search"])

MIN_QUERY_LENGTH = 2
SEARCH_TYPES = ("all", "recipes", "users", "ingredients")
RECIPE_SORTS = ("relevance", "newest", "oldest", "popular", "rating", "prep_time", "cook_time", "total_time")


def search_term(q: Optional[str] = Query(None, max_length=255)) -> str:
    """Trimmed query text; rejected before any other dependency runs"""
    term = (q or "").strip()
    if len(term) < MIN_QUERY_LENGTH:
        raise bad_request(f"Search query must be at least {MIN_QUERY_LENGTH} characters long")
    return term


def split_list(value: Optional[str]) -> List[str]:
    """Comma-separated query value to a list of non-empty entries"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def search_recipes_by_text(db: Session, term: str, current_user, pagination: Pagination) -> list:
    recipes = (
        recipe_service.with_relations(db.query(Recipe))
        .filter(
            recipe_service.visibility_filter(current_user),
            or_(contains(Recipe.title, term), contains(Recipe.description, term)),
        )
        .order_by(case((contains(Recipe.title, term), 0), else_=1), Recipe.created_at.desc(), Recipe.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    return recipe_service.serialize_summaries(db, recipes, current_user)


def search_users(db: Session, term: str, current_user, pagination: Pagination) -> list:
    recipe_count = (
        select(func.count(Recipe.id))
        .where(Recipe.author_id == User.id, Recipe.is_public.is_(True))
        .correlate(User)
        .scalar_subquery()
    )
    followers_count = (
        select(func.count())
        .select_from(UserFollower)
        .where(UserFollower.following_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    rows = (
        db.query(User, recipe_count, followers_count)
        .filter(
            User.is_active.is_(True),
            User.is_public_profile.is_(True),
            or_(contains(User.username, term), contains(User.first_name, term), contains(User.last_name, term)),
        )
        .order_by(case((contains(User.username, term), 0), else_=1), followers_count.desc(), User.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    followed = user_service.followed_ids(db, current_user, [user.id for user, _, _ in rows])

    users = []
    for user, recipes, followers in rows:
        entry = user_service.user_card(user)
        entry["createdAt"] = to_iso(user.created_at)
        entry["stats"] = {"recipeCount": recipes, "followersCount": followers}
        entry["isFollowing"] = user.id in followed
        users.append(entry)
    return users


def search_ingredients(db: Session, term: str, pagination: Pagination) -> list:
    recipe_count = func.count(RecipeIngredient.id)
    rows = (
        db.query(RecipeIngredient.name, recipe_count)
        .join(Recipe, Recipe.id == RecipeIngredient.recipe_id)
        .filter(Recipe.is_public.is_(True), contains(RecipeIngredient.name, term))
        .group_by(RecipeIngredient.name)
        .order_by(recipe_count.desc(), RecipeIngredient.name)
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    return [{"name": name, "recipeCount": count} for name, count in rows]


@router.get("")
async def global_search(
    term: Annotated[str, Depends(search_term)],
    current_user: OptionalUser,
    type: str = "all",
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=100)),
    db: Session = Depends(get_db)
):
    """
    Substring search over recipes, users and ingredient names

    type narrows the search to one kind; anything unknown searches all.
    """
    try:
        search_type = type if type in SEARCH_TYPES else "all"
        results = {}
        if search_type in ("all", "recipes"):
            results["recipes"] = search_recipes_by_text(db, term, current_user, pagination)
        if search_type in ("all", "users"):
            results["users"] = search_users(db, term, current_user, pagination)
        if search_type in ("all", "ingredients"):
            results["ingredients"] = search_ingredients(db, term, pagination)

        return with_timestamp({
            "query": term,
            "type": search_type,
            "results": results,
            "pagination": {"currentPage": pagination.page, "limit": pagination.limit},
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Global search for '{term}' failed: {e}")
        raise server_error("Search failed")


@router.get("/recipes")
async def search_recipes(
    current_user: OptionalUser,
    q: Optional[str] = Query(None, max_length=255),
    ingredients: Optional[str] = Query(None, max_length=500),
    categories: Optional[str] = Query(None, max_length=500),
    difficulty: Optional[RecipeDifficulty] = None,
    max_prep_time: Optional[int] = Query(None, alias="maxPrepTime", ge=1),
    max_cook_time: Optional[int] = Query(None, alias="maxCookTime", ge=1),
    min_rating: Optional[float] = Query(None, alias="minRating", ge=0, le=5),
    sort: str = "relevance",
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=100)),
    db: Session = Depends(get_db)
):
    """Recipe search with independent optional filters combined with AND"""
    try:
        term = (q or "").strip()
        ingredient_list = split_list(ingredients)
        category_list = split_list(categories)
        sort_name = sort if sort in RECIPE_SORTS else "relevance"

        ratings = recipe_service.rating_subquery()
        likes = recipe_service.likes_count_subquery()
        query = (
            db.query(Recipe)
            .outerjoin(ratings, ratings.c.recipe_id == Recipe.id)
            .outerjoin(likes, likes.c.recipe_id == Recipe.id)
            .filter(recipe_service.visibility_filter(current_user))
        )

        if term:
            query = query.filter(or_(contains(Recipe.title, term), contains(Recipe.description, term)))
        if ingredient_list:
            query = query.filter(Recipe.ingredients.any(
                or_(*[contains(RecipeIngredient.name, name) for name in ingredient_list])
            ))
        if category_list:
            query = query.filter(Recipe.categories.any(Category.name.in_(category_list)))
        if difficulty:
            query = query.filter(Recipe.difficulty == difficulty)
        if max_prep_time:
            query = query.filter(Recipe.prep_time_minutes <= max_prep_time)
        if max_cook_time:
            query = query.filter(Recipe.cook_time_minutes <= max_cook_time)
        if min_rating is not None:
            query = query.filter(ratings.c.average_rating >= min_rating)

        orderings = {
            "newest": [Recipe.created_at.desc()],
            "oldest": [Recipe.created_at.asc()],
            "popular": [func.coalesce(likes.c.likes_count, 0).desc(), Recipe.created_at.desc()],
            "rating": [ratings.c.average_rating.desc().nulls_last(), Recipe.created_at.desc()],
            "prep_time": [Recipe.prep_time_minutes.asc()],
            "cook_time": [Recipe.cook_time_minutes.asc()],
            "total_time": [(Recipe.prep_time_minutes + Recipe.cook_time_minutes).asc()],
        }
        if sort_name == "relevance":
            ordering = [Recipe.created_at.desc()]
            if term:
                ordering.insert(0, case((contains(Recipe.title, term), 0), else_=1))
        else:
            ordering = orderings[sort_name]

        recipes = (
            recipe_service.with_relations(query)
            .order_by(*ordering, Recipe.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        return with_timestamp({
            "recipes": recipe_service.serialize_summaries(db, recipes, current_user),
            "searchParams": {
                "query": term,
                "ingredients": ingredient_list,
                "categories": category_list,
                "difficulty": difficulty.value if difficulty else None,
                "maxPrepTime": max_prep_time,
                "maxCookTime": max_cook_time,
                "minRating": min_rating,
                "sort": sort_name,
            },
            "pagination": page_pagination(pagination.page, pagination.limit, len(recipes)),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Recipe search failed: {e}")
        raise server_error("Recipe search failed")
