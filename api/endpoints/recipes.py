"""
RecipeShare Recipe Management Endpoints
Recipe CRUD operations with filtering, sorting and pagination
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import case
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, forbidden, server_error
from middleware.logging import log_business_event
from models.categories import Category
from models.recipe_models import Recipe, RecipeDifficulty, RecipeIngredient
from schemas.recipe_schemas import IngredientIn, RecipeCreate, RecipeUpdate
from services.recipe_service import contains, recipe_service
from utils.date_utils import utcnow
from utils.responses import counted_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["Recipes"])

# Sortable columns; anything else falls back to created_at
SORT_COLUMNS = {
    "created_at": Recipe.created_at,
    "title": Recipe.title,
    "prep_time_minutes": Recipe.prep_time_minutes,
    "cook_time_minutes": Recipe.cook_time_minutes,
    "difficulty": case(
        {level.value: rank for rank, level in enumerate(RecipeDifficulty)},
        value=Recipe.difficulty,
        else_=len(RecipeDifficulty),
    ),
}

# Columns that cannot be cleared on update
REQUIRED_RECIPE_FIELDS = (
    "title", "description", "prep_time_minutes", "cook_time_minutes",
    "servings", "difficulty", "instructions", "ingredients", "category_ids", "is_public",
)


def build_ingredients(ingredients: List[IngredientIn]) -> List[RecipeIngredient]:
    """Ingredient rows numbered 1..n in list order"""
    return [
        RecipeIngredient(
            name=ingredient.name,
            quantity=ingredient.quantity,
            unit=ingredient.unit,
            notes=ingredient.notes,
            order_index=index,
        )
        for index, ingredient in enumerate(ingredients, start=1)
    ]


def load_categories(db: Session, category_ids: List[int]) -> List[Category]:
    """Existing categories among category_ids; unknown ids are skipped"""
    if not category_ids:
        return []
    return db.query(Category).filter(Category.id.in_(category_ids)).all()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(recipe_data: RecipeCreate, current_user: CurrentUser, db: Session = Depends(get_db)):
    """
    Create a recipe with its ingredients and categories

    The recipe row, ingredient rows and category links are written in one
    transaction.
    """
    try:
        recipe = Recipe(
            title=recipe_data.title,
            description=recipe_data.description,
            author_id=current_user.id,
            prep_time_minutes=recipe_data.prep_time_minutes,
            cook_time_minutes=recipe_data.cook_time_minutes,
            servings=recipe_data.servings,
            difficulty=recipe_data.difficulty,
            image_url=recipe_data.image_url,
            instructions=recipe_data.instructions,
            is_public=recipe_data.is_public,
        )
        recipe.ingredients = build_ingredients(recipe_data.ingredients)
        recipe.categories = load_categories(db, recipe_data.category_ids)

        db.add(recipe)
        db.commit()

        log_business_event("recipe_created", {"recipe_id": recipe.id, "author_id": current_user.id})
        return with_timestamp({
            "message": "Recipe created successfully",
            "recipe": recipe_service.serialize_detail(db, recipe, current_user),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to create recipe for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to create recipe")


@router.get("")
async def get_recipes(
    current_user: OptionalUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=100)),
    search: Optional[str] = Query(None, max_length=255),
    category: Optional[str] = Query(None, max_length=100),
    difficulty: Optional[RecipeDifficulty] = None,
    author_id: Optional[str] = Query(None, alias="authorId"),
    featured: Optional[str] = None,
    sort: str = "created_at",
    order: str = "desc",
    db: Session = Depends(get_db)
):
    """
    List recipes visible to the requester

    Filters combine with AND. Private recipes only appear for their author.
    """
    try:
        query = db.query(Recipe).filter(recipe_service.visibility_filter(current_user))

        if search:
            query = query.filter(contains(Recipe.title, search) | contains(Recipe.description, search))
        if category:
            query = query.filter(Recipe.categories.any(contains(Category.name, category)))
        if difficulty:
            query = query.filter(Recipe.difficulty == difficulty)
        if author_id:
            query = query.filter(Recipe.author_id == author_id)
        if featured == "true":
            query = query.filter(Recipe.is_featured.is_(True))

        total = query.count()

        sort_column = SORT_COLUMNS.get(sort, Recipe.created_at)
        sort_name = sort if sort in SORT_COLUMNS else "created_at"
        sort_order = "asc" if order.lower() == "asc" else "desc"
        ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()

        recipes = (
            recipe_service.with_relations(query)
            .order_by(ordering, Recipe.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        return with_timestamp({
            "recipes": recipe_service.serialize_summaries(db, recipes, current_user),
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalRecipes"),
            "filters": {
                "search": search or "",
                "category": category or "",
                "difficulty": difficulty.value if difficulty else "",
                "authorId": author_id or "",
                "featured": featured or "",
                "sort": sort_name,
                "order": sort_order,
            },
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get recipes: {e}")
        raise server_error("Failed to get recipes")


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: str, current_user: OptionalUser, db: Session = Depends(get_db)):
    """Single recipe with ingredients, categories and live stats"""
    try:
        recipe = recipe_service.get_accessible_recipe(db, recipe_id, current_user, "This recipe is private")
        return with_timestamp({"recipe": recipe_service.serialize_detail(db, recipe, current_user)})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get recipe {recipe_id}: {e}")
        raise server_error("Failed to get recipe")


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: str,
    recipe_data: RecipeUpdate,
    current_user: CurrentUser,
    db: Session = Depends(get_db)
):
    """
    Update a recipe owned by the requester

    Provided ingredients and categoryIds replace the stored sets; fields
    left out of the body are unchanged.
    """
    try:
        recipe = recipe_service.get_recipe_or_404(db, recipe_id)
        if recipe.author_id != current_user.id:
            raise forbidden("You can only update your own recipes")

        updates = recipe_data.model_dump(exclude_unset=True)
        cleared = [field for field in REQUIRED_RECIPE_FIELDS if field in updates and updates[field] is None]
        if cleared:
            raise bad_request("Validation failed", f"{cleared[0]} cannot be null")

        for field in ("title", "description", "prep_time_minutes", "cook_time_minutes",
                      "servings", "difficulty", "image_url", "instructions", "is_public"):
            if field in updates:
                setattr(recipe, field, getattr(recipe_data, field))

        if "ingredients" in updates:
            recipe.ingredients = build_ingredients(recipe_data.ingredients)
        if "category_ids" in updates:
            recipe.categories = load_categories(db, recipe_data.category_ids)

        recipe.updated_at = utcnow()
        db.commit()
        db.refresh(recipe)

        log_business_event("recipe_updated", {"recipe_id": recipe.id, "fields": sorted(updates)})
        return with_timestamp({
            "message": "Recipe updated successfully",
            "recipe": recipe_service.serialize_detail(db, recipe, current_user),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to update recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to update recipe")


@router.delete("/{recipe_id}")
async def delete_recipe(recipe_id: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Delete a recipe owned by the requester along with everything attached to it"""
    try:
        recipe = recipe_service.get_recipe_or_404(db, recipe_id)
        if recipe.author_id != current_user.id:
            raise forbidden("You can only delete your own recipes")

        deleted = {"id": recipe.id, "title": recipe.title}
        db.delete(recipe)
        db.commit()

        log_business_event("recipe_deleted", {"recipe_id": deleted["id"]})
        return with_timestamp({"message": "Recipe deleted successfully", "deletedRecipe": deleted})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to delete recipe")
