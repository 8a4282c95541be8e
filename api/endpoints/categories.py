"""
RecipeShare Category Endpoints
Read-only access to the recipe taxonomy
"""

from fastapi import APIRouter, Depends
from sqlalchemy import and_, func
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.exceptions import APIError, not_found, server_error
from models.categories import Category
from models.recipe_models import Recipe, recipe_categories
from utils.date_utils import to_iso
from utils.responses import with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["Categories"])


def categories_with_counts(db: Session):
    """Categories paired with the number of public recipes filed under each"""
    recipe_count = func.count(Recipe.id)
    return (
        db.query(Category, recipe_count)
        .outerjoin(recipe_categories, recipe_categories.c.category_id == Category.id)
        .outerjoin(Recipe, and_(Recipe.id == recipe_categories.c.recipe_id, Recipe.is_public.is_(True)))
        .group_by(Category.id)
    )


def serialize_category(category: Category, recipe_count: int) -> dict:
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "color": category.color,
        "icon": category.icon,
        "isActive": category.is_active,
        "recipeCount": recipe_count,
        "createdAt": to_iso(category.created_at),
    }


@router.get("")
async def get_categories(active: str = "true", db: Session = Depends(get_db)):
    """All categories ordered by name; active=true (the default) hides inactive ones"""
    try:
        query = categories_with_counts(db)
        if active == "true":
            query = query.filter(Category.is_active.is_(True))
        categories = [serialize_category(c, count) for c, count in query.order_by(Category.name)]

        return with_timestamp({"categories": categories, "totalCategories": len(categories)})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get categories: {e}")
        raise server_error("Failed to get categories")


@router.get("/{category_id}")
async def get_category(category_id: int, db: Session = Depends(get_db)):
    try:
        row = categories_with_counts(db).filter(Category.id == category_id).first()
        if not row:
            raise not_found("Category not found")

        return with_timestamp({"category": serialize_category(*row)})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get category {category_id}: {e}")
        raise server_error("Failed to get category")
