"""
RecipeShare Shopping List Endpoints
Per-user shopping list with recipe imports and bulk clearing
"""

from decimal import Decimal, ROUND_HALF_UP
from fastapi import APIRouter, Depends, status
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload
from typing import Optional
import logging

from core.database import get_db
from core.dependencies import CurrentUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, forbidden, not_found, server_error
from middleware.logging import log_user_activity
from models.shopping import ShoppingListItem
from schemas.shopping_schemas import AddRecipeToList, ShoppingItemCreate, ShoppingItemUpdate
from services.recipe_service import recipe_service
from utils.date_utils import to_iso, utcnow
from utils.responses import counted_pagination, to_number, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/shopping-list", tags=["Shopping List"])

CENTS = Decimal("0.01")
# Largest value a Numeric(10, 2) quantity column holds
MAX_QUANTITY = Decimal("99999999.99")

# Columns that cannot be cleared on update
REQUIRED_ITEM_FIELDS = ("ingredient_name", "is_completed")


def serialize_item(item: ShoppingListItem) -> dict:
    recipe = item.recipe
    return {
        "id": item.id,
        "ingredientName": item.ingredient_name,
        "quantity": to_number(item.quantity),
        "unit": item.unit,
        "notes": item.notes,
        "isCompleted": item.is_completed,
        "createdAt": to_iso(item.created_at),
        "updatedAt": to_iso(item.updated_at),
        "recipe": {"id": recipe.id, "title": recipe.title} if recipe else None,
    }


def scale_quantity(quantity: Optional[Decimal], multiplier: float) -> Optional[Decimal]:
    """Quantity times multiplier, rounded to cents; missing quantities stay missing"""
    if quantity is None:
        return None
    return (Decimal(quantity) * Decimal(str(multiplier))).quantize(CENTS, rounding=ROUND_HALF_UP)


def get_own_item(db: Session, item_id: str, user_id: str, action: str) -> ShoppingListItem:
    item = db.query(ShoppingListItem).filter(ShoppingListItem.id == item_id).first()
    if not item:
        raise not_found("Shopping list item not found")
    if item.user_id != user_id:
        raise forbidden(f"You can only {action} your own shopping list items")
    return item


@router.get("")
async def get_shopping_list(
    current_user: CurrentUser,
    pagination: Pagination = Depends(pagination_params(default_limit=50, max_limit=100)),
    completed: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    The requester's shopping list, pending items first then newest

    completed=true or completed=false narrows the listing; stats always
    cover the whole list.
    """
    try:
        query = db.query(ShoppingListItem).filter(ShoppingListItem.user_id == current_user.id)
        if completed == "true":
            query = query.filter(ShoppingListItem.is_completed.is_(True))
        elif completed == "false":
            query = query.filter(ShoppingListItem.is_completed.is_(False))

        total = query.count()
        items = (
            query.options(joinedload(ShoppingListItem.recipe))
            .order_by(ShoppingListItem.is_completed.asc(), ShoppingListItem.created_at.desc(), ShoppingListItem.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        total_items, completed_items, recipes_count = db.query(
            func.count(ShoppingListItem.id),
            func.coalesce(func.sum(case((ShoppingListItem.is_completed.is_(True), 1), else_=0)), 0),
            func.count(func.distinct(ShoppingListItem.recipe_id)),
        ).filter(ShoppingListItem.user_id == current_user.id).one()

        return with_timestamp({
            "items": [serialize_item(item) for item in items],
            "stats": {
                "totalItems": total_items,
                "completedItems": int(completed_items),
                "pendingItems": total_items - int(completed_items),
                "recipesCount": recipes_count,
                "completionRate": round(int(completed_items) / total_items * 100) if total_items else 0,
            },
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalItems"),
            "filters": {"completed": completed},
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get shopping list for user {current_user.id}: {e}")
        raise server_error("Failed to get shopping list")


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_item(item_data: ShoppingItemCreate, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Add a single item, optionally linked to a recipe the requester can see"""
    try:
        if item_data.recipe_id:
            recipe_service.get_accessible_recipe(
                db, item_data.recipe_id, current_user, "Cannot add items from a private recipe"
            )

        item = ShoppingListItem(
            user_id=current_user.id,
            recipe_id=item_data.recipe_id or None,
            ingredient_name=item_data.ingredient_name,
            quantity=item_data.quantity,
            unit=item_data.unit or "",
            notes=item_data.notes,
        )
        db.add(item)
        db.commit()
        db.refresh(item)

        log_user_activity("shopping_item_added", {"item_id": item.id})
        return with_timestamp({
            "message": "Item added to shopping list successfully",
            "item": serialize_item(item),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to add shopping list item for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to add item to shopping list")


@router.post("/recipes/{recipe_id}", status_code=status.HTTP_201_CREATED)
async def add_recipe_to_list(
    recipe_id: str,
    current_user: CurrentUser,
    body: Optional[AddRecipeToList] = None,
    db: Session = Depends(get_db)
):
    """Copy every ingredient of a recipe onto the list, scaled by servingMultiplier"""
    try:
        multiplier = body.serving_multiplier if body else 1.0
        recipe = recipe_service.get_accessible_recipe(
            db, recipe_id, current_user, "Cannot add ingredients from a private recipe"
        )
        if not recipe.ingredients:
            raise bad_request("No ingredients found", "This recipe has no ingredients to add")

        items = []
        for ingredient in recipe.ingredients:
            quantity = scale_quantity(ingredient.quantity, multiplier)
            if quantity is not None and quantity > MAX_QUANTITY:
                raise bad_request(
                    "Quantity too large",
                    f"Scaled quantity for \"{ingredient.name}\" exceeds {MAX_QUANTITY}; use a smaller servingMultiplier",
                )
            items.append(ShoppingListItem(
                user_id=current_user.id,
                recipe_id=recipe.id,
                ingredient_name=ingredient.name,
                quantity=quantity,
                unit=ingredient.unit,
                notes=ingredient.notes,
            ))
        db.add_all(items)
        db.commit()

        log_user_activity("recipe_added_to_shopping_list", {"recipe_id": recipe.id, "items": len(items)})
        return with_timestamp({
            "message": f'Added {len(items)} ingredients from "{recipe.title}" to shopping list',
            "recipe": {
                "id": recipe.id,
                "title": recipe.title,
                "originalServings": recipe.servings,
                "adjustedServings": to_number(round(recipe.servings * multiplier, 2)),
            },
            "addedItems": [serialize_item(item) for item in items],
            "servingMultiplier": multiplier,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to add recipe {recipe_id} to shopping list: {e}")
        db.rollback()
        raise server_error("Failed to add recipe to shopping list")


@router.put("/items/{item_id}")
async def update_item(
    item_id: str,
    item_data: ShoppingItemUpdate,
    current_user: CurrentUser,
    db: Session = Depends(get_db)
):
    """Partial update; only keys present in the body change"""
    try:
        item = get_own_item(db, item_id, current_user.id, "update")

        updates = item_data.model_dump(exclude_unset=True)
        if not updates:
            raise bad_request("No fields to update", "Provide at least one field to update")
        cleared = [field for field in REQUIRED_ITEM_FIELDS if field in updates and updates[field] is None]
        if cleared:
            raise bad_request("Validation failed", f"{cleared[0]} cannot be null")

        for field, value in updates.items():
            if field == "unit" and value is None:
                value = ""
            setattr(item, field, value)
        item.updated_at = utcnow()
        db.commit()
        db.refresh(item)

        return with_timestamp({
            "message": "Shopping list item updated successfully",
            "item": serialize_item(item),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to update shopping list item {item_id}: {e}")
        db.rollback()
        raise server_error("Failed to update shopping list item")


@router.delete("/items/{item_id}")
async def delete_item(item_id: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    try:
        item = get_own_item(db, item_id, current_user.id, "delete")
        deleted = {"id": item.id, "ingredientName": item.ingredient_name}
        db.delete(item)
        db.commit()

        return with_timestamp({
            "message": "Shopping list item deleted successfully",
            "deletedItem": deleted,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete shopping list item {item_id}: {e}")
        db.rollback()
        raise server_error("Failed to delete shopping list item")


@router.delete("/completed")
async def clear_completed(current_user: CurrentUser, db: Session = Depends(get_db)):
    """Remove every completed item from the requester's list"""
    try:
        deleted_count = db.query(ShoppingListItem).filter(
            ShoppingListItem.user_id == current_user.id, ShoppingListItem.is_completed.is_(True)
        ).delete(synchronize_session=False)
        db.commit()

        log_user_activity("shopping_list_cleared", {"scope": "completed", "count": deleted_count})
        return with_timestamp({
            "message": f"Cleared {deleted_count} completed items from shopping list",
            "deletedCount": deleted_count,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to clear completed items for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to clear completed items")


@router.delete("/clear")
async def clear_all(current_user: CurrentUser, db: Session = Depends(get_db)):
    """Remove every item from the requester's list"""
    try:
        deleted_count = db.query(ShoppingListItem).filter(
            ShoppingListItem.user_id == current_user.id
        ).delete(synchronize_session=False)
        db.commit()

        log_user_activity("shopping_list_cleared", {"scope": "all", "count": deleted_count})
        return with_timestamp({
            "message": f"Cleared all {deleted_count} items from shopping list",
            "deletedCount": deleted_count,
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to clear shopping list for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to clear shopping list")
