"""
RecipeShare Shopping List Schemas
"""

from decimal import Decimal
from typing import Optional
from pydantic import Field

from schemas.base import CamelModel


class ShoppingItemCreate(CamelModel):
    """Schema for adding a single item"""
    ingredient_name: str = Field(..., min_length=1, max_length=255)
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    unit: str = Field(default="", max_length=50)
    notes: Optional[str] = Field(default=None, max_length=255)
    recipe_id: Optional[str] = Field(default=None, max_length=36)


class ShoppingItemUpdate(CamelModel):
    """Partial update; keys missing from the body are left untouched"""
    ingredient_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    unit: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=255)
    is_completed: Optional[bool] = None


class AddRecipeToList(CamelModel):
    """Copy a recipe's ingredients, scaled by servingMultiplier"""
    serving_multiplier: float = Field(default=1.0, ge=0.1, le=10)
