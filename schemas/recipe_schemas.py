"""
RecipeShare Recipe Schemas
Pydantic models for recipe create and update requests
"""

from decimal import Decimal
from typing import List, Optional
from pydantic import Field, field_validator

from models.recipe_models import RecipeDifficulty
from schemas.base import CamelModel, ImageUrl


class IngredientIn(CamelModel):
    """Single ingredient line; order follows its position in the list"""
    name: str = Field(..., min_length=1, max_length=255)
    quantity: Decimal = Field(..., ge=Decimal("0.01"), max_digits=10, decimal_places=2)
    unit: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=255)


class RecipeCreate(CamelModel):
    """Schema for creating a recipe"""
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=10, max_length=2000)
    prep_time_minutes: int = Field(..., ge=1, le=1440)
    cook_time_minutes: int = Field(..., ge=1, le=1440)
    servings: int = Field(..., ge=1, le=100)
    difficulty: RecipeDifficulty
    image_url: Optional[ImageUrl] = None
    instructions: List[str] = Field(..., min_length=1)
    ingredients: List[IngredientIn] = Field(..., min_length=1)
    category_ids: List[int] = Field(default_factory=list)
    is_public: bool = True

    @field_validator("instructions")
    @classmethod
    def check_instructions(cls, v):
        return validate_instruction_steps(v)

    @field_validator("category_ids")
    @classmethod
    def check_category_ids(cls, v):
        return validate_category_ids(v)


class RecipeUpdate(CamelModel):
    """
    Schema for updating a recipe

    Every field is optional. A provided ingredients or categoryIds list
    replaces the stored set entirely.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    prep_time_minutes: Optional[int] = Field(default=None, ge=1, le=1440)
    cook_time_minutes: Optional[int] = Field(default=None, ge=1, le=1440)
    servings: Optional[int] = Field(default=None, ge=1, le=100)
    difficulty: Optional[RecipeDifficulty] = None
    image_url: Optional[ImageUrl] = None
    instructions: Optional[List[str]] = Field(default=None, min_length=1)
    ingredients: Optional[List[IngredientIn]] = Field(default=None, min_length=1)
    category_ids: Optional[List[int]] = None
    is_public: Optional[bool] = None

    @field_validator("instructions")
    @classmethod
    def check_instructions(cls, v):
        if v is None:
            return v
        return validate_instruction_steps(v)

    @field_validator("category_ids")
    @classmethod
    def check_category_ids(cls, v):
        if v is None:
            return v
        return validate_category_ids(v)


def validate_instruction_steps(steps: List[str]) -> List[str]:
    for step in steps:
        if not step or not step.strip():
            raise ValueError("Instruction steps cannot be empty")
        if len(step) > 1000:
            raise ValueError("Instruction steps cannot exceed 1000 characters")
    return [step.strip() for step in steps]


def validate_category_ids(category_ids: List[int]) -> List[int]:
    if any(category_id < 1 for category_id in category_ids):
        raise ValueError("Category ids must be positive integers")
    # Duplicates collapse, first occurrence wins
    return list(dict.fromkeys(category_ids))
