"""
RecipeShare Interaction Schemas
Ratings and comments
"""

from typing import Optional
from pydantic import Field

from schemas.base import CamelModel


class RatingCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=1000)


class CommentCreate(CamelModel):
    comment: str = Field(..., min_length=1, max_length=1000)
    parent_comment_id: Optional[str] = Field(default=None, max_length=36)


class CommentUpdate(CamelModel):
    comment: str = Field(..., min_length=1, max_length=1000)
