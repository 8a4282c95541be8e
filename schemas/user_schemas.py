"""
RecipeShare User Schemas
"""

from typing import Optional
from pydantic import Field

from schemas.base import CamelModel, ImageUrl, WebsiteUrl


class ProfileUpdate(CamelModel):
    """Partial profile update; only keys present in the body are applied"""
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)
    website: Optional[WebsiteUrl] = None
    profile_image_url: Optional[ImageUrl] = None
    is_public_profile: Optional[bool] = None
    allow_recipe_notifications: Optional[bool] = None
    allow_follower_notifications: Optional[bool] = None
    allow_comment_notifications: Optional[bool] = None