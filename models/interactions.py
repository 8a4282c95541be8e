"""
RecipeShare Interaction Models
Likes, ratings and threaded comments on recipes
"""

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Boolean, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship

from core.database import Base
from models.users import generate_uuid
from utils.date_utils import utcnow


class RecipeLike(Base):
    """Presence of a row means the user likes the recipe"""
    __tablename__ = "recipe_likes"

    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    recipe = relationship("Recipe", back_populates="likes")
    user = relationship("User")


class RecipeRating(Base):
    """One 1-5 star rating per user and recipe"""
    __tablename__ = "recipe_ratings"
    __table_args__ = (
        UniqueConstraint("recipe_id", "user_id", name="uq_recipe_ratings_recipe_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    review = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    recipe = relationship("Recipe", back_populates="ratings")
    user = relationship("User")


class RecipeComment(Base):
    """Comment on a recipe, optionally replying to another comment"""
    __tablename__ = "recipe_comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(
        String(36), ForeignKey("recipe_comments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    comment = Column(Text, nullable=False)
    is_edited = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    recipe = relationship("Recipe", back_populates="comments")
    user = relationship("User")
    parent = relationship("RecipeComment", remote_side=[id], back_populates="replies")
    replies = relationship(
        "RecipeComment",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RecipeComment.created_at",
    )
