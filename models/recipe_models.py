"""
RecipeShare Recipe Models
Database models for recipes, their ingredients and category links
"""

from sqlalchemy import (
    Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Boolean, JSON, Enum,
    CheckConstraint, Table
)
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum

from core.database import Base
from models.users import generate_uuid
from utils.date_utils import utcnow
from utils.responses import to_number


class RecipeDifficulty(str, PyEnum):
    """Recipe difficulty levels"""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"
    EXPERT = "Expert"


recipe_categories = Table(
    "recipe_categories",
    Base.metadata,
    Column("recipe_id", String(36), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class Recipe(Base):
    """Recipe model for storing recipe information"""
    __tablename__ = "recipes"
    __table_args__ = (
        CheckConstraint("prep_time_minutes > 0", name="prep_time_positive"),
        CheckConstraint("cook_time_minutes > 0", name="cook_time_positive"),
        CheckConstraint("servings > 0", name="servings_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prep_time_minutes = Column(Integer, nullable=False)  # in minutes
    cook_time_minutes = Column(Integer, nullable=False)  # in minutes
    servings = Column(Integer, nullable=False)
    difficulty = Column(
        Enum(
            RecipeDifficulty,
            name="difficulty_level",
            values_callable=lambda levels: [level.value for level in levels],
        ),
        nullable=False,
        default=RecipeDifficulty.EASY,
    )

    # Ordered list of instruction steps
    instructions = Column(JSON, nullable=False, default=list)

    image_url = Column(String(500))
    is_public = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    author = relationship("User", back_populates="recipes")
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RecipeIngredient.order_index",
    )
    categories = relationship("Category", secondary=recipe_categories)
    likes = relationship("RecipeLike", back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True)
    ratings = relationship("RecipeRating", back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True)
    comments = relationship("RecipeComment", back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def total_time_minutes(self) -> int:
        return (self.prep_time_minutes or 0) + (self.cook_time_minutes or 0)

    def is_visible_to(self, user_id) -> bool:
        """Non-owners may only see public recipes"""
        return bool(self.is_public) or (user_id is not None and self.author_id == user_id)

    def __repr__(self):
        return f"<Recipe(id={self.id}, title={self.title})>"


class RecipeIngredient(Base):
    """Recipe ingredient model for storing ingredient details"""
    __tablename__ = "recipe_ingredients"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=False)
    unit = Column(String(50), nullable=False)
    notes = Column(String(255))
    order_index = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    recipe = relationship("Recipe", back_populates="ingredients")

    def to_dict(self):
        """Convert ingredient to dictionary"""
        return {
            "id": self.id,
            "name": self.name,
            "quantity": to_number(self.quantity),
            "unit": self.unit,
            "notes": self.notes,
            "orderIndex": self.order_index,
        }
