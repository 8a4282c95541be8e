"""
RecipeShare Shopping List Models
"""

from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, Boolean
from sqlalchemy.orm import relationship

from core.database import Base
from models.users import generate_uuid
from utils.date_utils import utcnow


class ShoppingListItem(Base):
    """A single entry on a user's shopping list; survives deletion of its source recipe"""
    __tablename__ = "shopping_list_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipe_id = Column(String(36), ForeignKey("recipes.id", ondelete="SET NULL"), nullable=True, index=True)
    ingredient_name = Column(String(255), nullable=False)
    quantity = Column(Numeric(10, 2), nullable=True)
    unit = Column(String(50), nullable=False, default="")
    notes = Column(String(255))
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="shopping_list_items")
    recipe = relationship("Recipe")
