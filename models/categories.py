"""
RecipeShare Category Models
Recipe taxonomy tags and the default seed set
"""

from sqlalchemy import Integer, String, DateTime, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from core.database import Base
from utils.date_utils import utcnow


class Category(Base):
    """Named category a recipe can be filed under"""
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(7), default="#2196F3", nullable=False)
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "color": self.color, "icon": self.icon}


DEFAULT_CATEGORIES = [
    {"name": "Appetizers", "description": "Small dishes served before the main course", "color": "#FF9800", "icon": "🥗"},
    {"name": "Main Course", "description": "Primary dishes and entrees", "color": "#4CAF50", "icon": "🍽️"},
    {"name": "Desserts", "description": "Sweet treats and desserts", "color": "#E91E63", "icon": "🍰"},
    {"name": "Beverages", "description": "Drinks and cocktails", "color": "#2196F3", "icon": "🥤"},
    {"name": "Breakfast", "description": "Morning meals and breakfast items", "color": "#FF5722", "icon": "🍳"},
    {"name": "Lunch", "description": "Midday meals and light dishes", "color": "#795548", "icon": "🥪"},
    {"name": "Dinner", "description": "Evening meals and hearty dishes", "color": "#3F51B5", "icon": "🍖"},
    {"name": "Snacks", "description": "Quick bites and light snacks", "color": "#FFEB3B", "icon": "🍿"},
    {"name": "Vegetarian", "description": "Plant-based recipes without meat", "color": "#8BC34A", "icon": "🥕"},
    {"name": "Vegan", "description": "Plant-based recipes without any animal products", "color": "#4CAF50", "icon": "🌱"},
    {"name": "Gluten-Free", "description": "Recipes without gluten", "color": "#9C27B0", "icon": "🌾"},
    {"name": "Low-Carb", "description": "Low carbohydrate recipes", "color": "#607D8B", "icon": "🥩"},
    {"name": "Italian", "description": "Traditional Italian cuisine", "color": "#FF5722", "icon": "🍝"},
    {"name": "Mexican", "description": "Traditional Mexican cuisine", "color": "#FF9800", "icon": "🌮"},
    {"name": "Asian", "description": "Asian cuisine and flavors", "color": "#F44336", "icon": "🥢"},
    {"name": "Indian", "description": "Traditional Indian cuisine", "color": "#FF5722", "icon": "🍛"},
    {"name": "Mediterranean", "description": "Mediterranean diet and cuisine", "color": "#009688", "icon": "🫒"},
    {"name": "American", "description": "Traditional American cuisine", "color": "#2196F3", "icon": "🍔"},
    {"name": "French", "description": "Traditional French cuisine", "color": "#9C27B0", "icon": "🥐"},
    {"name": "Thai", "description": "Traditional Thai cuisine", "color": "#4CAF50", "icon": "🌶️"},
]
