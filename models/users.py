"""
RecipeShare User Models
Database models for accounts, profiles and the follow graph
"""

from sqlalchemy import String, DateTime, Boolean, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from datetime import datetime
from typing import Optional
import uuid

from core.database import Base
from utils.date_utils import utcnow


def generate_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Main user account model"""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile information
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    profile_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Privacy and notification settings
    is_public_profile: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_recipe_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_follower_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_comment_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Account status
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    recipes = relationship("Recipe", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)
    shopping_list_items = relationship(
        "ShoppingListItem", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"

    @property
    def full_name(self) -> str:
        """First and last name joined, without dangling spaces"""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class UserFollower(Base):
    """Directed follow edge: follower_id follows following_id"""
    __tablename__ = "user_followers"
    __table_args__ = (
        CheckConstraint("follower_id <> following_id", name="no_self_follow"),
    )

    follower_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    following_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    follower = relationship("User", foreign_keys=[follower_id])
    following = relationship("User", foreign_keys=[following_id])

    def __repr__(self):
        return f"<UserFollower(follower={self.follower_id}, following={self.following_id})>"
