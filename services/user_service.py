"""
RecipeShare User Service
Profile lookups, follow-graph counts and user card shaping
"""

from typing import Iterable, Optional, Set
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.exceptions import forbidden, not_found
from models.interactions import RecipeLike
from models.recipe_models import Recipe
from models.users import User, UserFollower
from utils.date_utils import to_iso


class UserService:
    def get_active_by_username(self, db: Session, username: str) -> User:
        """Case-insensitive lookup of an active account, 404 otherwise"""
        user = db.query(User).filter(User.username == username.lower(), User.is_active.is_(True)).first()
        if not user:
            raise not_found("User not found")
        return user

    def ensure_profile_visible(self, user: User, requester: Optional[User]) -> None:
        """Private profiles are only visible to their owner"""
        if not user.is_public_profile and (requester is None or requester.id != user.id):
            raise forbidden("Profile is private", error="Profile is private")

    def followers_count(self, db: Session, user_id: str) -> int:
        return db.query(func.count()).select_from(UserFollower).filter(
            UserFollower.following_id == user_id
        ).scalar()

    def following_count(self, db: Session, user_id: str) -> int:
        return db.query(func.count()).select_from(UserFollower).filter(
            UserFollower.follower_id == user_id
        ).scalar()

    def public_recipe_count(self, db: Session, user_id: str) -> int:
        return db.query(func.count(Recipe.id)).filter(
            Recipe.author_id == user_id, Recipe.is_public.is_(True)
        ).scalar()

    def public_likes_received(self, db: Session, user_id: str) -> int:
        return db.query(func.count()).select_from(RecipeLike).join(
            Recipe, Recipe.id == RecipeLike.recipe_id
        ).filter(Recipe.author_id == user_id, Recipe.is_public.is_(True)).scalar()

    def is_following(self, db: Session, follower: Optional[User], following_id: str) -> bool:
        if follower is None:
            return False
        return db.query(UserFollower).filter(
            UserFollower.follower_id == follower.id, UserFollower.following_id == following_id
        ).first() is not None

    def followed_ids(self, db: Session, follower: Optional[User], candidate_ids: Iterable[str]) -> Set[str]:
        """Which of candidate_ids the follower follows"""
        ids = list(candidate_ids)
        if follower is None or not ids:
            return set()
        rows = db.query(UserFollower.following_id).filter(
            UserFollower.follower_id == follower.id, UserFollower.following_id.in_(ids)
        )
        return {following_id for (following_id,) in rows}

    def public_user(self, user: User) -> dict:
        """User fields returned on register and login"""
        return {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "fullName": user.full_name,
            "bio": user.bio,
            "profileImageUrl": user.profile_image_url,
            "isPublicProfile": user.is_public_profile,
            "isVerified": user.is_verified,
            "createdAt": to_iso(user.created_at),
        }

    def full_user(self, user: User) -> dict:
        """Everything the owner may see about their own account"""
        data = self.public_user(user)
        data.update({
            "location": user.location,
            "website": user.website,
            "allowRecipeNotifications": user.allow_recipe_notifications,
            "allowFollowerNotifications": user.allow_follower_notifications,
            "allowCommentNotifications": user.allow_comment_notifications,
            "updatedAt": to_iso(user.updated_at),
        })
        return data

    def user_card(self, user: User) -> dict:
        """Identity block used by follow listings, suggestions and search"""
        return {
            "id": user.id,
            "username": user.username,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "fullName": user.full_name,
            "profileImageUrl": user.profile_image_url,
            "bio": user.bio,
            "isVerified": user.is_verified,
        }


# Global user service instance
user_service = UserService()
