"""
RecipeShare User Endpoints
Profile updates and public profiles
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser
from core.exceptions import APIError, bad_request, server_error
from middleware.logging import log_user_activity
from schemas.user_schemas import ProfileUpdate
from services.user_service import user_service
from utils.date_utils import to_iso
from utils.responses import with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])

# Columns that cannot be cleared
REQUIRED_PROFILE_FIELDS = (
    "first_name",
    "is_public_profile",
    "allow_recipe_notifications",
    "allow_follower_notifications",
    "allow_comment_notifications",
)


@router.put("/profile")
async def update_profile(profile_data: ProfileUpdate, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Apply the fields present in the body to the current user's profile"""
    try:
        updates = profile_data.model_dump(exclude_unset=True)
        if not updates:
            raise bad_request("No fields to update", "Provide at least one profile field")

        required = [field for field in REQUIRED_PROFILE_FIELDS if field in updates and updates[field] is None]
        if required:
            raise bad_request("Validation failed", f"{required[0]} cannot be null")

        for field, value in updates.items():
            setattr(current_user, field, value)
        db.commit()
        db.refresh(current_user)

        log_user_activity("profile_updated", {"fields": sorted(updates)})
        return with_timestamp({
            "message": "Profile updated successfully",
            "user": user_service.full_user(current_user),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to update profile for user {current_user.id}: {e}")
        db.rollback()
        raise server_error("Failed to update profile")


@router.get("/{username}")
async def get_user_profile(username: str, current_user: OptionalUser, db: Session = Depends(get_db)):
    """Public profile with follow-graph and recipe counts"""
    try:
        user = user_service.get_active_by_username(db, username)
        user_service.ensure_profile_visible(user, current_user)

        profile = {
            "id": user.id,
            "username": user.username,
            "firstName": user.first_name,
            "lastName": user.last_name,
            "fullName": user.full_name,
            "bio": user.bio,
            "location": user.location,
            "website": user.website,
            "profileImageUrl": user.profile_image_url,
            "isPublicProfile": user.is_public_profile,
            "isVerified": user.is_verified,
            "createdAt": to_iso(user.created_at),
            "stats": {
                "recipeCount": user_service.public_recipe_count(db, user.id),
                "followersCount": user_service.followers_count(db, user.id),
                "followingCount": user_service.following_count(db, user.id),
                "totalLikes": user_service.public_likes_received(db, user.id),
            },
            "isFollowing": user_service.is_following(db, current_user, user.id),
            "isOwnProfile": current_user is not None and current_user.id == user.id,
        }
        return with_timestamp({"user": profile})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get profile for {username}: {e}")
        raise server_error("Failed to get user profile")
