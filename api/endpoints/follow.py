"""
RecipeShare Follow Endpoints
Follow toggling, follower listings and follow suggestions
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, server_error
from middleware.logging import log_business_event
from models.recipe_models import Recipe
from models.users import User, UserFollower
from services.user_service import user_service
from utils.date_utils import to_iso
from utils.responses import counted_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Follow"])

follow_pagination = pagination_params(default_limit=20, max_limit=50)


@router.post("/users/{username}/follow")
async def toggle_follow(username: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    """Follow the user, or unfollow when already following"""
    try:
        target = user_service.get_active_by_username(db, username)
        if target.id == current_user.id:
            raise bad_request("Invalid operation", "You cannot follow yourself")

        edge = db.query(UserFollower).filter(
            UserFollower.follower_id == current_user.id, UserFollower.following_id == target.id
        ).first()
        if edge:
            db.delete(edge)
            is_following = False
            message = f"You are no longer following {target.username}"
        else:
            db.add(UserFollower(follower_id=current_user.id, following_id=target.id))
            is_following = True
            message = f"You are now following {target.username}"
        db.commit()

        log_business_event(
            "user_followed" if is_following else "user_unfollowed",
            {"follower_id": current_user.id, "following_id": target.id},
        )
        return with_timestamp({
            "message": message,
            "user": {"id": target.id, "username": target.username, "fullName": target.full_name},
            "isFollowing": is_following,
            "stats": {
                "followersCount": user_service.followers_count(db, target.id),
                "followingCount": user_service.following_count(db, target.id),
            },
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to toggle follow for {username}: {e}")
        db.rollback()
        raise server_error("Failed to toggle follow")


def list_follow_edges(db: Session, requester, target: User, pagination: Pagination, followers: bool) -> dict:
    """
    One page of a user's follow edges, newest first

    Args:
        followers: True lists who follows target, False lists whom target follows
    """
    if followers:
        other_id, owner_id = UserFollower.follower_id, UserFollower.following_id
        flag, key, total_key = "isFollowingBack", "followers", "totalFollowers"
    else:
        other_id, owner_id = UserFollower.following_id, UserFollower.follower_id
        flag, key, total_key = "isFollowing", "following", "totalFollowing"

    edges = (
        db.query(User, UserFollower.created_at)
        .join(UserFollower, other_id == User.id)
        .filter(owner_id == target.id, User.is_active.is_(True))
    )
    total = edges.count()
    rows = (
        edges.order_by(UserFollower.created_at.desc(), User.id)
        .offset(pagination.offset)
        .limit(pagination.limit)
        .all()
    )
    followed = user_service.followed_ids(db, requester, [user.id for user, _ in rows])

    entries = []
    for user, followed_at in rows:
        entry = user_service.user_card(user)
        entry["followedAt"] = to_iso(followed_at)
        entry[flag] = user.id in followed
        entries.append(entry)

    return with_timestamp({
        "user": {"id": target.id, "username": target.username, "fullName": target.full_name},
        key: entries,
        "pagination": counted_pagination(pagination.page, pagination.limit, total, total_key),
    })


@router.get("/users/{username}/followers")
async def get_followers(
    username: str,
    current_user: OptionalUser,
    pagination: Pagination = Depends(follow_pagination),
    db: Session = Depends(get_db)
):
    """Users following username"""
    try:
        target = user_service.get_active_by_username(db, username)
        user_service.ensure_profile_visible(target, current_user)
        return list_follow_edges(db, current_user, target, pagination, followers=True)

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get followers for {username}: {e}")
        raise server_error("Failed to get followers")


@router.get("/users/{username}/following")
async def get_following(
    username: str,
    current_user: OptionalUser,
    pagination: Pagination = Depends(follow_pagination),
    db: Session = Depends(get_db)
):
    """Users followed by username"""
    try:
        target = user_service.get_active_by_username(db, username)
        user_service.ensure_profile_visible(target, current_user)
        return list_follow_edges(db, current_user, target, pagination, followers=False)

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get following for {username}: {e}")
        raise server_error("Failed to get following")


@router.get("/suggestions")
async def get_follow_suggestions(
    current_user: CurrentUser,
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db)
):
    """
    Public profiles the requester does not follow yet

    Ranked by public recipe count, then by follower count.
    """
    try:
        recipe_count = (
            select(func.count(Recipe.id))
            .where(Recipe.author_id == User.id, Recipe.is_public.is_(True))
            .correlate(User)
            .scalar_subquery()
        )
        followers_count = (
            select(func.count())
            .select_from(UserFollower)
            .where(UserFollower.following_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        already_followed = select(UserFollower.following_id).where(UserFollower.follower_id == current_user.id)

        rows = (
            db.query(User, recipe_count.label("recipe_count"), followers_count.label("followers_count"))
            .filter(
                User.id != current_user.id,
                User.is_active.is_(True),
                User.is_public_profile.is_(True),
                User.id.not_in(already_followed),
            )
            .order_by(recipe_count.desc(), followers_count.desc(), User.created_at.desc())
            .limit(limit)
            .all()
        )

        suggestions = []
        for user, recipes, followers in rows:
            entry = user_service.user_card(user)
            entry["stats"] = {"recipeCount": recipes, "followersCount": followers}
            suggestions.append(entry)

        return with_timestamp({"suggestions": suggestions, "totalSuggestions": len(suggestions)})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get follow suggestions for user {current_user.id}: {e}")
        raise server_error("Failed to get follow suggestions")
