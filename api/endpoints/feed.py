"""
RecipeShare Feed Endpoints
Personal feed, trending recipes and account activity
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func, literal, null, or_, select, union_all
from sqlalchemy.orm import Session
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, server_error
from models.interactions import RecipeComment, RecipeLike
from models.recipe_models import Recipe
from models.users import User, UserFollower
from services.recipe_service import author_summary, recipe_service
from utils.date_utils import days_ago, to_iso
from utils.responses import counted_pagination, page_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Feed"])

TRENDING_WINDOW_DAYS = 7


@router.get("/feed")
async def get_personal_feed(
    current_user: CurrentUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=50)),
    db: Session = Depends(get_db)
):
    """Public recipes by the requester and everyone they follow, newest first"""
    try:
        followed = select(UserFollower.following_id).where(UserFollower.follower_id == current_user.id)
        feed_filter = (
            Recipe.is_public.is_(True),
            or_(Recipe.author_id == current_user.id, Recipe.author_id.in_(followed)),
        )
        total = db.query(func.count(Recipe.id)).filter(*feed_filter).scalar()
        recipes = (
            recipe_service.with_relations(db.query(Recipe))
            .filter(*feed_filter)
            .order_by(Recipe.created_at.desc(), Recipe.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        return with_timestamp({
            "feed": recipe_service.serialize_summaries(db, recipes, current_user),
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalRecipes"),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get feed for user {current_user.id}: {e}")
        raise server_error("Failed to get personal feed")


@router.get("/trending")
async def get_trending_recipes(
    current_user: OptionalUser,
    pagination: Pagination = Depends(pagination_params(default_limit=10, max_limit=50)),
    db: Session = Depends(get_db)
):
    """
    Public recipes liked during the last week

    Ranked by likes inside the window, then by recency.
    """
    try:
        recent = (
            select(RecipeLike.recipe_id, func.count().label("recent_likes"))
            .where(RecipeLike.created_at >= days_ago(TRENDING_WINDOW_DAYS))
            .group_by(RecipeLike.recipe_id)
            .subquery()
        )
        rows = (
            recipe_service.with_relations(db.query(Recipe, recent.c.recent_likes))
            .join(recent, recent.c.recipe_id == Recipe.id)
            .filter(Recipe.is_public.is_(True))
            .order_by(recent.c.recent_likes.desc(), Recipe.created_at.desc(), Recipe.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        recipes = [recipe for recipe, _ in rows]
        summaries = recipe_service.serialize_summaries(db, recipes, current_user)
        for summary, (_, recent_likes) in zip(summaries, rows):
            summary["stats"]["recentLikesCount"] = recent_likes

        return with_timestamp({
            "trendingRecipes": summaries,
            "totalRecipes": len(summaries),
            "period": f"Last {TRENDING_WINDOW_DAYS} days",
            "pagination": page_pagination(pagination.page, pagination.limit, len(summaries)),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get trending recipes: {e}")
        raise server_error("Failed to get trending recipes")


def activity_query(user_id: str):
    """Likes and comments by others on the user's public recipes, plus new followers"""
    likes = (
        select(
            literal("like").label("activity_type"),
            null().label("source_id"),
            RecipeLike.created_at.label("created_at"),
            Recipe.id.label("recipe_id"),
            Recipe.title.label("recipe_title"),
            Recipe.image_url.label("recipe_image"),
            RecipeLike.user_id.label("actor_id"),
            null().label("comment_text"),
        )
        .join(Recipe, Recipe.id == RecipeLike.recipe_id)
        .where(Recipe.author_id == user_id, RecipeLike.user_id != user_id, Recipe.is_public.is_(True))
    )
    comments = (
        select(
            literal("comment"),
            RecipeComment.id,
            RecipeComment.created_at,
            Recipe.id,
            Recipe.title,
            Recipe.image_url,
            RecipeComment.user_id,
            RecipeComment.comment,
        )
        .join(Recipe, Recipe.id == RecipeComment.recipe_id)
        .where(Recipe.author_id == user_id, RecipeComment.user_id != user_id, Recipe.is_public.is_(True))
    )
    follows = select(
        literal("follow"),
        null(),
        UserFollower.created_at,
        null(),
        null(),
        null(),
        UserFollower.follower_id,
        null(),
    ).where(UserFollower.following_id == user_id)

    return union_all(likes, comments, follows).subquery()


def activity_id(row) -> str:
    if row.activity_type == "comment":
        return row.source_id
    if row.activity_type == "like":
        return f"like-{row.recipe_id}-{row.actor_id}"
    return f"follow-{row.actor_id}"


@router.get("/activity")
async def get_user_activity(
    current_user: CurrentUser,
    pagination: Pagination = Depends(pagination_params(default_limit=20, max_limit=50)),
    db: Session = Depends(get_db)
):
    """Recent likes, comments and follows aimed at the requester, newest first"""
    try:
        events = activity_query(current_user.id)
        rows = db.execute(
            select(events)
            .order_by(events.c.created_at.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        ).all()

        actor_ids = {row.actor_id for row in rows}
        actors = {user.id: user for user in db.query(User).filter(User.id.in_(actor_ids))} if actor_ids else {}

        activities = []
        for row in rows:
            actor = author_summary(actors.get(row.actor_id))
            activity = {
                "id": activity_id(row),
                "type": row.activity_type,
                "createdAt": to_iso(row.created_at),
                "user": actor,
            }
            name = actor["fullName"] if actor else "Someone"
            if row.activity_type == "follow":
                activity["message"] = f"{name} started following you"
            else:
                activity["recipe"] = {"id": row.recipe_id, "title": row.recipe_title, "imageUrl": row.recipe_image}
                if row.activity_type == "like":
                    activity["message"] = f'{name} liked your recipe "{row.recipe_title}"'
                else:
                    activity["message"] = f'{name} commented on your recipe "{row.recipe_title}"'
                    activity["commentText"] = row.comment_text
            activities.append(activity)

        return with_timestamp({
            "activities": activities,
            "pagination": page_pagination(pagination.page, pagination.limit, len(activities)),
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get activity for user {current_user.id}: {e}")
        raise server_error("Failed to get user activity")
