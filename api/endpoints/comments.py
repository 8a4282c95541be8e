"""
RecipeShare Comment Endpoints
Threaded comments on recipes with author moderation
"""

from collections import defaultdict
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, joinedload
import logging

from core.database import get_db
from core.dependencies import CurrentUser, OptionalUser, Pagination, pagination_params
from core.exceptions import APIError, bad_request, forbidden, not_found, server_error
from middleware.logging import log_user_activity
from models.interactions import RecipeComment
from schemas.interaction_schemas import CommentCreate, CommentUpdate
from services.recipe_service import author_summary, recipe_service
from utils.date_utils import to_iso, utcnow
from utils.responses import counted_pagination, with_timestamp

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Comments"])

COMMENT_SORT_COLUMNS = {
    "created_at": RecipeComment.created_at,
    "updated_at": RecipeComment.updated_at,
}
PREVIEW_LENGTH = 50


def serialize_comment(comment: RecipeComment) -> dict:
    return {
        "id": comment.id,
        "comment": comment.comment,
        "parentCommentId": comment.parent_comment_id,
        "isEdited": comment.is_edited,
        "createdAt": to_iso(comment.created_at),
        "updatedAt": to_iso(comment.updated_at),
        "user": author_summary(comment.user),
    }


def comment_preview(text: str) -> str:
    return text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")


def get_comment_or_404(db: Session, comment_id: str) -> RecipeComment:
    comment = db.query(RecipeComment).filter(RecipeComment.id == comment_id).first()
    if not comment:
        raise not_found("Comment not found")
    return comment


@router.post("/recipes/{recipe_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    recipe_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUser,
    db: Session = Depends(get_db)
):
    """
    Comment on a recipe, or reply to an existing comment

    A reply's parent must belong to the same recipe.
    """
    try:
        recipe = recipe_service.get_accessible_recipe(
            db, recipe_id, current_user, "Cannot comment on a private recipe"
        )

        if comment_data.parent_comment_id:
            parent = db.query(RecipeComment).filter(RecipeComment.id == comment_data.parent_comment_id).first()
            if not parent:
                raise not_found("Parent comment not found")
            if parent.recipe_id != recipe.id:
                raise bad_request("Parent comment does not belong to this recipe")

        comment = RecipeComment(
            recipe_id=recipe.id,
            user_id=current_user.id,
            comment=comment_data.comment,
            parent_comment_id=comment_data.parent_comment_id or None,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)

        log_user_activity("comment_created", {"recipe_id": recipe.id, "comment_id": comment.id})
        return with_timestamp({
            "message": "Comment created successfully",
            "comment": {
                **serialize_comment(comment),
                "recipe": {"id": recipe.id, "title": recipe.title},
                "replies": [],
            },
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to create comment on recipe {recipe_id}: {e}")
        db.rollback()
        raise server_error("Failed to create comment")


@router.get("/recipes/{recipe_id}/comments")
async def get_recipe_comments(
    recipe_id: str,
    current_user: OptionalUser,
    pagination: Pagination = Depends(pagination_params(default_limit=20, max_limit=100)),
    sort: str = "created_at",
    order: str = "desc",
    db: Session = Depends(get_db)
):
    """Top-level comments, paginated, each with its direct replies oldest first"""
    try:
        recipe = recipe_service.get_accessible_recipe(db, recipe_id, current_user, "This recipe is private")

        sort_name = sort if sort in COMMENT_SORT_COLUMNS else "created_at"
        sort_order = "asc" if order.lower() == "asc" else "desc"
        sort_column = COMMENT_SORT_COLUMNS[sort_name]

        top_level = db.query(RecipeComment).filter(
            RecipeComment.recipe_id == recipe.id, RecipeComment.parent_comment_id.is_(None)
        )
        total = top_level.count()

        comments = (
            top_level.options(joinedload(RecipeComment.user))
            .order_by(sort_column.asc() if sort_order == "asc" else sort_column.desc(), RecipeComment.id)
            .offset(pagination.offset)
            .limit(pagination.limit)
            .all()
        )

        replies_by_parent = defaultdict(list)
        if comments:
            replies = (
                db.query(RecipeComment)
                .options(joinedload(RecipeComment.user))
                .filter(RecipeComment.parent_comment_id.in_([c.id for c in comments]))
                .order_by(RecipeComment.created_at.asc(), RecipeComment.id)
                .all()
            )
            for reply in replies:
                replies_by_parent[reply.parent_comment_id].append(serialize_comment(reply))

        results = []
        for comment in comments:
            data = serialize_comment(comment)
            data["replies"] = replies_by_parent[comment.id]
            data["repliesCount"] = len(data["replies"])
            results.append(data)

        return with_timestamp({
            "comments": results,
            "pagination": counted_pagination(pagination.page, pagination.limit, total, "totalComments"),
            "sort": {"column": sort_name, "order": sort_order},
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to get comments for recipe {recipe_id}: {e}")
        raise server_error("Failed to get comments")


@router.put("/comments/{comment_id}")
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    current_user: CurrentUser,
    db: Session = Depends(get_db)
):
    """Edit the text of the requester's own comment"""
    try:
        comment = get_comment_or_404(db, comment_id)
        if comment.user_id != current_user.id:
            raise forbidden("You can only update your own comments")

        comment.comment = comment_data.comment
        comment.is_edited = True
        comment.updated_at = utcnow()
        db.commit()
        db.refresh(comment)

        log_user_activity("comment_updated", {"comment_id": comment.id})
        return with_timestamp({
            "message": "Comment updated successfully",
            "comment": {
                **serialize_comment(comment),
                "recipe": {"id": comment.recipe.id, "title": comment.recipe.title},
            },
        })

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to update comment {comment_id}: {e}")
        db.rollback()
        raise server_error("Failed to update comment")


@router.delete("/comments/{comment_id}")
async def delete_comment(comment_id: str, current_user: CurrentUser, db: Session = Depends(get_db)):
    """
    Delete a comment and its replies

    Allowed for the comment's author and for the author of the recipe.
    """
    try:
        comment = get_comment_or_404(db, comment_id)
        recipe = comment.recipe
        if comment.user_id != current_user.id and recipe.author_id != current_user.id:
            raise forbidden("You can only delete your own comments or comments on your recipes")

        deleted = {
            "id": comment.id,
            "preview": comment_preview(comment.comment),
            "recipe": {"id": recipe.id, "title": recipe.title},
        }
        db.delete(comment)
        db.commit()

        log_user_activity("comment_deleted", {"comment_id": deleted["id"], "recipe_id": recipe.id})
        return with_timestamp({"message": "Comment deleted successfully", "deletedComment": deleted})

    except APIError:
        raise
    except Exception as e:
        logger.error(f"Failed to delete comment {comment_id}: {e}")
        db.rollback()
        raise server_error("Failed to delete comment")
