"""
RecipeShare Recipe Service
Visibility rules, live aggregate stats and response shaping for recipes.
Every feature that returns recipes goes through here.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Query, Session, joinedload, selectinload
import logging

from core.exceptions import forbidden, not_found
from models.interactions import RecipeComment, RecipeLike, RecipeRating
from models.recipe_models import Recipe
from models.users import User
from utils.date_utils import to_iso
from utils.responses import round_average

logger = logging.getLogger(__name__)


def author_summary(user: Optional[User]) -> Optional[dict]:
    """Public identity block attached to recipes, comments and ratings"""
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "fullName": user.full_name,
        "profileImageUrl": user.profile_image_url,
    }


def contains(column, term: str):
    """Case-insensitive substring match with LIKE wildcards in term escaped"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def empty_stats() -> dict:
    return {"likesCount": 0, "commentsCount": 0, "averageRating": None, "ratingsCount": 0}


class RecipeService:
    def visibility_filter(self, user: Optional[User]):
        """SQL predicate: public recipes plus the requester's own"""
        if user is None:
            return Recipe.is_public.is_(True)
        return or_(Recipe.is_public.is_(True), Recipe.author_id == user.id)

    def with_relations(self, query: Query) -> Query:
        """Eager-load what summaries render"""
        return query.options(joinedload(Recipe.author), selectinload(Recipe.categories))

    def likes_count_subquery(self):
        return (
            select(RecipeLike.recipe_id, func.count().label("likes_count"))
            .group_by(RecipeLike.recipe_id)
            .subquery()
        )

    def rating_subquery(self):
        return (
            select(
                RecipeRating.recipe_id,
                func.avg(RecipeRating.rating).label("average_rating"),
                func.count(RecipeRating.id).label("ratings_count"),
            )
            .group_by(RecipeRating.recipe_id)
            .subquery()
        )

    def get_recipe_or_404(self, db: Session, recipe_id: str) -> Recipe:
        recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
        if not recipe:
            raise not_found("Recipe not found")
        return recipe

    def get_accessible_recipe(
        self, db: Session, recipe_id: str, user: Optional[User], private_message: str
    ) -> Recipe:
        """
        Load a recipe the requester may see

        Raises:
            APIError: 404 when absent, 403 with private_message when private
                and not owned by the requester
        """
        recipe = self.get_recipe_or_404(db, recipe_id)
        if not recipe.is_visible_to(user.id if user else None):
            raise forbidden(private_message)
        return recipe

    def get_stats(self, db: Session, recipe_ids: Sequence[str]) -> Dict[str, dict]:
        """Like, comment and rating aggregates per recipe, computed from the live tables"""
        stats = {recipe_id: empty_stats() for recipe_id in recipe_ids}
        if not stats:
            return stats
        ids = list(stats)

        likes = (
            db.query(RecipeLike.recipe_id, func.count())
            .filter(RecipeLike.recipe_id.in_(ids))
            .group_by(RecipeLike.recipe_id)
        )
        for recipe_id, count in likes:
            stats[recipe_id]["likesCount"] = count

        comments = (
            db.query(RecipeComment.recipe_id, func.count(RecipeComment.id))
            .filter(RecipeComment.recipe_id.in_(ids))
            .group_by(RecipeComment.recipe_id)
        )
        for recipe_id, count in comments:
            stats[recipe_id]["commentsCount"] = count

        ratings = (
            db.query(RecipeRating.recipe_id, func.avg(RecipeRating.rating), func.count(RecipeRating.id))
            .filter(RecipeRating.recipe_id.in_(ids))
            .group_by(RecipeRating.recipe_id)
        )
        for recipe_id, average, count in ratings:
            stats[recipe_id]["averageRating"] = round_average(average)
            stats[recipe_id]["ratingsCount"] = count

        return stats

    def get_liked_ids(self, db: Session, user: Optional[User], recipe_ids: Iterable[str]) -> Set[str]:
        ids = list(recipe_ids)
        if user is None or not ids:
            return set()
        rows = db.query(RecipeLike.recipe_id).filter(
            RecipeLike.user_id == user.id, RecipeLike.recipe_id.in_(ids)
        )
        return {recipe_id for (recipe_id,) in rows}

    def rating_summary(self, db: Session, recipe_id: str) -> dict:
        average, count = db.query(func.avg(RecipeRating.rating), func.count(RecipeRating.id)).filter(
            RecipeRating.recipe_id == recipe_id
        ).one()
        return {"averageRating": round_average(average), "ratingsCount": count}

    def likes_count(self, db: Session, recipe_id: str) -> int:
        return db.query(func.count()).select_from(RecipeLike).filter(RecipeLike.recipe_id == recipe_id).scalar()

    def _base_fields(self, recipe: Recipe) -> dict:
        difficulty = recipe.difficulty
        return {
            "id": recipe.id,
            "title": recipe.title,
            "description": recipe.description,
            "prepTimeMinutes": recipe.prep_time_minutes,
            "cookTimeMinutes": recipe.cook_time_minutes,
            "totalTimeMinutes": recipe.total_time_minutes,
            "servings": recipe.servings,
            "difficulty": difficulty.value if hasattr(difficulty, "value") else difficulty,
            "imageUrl": recipe.image_url,
            "isPublic": recipe.is_public,
            "isFeatured": recipe.is_featured,
            "createdAt": to_iso(recipe.created_at),
            "updatedAt": to_iso(recipe.updated_at),
            "author": author_summary(recipe.author),
        }

    def serialize_summaries(self, db: Session, recipes: List[Recipe], user: Optional[User]) -> List[dict]:
        """Recipe cards with stats and the requester's like flag, in input order"""
        ids = [recipe.id for recipe in recipes]
        stats = self.get_stats(db, ids)
        liked = self.get_liked_ids(db, user, ids)

        results = []
        for recipe in recipes:
            data = self._base_fields(recipe)
            data["categories"] = [c.to_summary() for c in sorted(recipe.categories, key=lambda c: c.name)]
            data["stats"] = stats[recipe.id]
            data["isLikedByUser"] = recipe.id in liked
            results.append(data)
        return results

    def serialize_detail(self, db: Session, recipe: Recipe, user: Optional[User]) -> dict:
        """Full recipe including ingredients, instructions and the requester's rating"""
        data = self._base_fields(recipe)
        data["instructions"] = list(recipe.instructions or [])
        data["ingredients"] = [ingredient.to_dict() for ingredient in recipe.ingredients]
        data["categories"] = [
            {**c.to_summary(), "description": c.description}
            for c in sorted(recipe.categories, key=lambda c: c.name)
        ]
        data["stats"] = self.get_stats(db, [recipe.id])[recipe.id]

        user_rating = None
        if user is not None:
            user_rating = db.query(RecipeRating.rating).filter(
                RecipeRating.recipe_id == recipe.id, RecipeRating.user_id == user.id
            ).scalar()
        data["isLikedByUser"] = recipe.id in self.get_liked_ids(db, user, [recipe.id])
        data["userRating"] = user_rating
        return data


# Global recipe service instance
recipe_service = RecipeService()

__all__ = ["recipe_service", "RecipeService", "author_summary", "contains", "empty_stats"]
