# foodieai/recipes.py
# ---------------------------------------------------------
# Read access to published recipes.
# Recipes are only ever created by drafts.publish_draft().
# ---------------------------------------------------------

from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from foodieai.config import config
from foodieai.drafts import recipe_to_wire
from foodieai.errors import RecipeNotFoundError
from foodieai.models import Recipe
from foodieai.schemas import RecipeSummaryOut


def clamp_limit(limit: Optional[int]) -> int:
    # limit <= 0 / missing -> default, otherwise capped at the max
    if limit is None or limit <= 0:
        return config.SEARCH_DEFAULT_LIMIT
    return min(limit, config.SEARCH_MAX_LIMIT)


def search_recipes(
    db: Session,
    query: Optional[str] = None,
    category: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Case-insensitive "contains" match on title OR description,
    optional exact category, newest first.
    """
    stmt = select(Recipe)

    if category:
        stmt = stmt.where(Recipe.category == category)

    if query:
        pattern = f"%{query}%"
        stmt = stmt.where(or_(Recipe.title.ilike(pattern), Recipe.description.ilike(pattern)))

    stmt = stmt.order_by(Recipe.updated_at.desc()).limit(clamp_limit(limit))

    recipes = db.execute(stmt).scalars().all()
    return [RecipeSummaryOut.model_validate(recipe).to_wire() for recipe in recipes]


def get_recipe(db: Session, recipe_id: str) -> dict[str, Any]:
    recipe = db.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFoundError(recipe_id)
    return recipe_to_wire(recipe)
