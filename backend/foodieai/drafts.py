# foodieai/drafts.py
# ---------------------------------------------------------
# Recipe draft lifecycle.
#
# States:
#   DRAFT  --publish-->  PUBLISHED (terminal)
#
# Every mutation:
# - runs inside one transaction (idempotency.run_idempotent)
# - recomputes the stored nutrition before committing
# - returns the full draft in wire format (camelCase dict)
#
# publish() returns the newly created Recipe instead.
# ---------------------------------------------------------

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from foodieai.errors import (
    DraftIncompleteError,
    DraftNotEditableError,
    ProductNotFoundError,
    RecipeDraftIngredientNotFoundError,
    RecipeDraftNotFoundError,
    RecipeNotFoundError,
)
from foodieai.idempotency import run_idempotent, run_in_transaction
from foodieai.logger import get_logger
from foodieai.models import (
    DRAFT_STATUS,
    PUBLISHED_STATUS,
    Product,
    Recipe,
    RecipeDraft,
    RecipeDraftIngredient,
    RecipeDraftStep,
    RecipeIngredient,
    RecipeStep,
)
from foodieai.nutrition import MACRO_FIELDS, NutritionIngredient, calculate_nutrition_totals
from foodieai.schemas import (
    AddIngredientIn,
    DraftValidationOut,
    IngredientIn,
    RecipeDraftCreateIn,
    RecipeDraftOut,
    RecipeOut,
)

logger = get_logger(__name__)

# Appended to the published description when an ingredient
# carries estimated macros instead of a catalog product
SNAPSHOT_WARNING = "⚠️ Некоторые ингредиенты содержат оценочные данные (snapshot)."

MISSING_INGREDIENT_HINT = "Specify productId or provide macrosPer100"

OP_CREATE = "recipeDraft.create"
OP_ADD_INGREDIENT = "recipeDraft.addIngredient"
OP_REMOVE_INGREDIENT = "recipeDraft.removeIngredient"
OP_SET_STEPS = "recipeDraft.setSteps"
OP_PUBLISH = "recipeDraft.publish"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------
# Loading helpers
# ---------------------------------------------------------

def _get_draft(db: Session, draft_id: str) -> RecipeDraft:
    draft = db.get(RecipeDraft, draft_id)
    if draft is None:
        raise RecipeDraftNotFoundError(draft_id)
    return draft


def _get_editable_draft(db: Session, draft_id: str) -> RecipeDraft:
    draft = _get_draft(db, draft_id)
    if draft.status != DRAFT_STATUS:
        raise DraftNotEditableError(draft.id, draft.status)
    return draft


def _ensure_product(db: Session, product_id: Optional[str]) -> None:
    if product_id and db.get(Product, product_id) is None:
        raise ProductNotFoundError(product_id)


def _next_ingredient_order(db: Session, draft_id: str) -> int:
    stmt = select(func.max(RecipeDraftIngredient.order)).where(RecipeDraftIngredient.draft_id == draft_id)
    current = db.execute(stmt).scalar()
    return (current or 0) + 1


def draft_to_wire(draft: RecipeDraft) -> dict[str, Any]:
    return RecipeDraftOut.model_validate(draft).to_wire()


def recipe_to_wire(recipe: Recipe) -> dict[str, Any]:
    return RecipeOut.model_validate(recipe).to_wire()


# ---------------------------------------------------------
# Nutrition
# ---------------------------------------------------------

def _nutrition_inputs(db: Session, ingredients: list[Any]) -> list[NutritionIngredient]:
    """Pair every ingredient with its linked product's macros (if any)."""
    product_ids = {row.product_id for row in ingredients if row.product_id}
    products = {}
    if product_ids:
        stmt = select(Product).where(Product.id.in_(product_ids))
        products = {product.id: product for product in db.execute(stmt).scalars()}

    return [
        NutritionIngredient(
            amount=row.amount,
            unit=row.unit,
            kcal100=row.kcal100,
            protein100=row.protein100,
            fat100=row.fat100,
            carbs100=row.carbs100,
            product=products.get(row.product_id) if row.product_id else None,
        )
        for row in ingredients
    ]


def compute_nutrition(db: Session, ingredients: list[Any], servings: Optional[int]) -> dict[str, dict[str, float]]:
    return calculate_nutrition_totals(_nutrition_inputs(db, ingredients), servings)


def _refresh_computed(db: Session, draft: RecipeDraft) -> dict[str, Any]:
    """
    Reload children in order, recompute nutrition, stamp updated_at.
    Runs at the end of every mutation, before the commit.
    """
    db.flush()
    db.expire(draft, ["ingredients", "steps"])

    nutrition = compute_nutrition(db, draft.ingredients, draft.servings)
    draft.nutrition_total = nutrition["total"]
    draft.nutrition_per_serving = nutrition["perServing"]
    draft.updated_at = _utcnow()
    db.flush()

    return draft_to_wire(draft)


# ---------------------------------------------------------
# Validation (read-only, never raises for incompleteness)
# ---------------------------------------------------------

def evaluate_draft(draft: RecipeDraft) -> dict[str, Any]:
    missing_fields = []
    missing_ingredients = []

    if not draft.title or not draft.title.strip():
        missing_fields.append("title")
    if len(draft.ingredients) == 0:
        missing_fields.append("ingredients")
    if len(draft.steps) == 0:
        missing_fields.append("steps")

    for ingredient in draft.ingredients:
        if ingredient.product_id:
            continue
        has_macros = all(getattr(ingredient, field) is not None for field in MACRO_FIELDS)
        if not has_macros:
            missing_ingredients.append(
                {
                    "ingredient_id": ingredient.id,
                    "name": ingredient.name,
                    "missing": ["productId", "macrosPer100"],
                    "hint": MISSING_INGREDIENT_HINT,
                }
            )

    return {
        "is_valid": not missing_fields and not missing_ingredients,
        "missing_fields": missing_fields,
        "missing_ingredients": missing_ingredients,
    }


def build_published_description(description: Optional[str], has_snapshot_ingredient: bool) -> Optional[str]:
    if not has_snapshot_ingredient:
        return description
    if not description or not description.strip():
        return SNAPSHOT_WARNING
    return f"{description}\n\n{SNAPSHOT_WARNING}"


# ---------------------------------------------------------
# CREATE
# ---------------------------------------------------------

def _clone_recipe_children(draft: RecipeDraft, recipe: Recipe) -> None:
    for ingredient in recipe.ingredients:
        draft.ingredients.append(
            RecipeDraftIngredient(
                order=ingredient.order if ingredient.order is not None else len(draft.ingredients) + 1,
                original_text=ingredient.original_text,
                name=ingredient.name,
                amount=ingredient.amount,
                unit=ingredient.unit,
                product_id=ingredient.product_id,
                kcal100=ingredient.kcal100,
                protein100=ingredient.protein100,
                fat100=ingredient.fat100,
                carbs100=ingredient.carbs100,
                assumptions=ingredient.assumptions,
            )
        )
    for step in recipe.steps:
        draft.steps.append(RecipeDraftStep(order=step.order, text=step.text))


def create_draft(db: Session, data: RecipeDraftCreateIn, owner_user_id: Optional[str] = None) -> dict[str, Any]:
    """
    Create a DRAFT. With sourceRecipeId the published recipe's
    ingredients and steps are copied in.

    Idempotency scope: the caller (user id, "" when anonymous).
    """

    def mutate():
        draft = RecipeDraft(
            owner_user_id=owner_user_id,
            title=data.title,
            category=data.category,
            description=data.description,
            servings=data.servings,
            status=DRAFT_STATUS,
        )
        if data.source_recipe_id:
            recipe = db.get(Recipe, data.source_recipe_id)
            if recipe is None:
                raise RecipeNotFoundError(data.source_recipe_id)
            draft.source_recipe_id = recipe.id
            _clone_recipe_children(draft, recipe)

        db.add(draft)
        result = _refresh_computed(db, draft)
        logger.info(f"Created recipe draft {draft.id}")
        return result

    return run_idempotent(
        db,
        operation=OP_CREATE,
        key=data.client_request_id,
        entity_id=owner_user_id or "",
        mutate=mutate,
    )


def draft_from_recipe(db: Session, recipe_id: str, owner_user_id: Optional[str] = None) -> dict[str, Any]:
    """Return the caller's open draft for a recipe, or clone a new one."""
    recipe = db.get(Recipe, recipe_id)
    if recipe is None:
        raise RecipeNotFoundError(recipe_id)

    stmt = (
        select(RecipeDraft)
        .where(
            RecipeDraft.source_recipe_id == recipe_id,
            RecipeDraft.status == DRAFT_STATUS,
            RecipeDraft.owner_user_id.is_(None)
            if owner_user_id is None
            else RecipeDraft.owner_user_id == owner_user_id,
        )
        .order_by(RecipeDraft.updated_at.desc())
    )
    existing = db.execute(stmt).scalars().first()
    if existing is not None:
        return draft_to_wire(existing)

    data = RecipeDraftCreateIn(
        title=recipe.title,
        category=recipe.category,
        description=recipe.description,
        servings=recipe.servings,
        source_recipe_id=recipe.id,
    )
    return create_draft(db, data, owner_user_id=owner_user_id)


# ---------------------------------------------------------
# INGREDIENTS
# ---------------------------------------------------------

def _apply_ingredient(row: RecipeDraftIngredient, ingredient: IngredientIn) -> None:
    macros = ingredient.macros_per100
    row.original_text = ingredient.original_text
    row.name = ingredient.name
    row.amount = ingredient.amount
    row.unit = ingredient.unit
    row.product_id = ingredient.product_id
    row.kcal100 = macros.kcal100 if macros else None
    row.protein100 = macros.protein100 if macros else None
    row.fat100 = macros.fat100 if macros else None
    row.carbs100 = macros.carbs100 if macros else None
    row.assumptions = ingredient.assumptions


def add_ingredient(db: Session, data: AddIngredientIn) -> dict[str, Any]:
    """
    Add an ingredient at `order` (default: max+1).
    An ingredient already sitting at that order is overwritten.
    """

    def mutate():
        draft = _get_editable_draft(db, data.draft_id)
        ingredient = data.ingredient
        _ensure_product(db, ingredient.product_id)

        order = ingredient.order or _next_ingredient_order(db, draft.id)
        stmt = select(RecipeDraftIngredient).where(
            RecipeDraftIngredient.draft_id == draft.id,
            RecipeDraftIngredient.order == order,
        )
        row = db.execute(stmt).scalars().first()
        if row is None:
            row = RecipeDraftIngredient(draft_id=draft.id, order=order)
            db.add(row)

        _apply_ingredient(row, ingredient)
        return _refresh_computed(db, draft)

    return run_idempotent(
        db,
        operation=OP_ADD_INGREDIENT,
        key=data.client_request_id,
        entity_id=data.draft_id,
        mutate=mutate,
    )


def remove_ingredient(
    db: Session,
    draft_id: str,
    ingredient_id: str,
    client_request_id: Optional[str] = None,
) -> dict[str, Any]:
    def mutate():
        draft = _get_editable_draft(db, draft_id)
        stmt = delete(RecipeDraftIngredient).where(
            RecipeDraftIngredient.id == ingredient_id,
            RecipeDraftIngredient.draft_id == draft.id,
        )
        if db.execute(stmt).rowcount == 0:
            raise RecipeDraftIngredientNotFoundError(ingredient_id)
        return _refresh_computed(db, draft)

    return run_idempotent(
        db,
        operation=OP_REMOVE_INGREDIENT,
        key=client_request_id,
        entity_id=draft_id,
        mutate=mutate,
    )


# ---------------------------------------------------------
# STEPS
# ---------------------------------------------------------

def set_steps(
    db: Session,
    draft_id: str,
    steps: list[str],
    client_request_id: Optional[str] = None,
) -> dict[str, Any]:
    """Replace the whole step list; order = 1..n in submission order."""

    def mutate():
        draft = _get_editable_draft(db, draft_id)
        db.execute(delete(RecipeDraftStep).where(RecipeDraftStep.draft_id == draft.id))
        for index, text in enumerate(steps, start=1):
            db.add(RecipeDraftStep(draft_id=draft.id, order=index, text=text))
        return _refresh_computed(db, draft)

    return run_idempotent(
        db,
        operation=OP_SET_STEPS,
        key=client_request_id,
        entity_id=draft_id,
        mutate=mutate,
    )


# ---------------------------------------------------------
# READ / VALIDATE / RECALC
# ---------------------------------------------------------

def get_draft(db: Session, draft_id: str) -> dict[str, Any]:
    return draft_to_wire(_get_draft(db, draft_id))


def validate_draft(db: Session, draft_id: str) -> dict[str, Any]:
    draft = _get_draft(db, draft_id)
    return DraftValidationOut.model_validate(evaluate_draft(draft)).to_wire()


def recalc_draft(db: Session, draft_id: str) -> dict[str, Any]:
    def mutate():
        draft = _get_editable_draft(db, draft_id)
        return _refresh_computed(db, draft)

    return run_in_transaction(db, mutate)


# ---------------------------------------------------------
# PUBLISH
# ---------------------------------------------------------

def publish_draft(db: Session, draft_id: str, client_request_id: Optional[str] = None) -> dict[str, Any]:
    """
    Validate, snapshot the draft into a new Recipe and flip the
    draft to PUBLISHED, all in one transaction.

    Raises DraftIncompleteError when validation fails.
    """

    def mutate():
        draft = _get_editable_draft(db, draft_id)

        validation = evaluate_draft(draft)
        if not validation["is_valid"]:
            missing_ingredients = DraftValidationOut.model_validate(validation).to_wire()["missingIngredients"]
            raise DraftIncompleteError(validation["missing_fields"], missing_ingredients)

        nutrition = compute_nutrition(db, draft.ingredients, draft.servings)
        has_snapshot = any(not ingredient.product_id for ingredient in draft.ingredients)
        now = _utcnow()

        recipe = Recipe(
            owner_user_id=draft.owner_user_id,
            title=draft.title,
            category=draft.category,
            description=build_published_description(draft.description, has_snapshot),
            servings=draft.servings,
            nutrition_total=nutrition["total"],
            nutrition_per_serving=nutrition["perServing"],
            created_at=now,
            updated_at=now,
        )
        for ingredient in draft.ingredients:
            recipe.ingredients.append(
                RecipeIngredient(
                    order=ingredient.order,
                    original_text=ingredient.original_text,
                    name=ingredient.name,
                    amount=ingredient.amount,
                    unit=ingredient.unit,
                    product_id=ingredient.product_id,
                    kcal100=ingredient.kcal100,
                    protein100=ingredient.protein100,
                    fat100=ingredient.fat100,
                    carbs100=ingredient.carbs100,
                    assumptions=ingredient.assumptions,
                )
            )
        for step in draft.steps:
            recipe.steps.append(RecipeStep(order=step.order, text=step.text))

        db.add(recipe)
        draft.status = PUBLISHED_STATUS
        draft.nutrition_total = nutrition["total"]
        draft.nutrition_per_serving = nutrition["perServing"]
        draft.updated_at = now
        db.flush()

        logger.info(f"Published recipe draft {draft.id} as recipe {recipe.id}")
        return recipe_to_wire(recipe)

    return run_idempotent(
        db,
        operation=OP_PUBLISH,
        key=client_request_id,
        entity_id=draft_id,
        mutate=mutate,
    )
