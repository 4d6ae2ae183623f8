# foodieai/nutrition.py
# ---------------------------------------------------------
# Nutrition aggregator (pure, no DB access).
#
# Input: ingredients with an amount + unit and macros per 100 g,
#        either inline (snapshot) or from a linked Product.
# Output: totals for the whole recipe and per serving.
#
# Unit idea (same as "mg per 100g" math):
#   grams = amount * unit_factor
#   contribution = grams * value_per_100 / 100
#
# Example:
#   200 g of something with kcal100 = 100
#   -> 200 * 100 / 100 = 200 kcal
# ---------------------------------------------------------

from dataclasses import dataclass
from typing import Any, Iterable, Optional

# ---------------------------------------------------------
# Unit -> grams
# ---------------------------------------------------------
# Anything not listed here ("pcs", "tbsp", ...) cannot be
# converted to grams, so the ingredient is skipped.
# ---------------------------------------------------------

UNIT_TO_GRAMS = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "ml": 1.0,
    "l": 1000.0,
}

MACRO_FIELDS = ("kcal100", "protein100", "fat100", "carbs100")

# Output keys, in the same order as MACRO_FIELDS
TOTAL_KEYS = ("calories", "protein", "fat", "carbs")


@dataclass
class Macros100:
    kcal100: Optional[float] = None
    protein100: Optional[float] = None
    fat100: Optional[float] = None
    carbs100: Optional[float] = None


@dataclass
class NutritionIngredient:
    """Plain ingredient input, mirrors the columns of a draft ingredient."""

    amount: Optional[float] = None
    unit: Optional[str] = None
    kcal100: Optional[float] = None
    protein100: Optional[float] = None
    fat100: Optional[float] = None
    carbs100: Optional[float] = None
    product: Optional[Any] = None


def unit_factor(unit: Optional[str]) -> Optional[float]:
    if unit is None:
        return None
    return UNIT_TO_GRAMS.get(unit.strip().lower())


def _resolve_macros(ingredient: Any) -> Optional[list[float]]:
    # Inline snapshot first, linked product second (per macro)
    product = getattr(ingredient, "product", None)
    values = []
    for field in MACRO_FIELDS:
        value = getattr(ingredient, field, None)
        if value is None and product is not None:
            value = getattr(product, field, None)
        if value is None:
            return None
        values.append(float(value))
    return values


def empty_totals() -> dict[str, float]:
    return {key: 0.0 for key in TOTAL_KEYS}


def calculate_nutrition_totals(
    ingredients: Iterable[Any],
    servings: Optional[int],
) -> dict[str, dict[str, float]]:
    """
    Sum calories/protein/fat/carbs over the ingredients.

    An ingredient is skipped (contributes nothing) when:
      - amount or unit is missing
      - the unit is not convertible to grams
      - a macro has neither an inline value nor a product value

    Per-serving values divide by max(servings, 1), so 0 / None
    servings give per-serving == total.

    Returns:
      {"total": {...}, "perServing": {...}}
    """
    total = empty_totals()

    for ingredient in ingredients:
        amount = getattr(ingredient, "amount", None)
        factor = unit_factor(getattr(ingredient, "unit", None))
        if amount is None or factor is None:
            continue

        macros = _resolve_macros(ingredient)
        if macros is None:
            continue

        grams = float(amount) * factor
        for key, per100 in zip(TOTAL_KEYS, macros):
            total[key] += grams * per100 / 100.0

    divisor = max(servings or 0, 1)
    per_serving = {key: value / divisor for key, value in total.items()}

    return {"total": total, "perServing": per_serving}
