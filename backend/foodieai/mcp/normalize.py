# foodieai/mcp/normalize.py
# ---------------------------------------------------------
# Domain clean-up of tool arguments, after schema coercion.
#
# - unit synonyms -> canonical codes ("гр" -> "g", "шт" -> "pcs")
# - trimmed ingredient names / steps
# - result-set sizes clamped to SEARCH_MAX_LIMIT
# ---------------------------------------------------------

from typing import Any, Optional

from foodieai.config import config

UNIT_SYNONYMS = {
    # grams
    "g": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "г": "g",
    "гр": "g",
    "грамм": "g",
    "грамма": "g",
    "граммов": "g",
    # kilograms
    "kg": "kg",
    "кг": "kg",
    "килограмм": "kg",
    # millilitres
    "ml": "ml",
    "мл": "ml",
    # litres
    "l": "l",
    "л": "l",
    "литр": "l",
    "литра": "l",
    # pieces
    "pcs": "pcs",
    "pc": "pcs",
    "piece": "pcs",
    "pieces": "pcs",
    "шт": "pcs",
    "штук": "pcs",
    "штуки": "pcs",
}

SEARCH_TOOLS = {"product.search", "recipe.search"}


def normalize_unit(unit: Optional[str]) -> Optional[str]:
    if unit is None:
        return None
    cleaned = unit.strip().lower().rstrip(".")
    if not cleaned:
        return None
    return UNIT_SYNONYMS.get(cleaned, cleaned)


def clamp_limit(limit: Any) -> Any:
    if isinstance(limit, (int, float)) and not isinstance(limit, bool) and limit > config.SEARCH_MAX_LIMIT:
        return config.SEARCH_MAX_LIMIT
    return limit


def _normalize_ingredient(ingredient: dict[str, Any]) -> dict[str, Any]:
    ingredient = dict(ingredient)
    if "unit" in ingredient:
        ingredient["unit"] = normalize_unit(ingredient["unit"])
    if isinstance(ingredient.get("name"), str):
        ingredient["name"] = " ".join(ingredient["name"].split())
    return ingredient


def normalize_arguments(tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of already-coerced arguments."""
    args = dict(arguments)

    if tool_name == "recipeDraft.addIngredient" and isinstance(args.get("ingredient"), dict):
        args["ingredient"] = _normalize_ingredient(args["ingredient"])

    if tool_name == "recipeDraft.setSteps" and isinstance(args.get("steps"), list):
        args["steps"] = [step.strip() if isinstance(step, str) else step for step in args["steps"]]

    if tool_name in SEARCH_TOOLS and "limit" in args:
        args["limit"] = clamp_limit(args["limit"])

    return args
