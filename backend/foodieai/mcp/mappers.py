# foodieai/mcp/mappers.py
# ---------------------------------------------------------
# ORM / schema objects -> the JSON shapes tool callers see.
# ---------------------------------------------------------

from typing import Any, Iterable

from foodieai.models import Product
from foodieai.schemas import UserMeOut


def format_product_item(product: Product) -> dict[str, Any]:
    # price / store / url fields are reserved for external catalogs
    return {
        "id": product.id,
        "name": product.name,
        "brand": product.brand,
        "price": None,
        "currency": None,
        "store": None,
        "url": None,
        "image_url": None,
        "nutrition": {
            "kcal100": product.kcal100,
            "protein100": product.protein100,
            "fat100": product.fat100,
            "carbs100": product.carbs100,
        },
    }


def format_search_result(products: Iterable[Product]) -> dict[str, Any]:
    items = [format_product_item(product) for product in products]
    return {"count": len(items), "items": items}


def format_user_me(me: UserMeOut) -> dict[str, Any]:
    """{profile, targets}; the internal user id is never exposed."""
    return me.to_wire()
