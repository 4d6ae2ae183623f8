# foodieai/products.py
# ---------------------------------------------------------
# Product catalog: manual creation + search.
#
# Manual creation is not transactional with anything else, so
# rapid double submits (LLM retries, double clicks) are caught
# by a short de-dup window in a TTLStore instead:
#   same content within PRODUCT_DEDUP_TTL_SECONDS
#   -> the product created the first time is returned.
# ---------------------------------------------------------

import hashlib
import json
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from foodieai.cache import InMemoryTTLStore, TTLStore
from foodieai.config import config
from foodieai.logger import get_logger
from foodieai.models import Product
from foodieai.recipes import clamp_limit
from foodieai.schemas import ProductCreateIn

logger = get_logger(__name__)

# Process-wide de-dup store (swap via the `store` argument)
dedup_store: TTLStore = InMemoryTTLStore()


def normalize_name(value: str) -> str:
    return value.strip().lower()


def _dedup_key(data: ProductCreateIn) -> str:
    payload = {
        "name": normalize_name(data.name),
        "brand": normalize_name(data.brand) if data.brand else None,
        "kcal100": data.kcal100,
        "protein100": data.protein100,
        "fat100": data.fat100,
        "carbs100": data.carbs100,
    }
    digest = hashlib.sha256(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()
    return f"product.createManual:{digest}"


def create_manual(
    db: Session,
    data: ProductCreateIn,
    owner_user_id: Optional[str] = None,
    store: Optional[TTLStore] = None,
) -> Product:
    """
    Create a product with the MVP defaults GLOBAL / VERIFIED / INTERNAL.
    """
    store = store if store is not None else dedup_store
    key = _dedup_key(data)

    cached_id = store.get(key)
    if cached_id is not None:
        existing = db.get(Product, cached_id)
        if existing is not None:
            logger.info(f"Duplicate manual product suppressed: {existing.id}")
            return existing

    product = Product(
        name=data.name,
        brand=data.brand,
        normalized_name=normalize_name(data.name),
        scope="GLOBAL",
        status="VERIFIED",
        source="INTERNAL",
        owner_user_id=owner_user_id,
        kcal100=data.kcal100,
        protein100=data.protein100,
        fat100=data.fat100,
        carbs100=data.carbs100,
    )
    db.add(product)
    db.commit()
    db.refresh(product)

    store.set(key, product.id, config.PRODUCT_DEDUP_TTL_SECONDS)
    logger.info(f"Created manual product {product.id} ({product.normalized_name})")
    return product


def search_products(db: Session, query: Optional[str] = None, limit: Optional[int] = None) -> list[Product]:
    """Case-insensitive match on name OR brand, newest first."""
    stmt = select(Product)

    if query:
        pattern = f"%{query.strip()}%"
        stmt = stmt.where(or_(Product.name.ilike(pattern), Product.brand.ilike(pattern)))

    stmt = stmt.order_by(Product.created_at.desc()).limit(clamp_limit(limit) if limit else config.SEARCH_MAX_LIMIT)
    return list(db.execute(stmt).scalars().all())
