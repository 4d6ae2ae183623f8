# foodieai/models.py
# ---------------------------------------------------------
# DATABASE TABLES for the application.
#
# Each class = one table
# Each attribute = one column
#
# Ids are uuid4 hex strings so they can travel through
# JSON-RPC tool arguments unchanged.
# ---------------------------------------------------------

import uuid
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from foodieai.db import Base


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------
# Enumerated values (stored as plain strings)
# ---------------------------------------------------------

SEX_VALUES = ["FEMALE", "MALE"]
ACTIVITY_LEVELS = ["SEDENTARY", "LIGHT", "MODERATE", "VERY_ACTIVE"]
GOAL_TYPES = ["MAINTAIN", "LOSE", "GAIN"]

DRAFT_STATUS = "DRAFT"
PUBLISHED_STATUS = "PUBLISHED"


# ---------------------------------------------------------
# User + UserProfile
# ---------------------------------------------------------
# A User is created the first time an external identity
# (OAuth subject) calls the API.
# ---------------------------------------------------------

class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    # OAuth "sub" claim
    external_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    profile: Mapped["UserProfile | None"] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    first_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Biometrics used by the TDEE calculator
    sex: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    height_cm: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    activity_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    goal: Mapped[str | None] = mapped_column(String(10), nullable=True, default="MAINTAIN")
    calorie_delta: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Computed targets (never hand-edited)
    target_calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_protein_g: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_fat_g: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_carbs_g: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    user: Mapped["User"] = relationship(back_populates="profile")


# ---------------------------------------------------------
# Product table
# ---------------------------------------------------------
# Catalog item with nutrition per 100 g.
# Example: "Greek Yogurt" by "Acme", 120 kcal / 10 g protein ...
# ---------------------------------------------------------

class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    name: Mapped[str] = mapped_column(String(300), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # trimmed + lowercased name, used for matching
    normalized_name: Mapped[str] = mapped_column(String(300), nullable=False, index=True)

    # GLOBAL | USER
    scope: Mapped[str] = mapped_column(String(20), nullable=False, default="GLOBAL")
    # VERIFIED | PENDING_REVIEW
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="VERIFIED")
    # INTERNAL | FATSECRET | AI_ESTIMATED
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="INTERNAL")

    owner_user_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    kcal100: Mapped[int] = mapped_column(Integer, nullable=False)
    protein100: Mapped[float] = mapped_column(Float, nullable=False)
    fat100: Mapped[float] = mapped_column(Float, nullable=False)
    carbs100: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# ---------------------------------------------------------
# RecipeDraft (+ ingredients, steps)
# ---------------------------------------------------------
# Editable working copy of a recipe.
# status: DRAFT -> PUBLISHED (terminal)
# nutrition_total / nutrition_per_serving are recomputed
# inside the same transaction as every mutation.
# ---------------------------------------------------------

class RecipeDraft(Base):
    __tablename__ = "recipe_drafts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    owner_user_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    servings: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=DRAFT_STATUS)

    # Published recipe this draft was cloned from (if any)
    source_recipe_id: Mapped[str | None] = mapped_column(
        ForeignKey("recipes.id", ondelete="SET NULL"),
        nullable=True,
    )

    nutrition_total: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    nutrition_per_serving: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    ingredients: Mapped[list["RecipeDraftIngredient"]] = relationship(
        back_populates="draft",
        cascade="all, delete-orphan",
        order_by="RecipeDraftIngredient.order",
    )
    steps: Mapped[list["RecipeDraftStep"]] = relationship(
        back_populates="draft",
        cascade="all, delete-orphan",
        order_by="RecipeDraftStep.order",
    )


class RecipeDraftIngredient(Base):
    __tablename__ = "recipe_draft_ingredients"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    draft_id: Mapped[str] = mapped_column(
        ForeignKey("recipe_drafts.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Position inside the draft (unique per draft)
    order: Mapped[int] = mapped_column(Integer, nullable=False)

    original_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Either a catalog product ...
    product_id: Mapped[str | None] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ... or an inline macro snapshot (per 100 units)
    kcal100: Mapped[float | None] = mapped_column(Float, nullable=True)
    protein100: Mapped[float | None] = mapped_column(Float, nullable=True)
    fat100: Mapped[float | None] = mapped_column(Float, nullable=True)
    carbs100: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Free-form notes about how the snapshot was estimated
    assumptions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    draft: Mapped["RecipeDraft"] = relationship(back_populates="ingredients")
    product: Mapped["Product | None"] = relationship()

    __table_args__ = (
        UniqueConstraint("draft_id", "order", name="uq_draft_ingredient_order"),
    )


class RecipeDraftStep(Base):
    __tablename__ = "recipe_draft_steps"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    draft_id: Mapped[str] = mapped_column(
        ForeignKey("recipe_drafts.id", ondelete="CASCADE"),
        nullable=False,
    )

    # 1-based, contiguous
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    draft: Mapped["RecipeDraft"] = relationship(back_populates="steps")

    __table_args__ = (
        UniqueConstraint("draft_id", "order", name="uq_draft_step_order"),
    )


# ---------------------------------------------------------
# Recipe (published, immutable)
# ---------------------------------------------------------
# Snapshot of a draft at publish time.
# ---------------------------------------------------------

class Recipe(Base):
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    owner_user_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    servings: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # PRIVATE | PUBLIC
    visibility: Mapped[str] = mapped_column(String(20), nullable=False, default="PRIVATE")

    nutrition_total: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    nutrition_per_serving: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.order",
    )
    steps: Mapped[list["RecipeStep"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeStep.order",
    )


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
    )

    order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    original_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    product_id: Mapped[str | None] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    kcal100: Mapped[float | None] = mapped_column(Float, nullable=True)
    protein100: Mapped[float | None] = mapped_column(Float, nullable=True)
    fat100: Mapped[float | None] = mapped_column(Float, nullable=True)
    carbs100: Mapped[float | None] = mapped_column(Float, nullable=True)
    assumptions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    recipe: Mapped["Recipe"] = relationship(back_populates="ingredients")


class RecipeStep(Base):
    __tablename__ = "recipe_steps"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(
        ForeignKey("recipes.id", ondelete="CASCADE"),
        nullable=False,
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    recipe: Mapped["Recipe"] = relationship(back_populates="steps")


# ---------------------------------------------------------
# IdempotencyRecord
# ---------------------------------------------------------
# One row per (operation, client key, target entity).
# The unique constraint is the backstop for concurrent replays:
# the first committed row wins.
# ---------------------------------------------------------

class IdempotencyRecord(Base):
    __tablename__ = "idempotency_keys"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)

    operation: Mapped[str] = mapped_column(String(100), nullable=False)
    key: Mapped[str] = mapped_column(String(255), nullable=False)

    # "" for operations without a target entity (anonymous create)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    # Stored result payload, replayed verbatim
    result: Mapped[Any] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("operation", "key", "entity_id", name="uq_idempotency_operation_key_entity"),
    )
