# foodieai/schemas.py
# ---------------------------------------------------------
# This file defines Pydantic SCHEMAS.
#
# Schemas:
# - validate incoming requests (REST bodies + tool arguments)
# - control outgoing responses
#
# Python attributes are snake_case, the wire format is
# camelCase ("draftId", "macrosPer100", "nutritionTotal").
# CamelModel does the translation both ways.
# ---------------------------------------------------------

from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

# Non-empty after trimming
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

SexValue = Literal["FEMALE", "MALE"]
ActivityLevelValue = Literal["SEDENTARY", "LIGHT", "MODERATE", "VERY_ACTIVE"]
GoalValue = Literal["MAINTAIN", "LOSE", "GAIN"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,  # Allows ORM objects -> schema conversion
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------
# Products
# ---------------------------------------------------------

class ProductCreateIn(CamelModel):
    name: NonEmptyStr
    brand: Optional[str] = None
    kcal100: int = Field(ge=0)
    protein100: float = Field(ge=0)
    fat100: float = Field(ge=0)
    carbs100: float = Field(ge=0)


class ProductSearchIn(CamelModel):
    query: Optional[str] = None
    limit: Optional[int] = None


class ProductOut(CamelModel):
    id: str
    name: str
    brand: Optional[str] = None
    normalized_name: str
    scope: str
    status: str
    source: str
    kcal100: int
    protein100: float
    fat100: float
    carbs100: float
    created_at: datetime


# ---------------------------------------------------------
# Users / profile
# ---------------------------------------------------------

class UserProfileUpsertIn(CamelModel):
    """
    Partial update: fields left out keep their stored value.
    birthDate stays a string here, users.py checks it is a real date.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    sex: Optional[SexValue] = None
    birth_date: Optional[str] = None
    height_cm: Optional[int] = Field(default=None, gt=0)
    weight_kg: Optional[float] = Field(default=None, gt=0)
    activity_level: Optional[ActivityLevelValue] = None
    goal: Optional[GoalValue] = None
    calorie_delta: Optional[int] = None


class UserProfileOut(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    sex: Optional[str] = None
    birth_date: Optional[date] = None
    height_cm: Optional[int] = None
    weight_kg: Optional[float] = None
    activity_level: Optional[str] = None
    goal: Optional[str] = None
    calorie_delta: Optional[int] = None


class TargetsOut(CamelModel):
    kcal: Optional[int] = None
    protein: Optional[int] = None
    fat: Optional[int] = None
    carbs: Optional[int] = None


class UserMeOut(CamelModel):
    profile: Optional[UserProfileOut] = None
    targets: TargetsOut


# ---------------------------------------------------------
# Recipe drafts: input
# ---------------------------------------------------------
# clientRequestId = idempotency key (optional everywhere)
# ---------------------------------------------------------

class MacrosPer100In(CamelModel):
    kcal100: float = Field(ge=0)
    protein100: float = Field(ge=0)
    fat100: float = Field(ge=0)
    carbs100: float = Field(ge=0)


class IngredientIn(CamelModel):
    original_text: Optional[str] = None
    name: NonEmptyStr
    amount: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    product_id: Optional[str] = None
    macros_per100: Optional[MacrosPer100In] = None
    assumptions: Optional[dict[str, Any]] = None
    order: Optional[int] = Field(default=None, ge=1)


class RecipeDraftCreateIn(CamelModel):
    title: NonEmptyStr
    category: Optional[str] = None
    description: Optional[str] = None
    servings: Optional[int] = Field(default=None, ge=0)
    source_recipe_id: Optional[str] = None
    client_request_id: Optional[str] = None


class AddIngredientIn(CamelModel):
    draft_id: NonEmptyStr
    ingredient: IngredientIn
    client_request_id: Optional[str] = None


class RemoveIngredientIn(CamelModel):
    draft_id: NonEmptyStr
    ingredient_id: NonEmptyStr
    client_request_id: Optional[str] = None


class SetStepsIn(CamelModel):
    draft_id: NonEmptyStr
    steps: list[NonEmptyStr]
    client_request_id: Optional[str] = None


class DraftIdIn(CamelModel):
    draft_id: NonEmptyStr
    client_request_id: Optional[str] = None


class ClientRequestIn(CamelModel):
    client_request_id: Optional[str] = None


class RecipeIdIn(CamelModel):
    recipe_id: NonEmptyStr


class RecipeSearchIn(CamelModel):
    query: Optional[str] = None
    category: Optional[str] = None
    limit: Optional[int] = None


# ---------------------------------------------------------
# Recipe drafts: output
# ---------------------------------------------------------

class DraftIngredientOut(CamelModel):
    id: str
    draft_id: str
    order: int
    original_text: Optional[str] = None
    name: str
    amount: Optional[float] = None
    unit: Optional[str] = None
    product_id: Optional[str] = None
    kcal100: Optional[float] = None
    protein100: Optional[float] = None
    fat100: Optional[float] = None
    carbs100: Optional[float] = None
    assumptions: Optional[dict[str, Any]] = None


class DraftStepOut(CamelModel):
    id: str
    draft_id: str
    order: int
    text: str


class RecipeDraftOut(CamelModel):
    id: str
    owner_user_id: Optional[str] = None
    title: str
    category: Optional[str] = None
    description: Optional[str] = None
    servings: Optional[int] = None
    status: str
    source_recipe_id: Optional[str] = None
    ingredients: list[DraftIngredientOut] = []
    steps: list[DraftStepOut] = []
    nutrition_total: Optional[dict[str, float]] = None
    nutrition_per_serving: Optional[dict[str, float]] = None
    created_at: datetime
    updated_at: datetime


class MissingIngredientOut(CamelModel):
    ingredient_id: str
    name: str
    missing: list[str]
    hint: str


class DraftValidationOut(CamelModel):
    is_valid: bool
    missing_fields: list[str]
    missing_ingredients: list[MissingIngredientOut]


# ---------------------------------------------------------
# Published recipes
# ---------------------------------------------------------

class RecipeIngredientOut(CamelModel):
    id: str
    recipe_id: str
    order: Optional[int] = None
    original_text: Optional[str] = None
    name: str
    amount: Optional[float] = None
    unit: Optional[str] = None
    product_id: Optional[str] = None
    kcal100: Optional[float] = None
    protein100: Optional[float] = None
    fat100: Optional[float] = None
    carbs100: Optional[float] = None
    assumptions: Optional[dict[str, Any]] = None


class RecipeStepOut(CamelModel):
    id: str
    recipe_id: str
    order: int
    text: str


class RecipeOut(CamelModel):
    id: str
    owner_user_id: Optional[str] = None
    title: str
    category: Optional[str] = None
    description: Optional[str] = None
    servings: Optional[int] = None
    visibility: str
    ingredients: list[RecipeIngredientOut] = []
    steps: list[RecipeStepOut] = []
    nutrition_total: Optional[dict[str, float]] = None
    nutrition_per_serving: Optional[dict[str, float]] = None
    created_at: datetime
    updated_at: datetime


class RecipeSummaryOut(CamelModel):
    id: str
    title: str
    category: Optional[str] = None
    updated_at: datetime
