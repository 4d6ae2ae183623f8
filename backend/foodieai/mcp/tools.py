# foodieai/mcp/tools.py
# ---------------------------------------------------------
# The tool catalog: handlers + their definitions.
#
# Handlers are THIN (same idea as routes.py):
#   1) take already validated arguments (dict or DTO)
#   2) call the service module (drafts / products / users / recipes)
#   3) wrap the result in a ToolPayload (summary text + data)
#
# build_registry() wires everything into a ToolRegistry.
# The module-level `registry` is built once at import and is
# read-only afterwards.
# ---------------------------------------------------------

from typing import Any, Optional

from foodieai import drafts, products, recipes, users
from foodieai.mcp.mappers import format_search_result, format_user_me
from foodieai.mcp.registry import (
    ALIASES,
    AUTH_REQUIRED,
    ToolContext,
    ToolDefinition,
    ToolExample,
    ToolPayload,
    ToolRegistry,
)
from foodieai.mcp.schema import array, boolean, free_object, number, obj, string
from foodieai.schemas import (
    AddIngredientIn,
    DraftIdIn,
    ProductCreateIn,
    ProductOut,
    ProductSearchIn,
    RecipeDraftCreateIn,
    RecipeIdIn,
    RecipeSearchIn,
    RemoveIngredientIn,
    SetStepsIn,
    UserProfileUpsertIn,
)

TAG_META = "meta"
TAG_PRODUCTS = "products"
TAG_USERS = "users"
TAG_RECIPES = "recipes"
TAG_DRAFTS = "drafts"

# What each tag is for (mcp.capabilities / mcp.help)
TAG_INTENTS = {
    TAG_META: "Discover tools and how to use them",
    TAG_PRODUCTS: "Find or add catalog products with nutrition per 100 g",
    TAG_USERS: "Read or update the caller's profile and daily targets",
    TAG_RECIPES: "Search and read published recipes",
    TAG_DRAFTS: "Author a recipe step by step, then publish it",
}

DRAFT_FLOW = [
    "recipeDraft.create (title, optional category/description/servings)",
    "recipeDraft.addIngredient for every ingredient (productId from product.search, or macrosPer100)",
    "recipeDraft.setSteps with the full list of steps",
    "recipeDraft.validate until isValid is true",
    "recipeDraft.publish",
]


# ---------------------------------------------------------
# Summaries
# ---------------------------------------------------------

def _format_kcal(nutrition: Optional[dict[str, Any]]) -> str:
    if not nutrition:
        return "0 kcal"
    return f"{nutrition.get('calories', 0):.0f} kcal"


def _draft_summary(prefix: str, draft: dict[str, Any]) -> str:
    return (
        f"{prefix} '{draft['title']}' [{draft['status']}]: "
        f"{len(draft['ingredients'])} ingredient(s), {len(draft['steps'])} step(s), "
        f"{_format_kcal(draft.get('nutritionTotal'))} total"
    )


def _me_summary(me: dict[str, Any]) -> str:
    targets = me["targets"]
    if targets.get("kcal") is None:
        return "Profile loaded, targets not calculated yet (need sex, birthDate, heightCm, weightKg, activityLevel)"
    return (
        f"Daily targets: {targets['kcal']} kcal, protein {targets['protein']} g, "
        f"fat {targets['fat']} g, carbs {targets['carbs']} g"
    )


# ---------------------------------------------------------
# Products
# ---------------------------------------------------------

def product_create_manual(args: ProductCreateIn, ctx: ToolContext) -> ToolPayload:
    product = products.create_manual(ctx.db, args, owner_user_id=ctx.user_id)
    data = ProductOut.model_validate(product).to_wire()
    return ToolPayload(text=f"Product '{product.name}' saved ({product.kcal100} kcal/100 g)", json=data)


def product_search(args: ProductSearchIn, ctx: ToolContext) -> ToolPayload:
    found = products.search_products(ctx.db, args.query, args.limit)
    result = format_search_result(found)
    return ToolPayload(text=f"Found {result['count']} product(s)", json=result)


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------

def user_me(args: dict[str, Any], ctx: ToolContext) -> ToolPayload:
    me = format_user_me(users.get_me(ctx.db, ctx.user_id))
    return ToolPayload(text=_me_summary(me), json=me)


def user_profile_upsert(args: UserProfileUpsertIn, ctx: ToolContext) -> ToolPayload:
    profile = users.upsert_profile(ctx.db, ctx.user_id, args)
    me = format_user_me(users.profile_to_me(profile))
    return ToolPayload(text="Profile saved. " + _me_summary(me), json=me)


def user_targets_recalculate(args: dict[str, Any], ctx: ToolContext) -> ToolPayload:
    profile = users.recalculate_targets(ctx.db, ctx.user_id)
    me = format_user_me(users.profile_to_me(profile))
    return ToolPayload(text=_me_summary(me), json=me)


# ---------------------------------------------------------
# Recipe drafts
# ---------------------------------------------------------

def draft_create(args: RecipeDraftCreateIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.create_draft(ctx.db, args, owner_user_id=ctx.user_id)
    return ToolPayload(text=_draft_summary("Draft created", draft), json=draft)


def draft_from_recipe(args: RecipeIdIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.draft_from_recipe(ctx.db, args.recipe_id, owner_user_id=ctx.user_id)
    return ToolPayload(text=_draft_summary("Draft", draft), json=draft)


def draft_add_ingredient(args: AddIngredientIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.add_ingredient(ctx.db, args)
    return ToolPayload(text=_draft_summary("Ingredient saved to", draft), json=draft)


def draft_remove_ingredient(args: RemoveIngredientIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.remove_ingredient(ctx.db, args.draft_id, args.ingredient_id, args.client_request_id)
    return ToolPayload(text=_draft_summary("Ingredient removed from", draft), json=draft)


def draft_set_steps(args: SetStepsIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.set_steps(ctx.db, args.draft_id, args.steps, args.client_request_id)
    return ToolPayload(text=_draft_summary("Steps saved to", draft), json=draft)


def draft_get(args: DraftIdIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.get_draft(ctx.db, args.draft_id)
    return ToolPayload(text=_draft_summary("Draft", draft), json=draft)


def draft_validate(args: DraftIdIn, ctx: ToolContext) -> ToolPayload:
    result = drafts.validate_draft(ctx.db, args.draft_id)
    if result["isValid"]:
        text = "Draft is complete and can be published"
    else:
        text = (
            f"Draft is incomplete: missing fields {result['missingFields'] or '-'}, "
            f"{len(result['missingIngredients'])} ingredient(s) without productId or macrosPer100"
        )
    return ToolPayload(text=text, json=result)


def draft_recalc(args: DraftIdIn, ctx: ToolContext) -> ToolPayload:
    draft = drafts.recalc_draft(ctx.db, args.draft_id)
    return ToolPayload(text=_draft_summary("Nutrition recalculated for", draft), json=draft)


def draft_publish(args: DraftIdIn, ctx: ToolContext) -> ToolPayload:
    recipe = drafts.publish_draft(ctx.db, args.draft_id, args.client_request_id)
    return ToolPayload(
        text=f"Recipe '{recipe['title']}' published ({_format_kcal(recipe.get('nutritionTotal'))} total)",
        json=recipe,
    )


# ---------------------------------------------------------
# Published recipes
# ---------------------------------------------------------

def recipe_search(args: RecipeSearchIn, ctx: ToolContext) -> ToolPayload:
    items = recipes.search_recipes(ctx.db, args.query, args.category, args.limit)
    return ToolPayload(text=f"Found {len(items)} recipe(s)", json={"count": len(items), "items": items})


def recipe_get(args: RecipeIdIn, ctx: ToolContext) -> ToolPayload:
    recipe = recipes.get_recipe(ctx.db, args.recipe_id)
    return ToolPayload(text=f"Recipe '{recipe['title']}'", json=recipe)


# ---------------------------------------------------------
# Input schemas
# ---------------------------------------------------------

CLIENT_REQUEST_ID = string(nullable=True, description="Idempotency key; retries with the same key are replayed")

CREATE_CLIENT_REQUEST_ID = string(
    nullable=True,
    description=(
        "Idempotency key, scoped to the caller. Anonymous callers share one scope, "
        "so send a globally unique value (e.g. a UUID)"
    ),
)

MACROS_PER_100 = obj(
    {
        "kcal100": number(),
        "protein100": number(),
        "fat100": number(),
        "carbs100": number(),
    },
    required=["kcal100", "protein100", "fat100", "carbs100"],
    nullable=True,
    description="Estimated macros per 100 g/ml (snapshot ingredient)",
)

INGREDIENT = obj(
    {
        "originalText": string(nullable=True),
        "name": string(),
        "amount": number(nullable=True),
        "unit": string(nullable=True, description="g, kg, ml, l or pcs (localized synonyms accepted)"),
        "productId": string(nullable=True),
        "macrosPer100": MACROS_PER_100,
        "assumptions": free_object(nullable=True),
        "order": number(nullable=True, description="Position; an existing ingredient at this order is replaced"),
    },
    required=["name"],
)

DRAFT_ID_ONLY = obj({"draftId": string()}, required=["draftId"])
RECIPE_ID_ONLY = obj({"recipeId": string()}, required=["recipeId"])
NO_ARGUMENTS = obj({})

DRAFT_VALIDATION_OUTPUT = obj(
    {
        "isValid": boolean(),
        "missingFields": array(string()),
        "missingIngredients": array(free_object()),
    },
    required=["isValid", "missingFields", "missingIngredients"],
)

PRODUCT_SEARCH_OUTPUT = obj(
    {"count": number(), "items": array(free_object())},
    required=["count", "items"],
)


# ---------------------------------------------------------
# Registry
# ---------------------------------------------------------

def _tool_info(definition: ToolDefinition) -> dict[str, Any]:
    info: dict[str, Any] = {
        "name": definition.name,
        "description": definition.description,
        "auth": definition.auth,
    }
    if definition.examples:
        info["example"] = definition.examples[0].arguments
    return info


def build_registry() -> ToolRegistry:
    registry = ToolRegistry(aliases=ALIASES)

    def capabilities(args: dict[str, Any], ctx: ToolContext) -> ToolPayload:
        groups: dict[str, dict[str, Any]] = {}
        for definition in registry.definitions():
            for tag in definition.tags:
                group = groups.setdefault(tag, {"intent": TAG_INTENTS.get(tag, ""), "tools": []})
                group["tools"].append(definition.name)
        data = {"groups": groups, "aliases": dict(ALIASES), "authenticated": ctx.user_id is not None}
        return ToolPayload(text=f"{len(registry)} tools in {len(groups)} groups", json=data)

    def help_topic(args: dict[str, Any], ctx: ToolContext) -> ToolPayload:
        topic = args.get("topic")
        if not topic:
            data = {"topics": TAG_INTENTS, "hint": "Call mcp.help with one of the topics"}
            return ToolPayload(text="Available help topics: " + ", ".join(TAG_INTENTS), json=data)

        tools = [_tool_info(d) for d in registry.definitions() if topic in d.tags]
        data: dict[str, Any] = {"topic": topic, "intent": TAG_INTENTS[topic], "tools": tools}
        if topic == TAG_DRAFTS:
            data["flow"] = DRAFT_FLOW
        return ToolPayload(text=f"Help for {topic}: {len(tools)} tool(s)", json=data)

    definitions = [
        # --- meta ---
        ToolDefinition(
            name="mcp.capabilities",
            description="List tool names grouped by intent",
            input_schema=NO_ARGUMENTS,
            handler=capabilities,
            tags=(TAG_META,),
        ),
        ToolDefinition(
            name="mcp.help",
            description="Usage guide for a topic with example arguments",
            input_schema=obj({"topic": string(nullable=True, enum=list(TAG_INTENTS))}),
            handler=help_topic,
            tags=(TAG_META,),
            examples=(ToolExample("Help: recipe drafts", {"topic": TAG_DRAFTS}),),
        ),
        # --- products ---
        ToolDefinition(
            name="product.createManual",
            description="Create a product manually in FoodieAI",
            input_schema=obj(
                {
                    "name": string(),
                    "brand": string(nullable=True),
                    "kcal100": number(),
                    "protein100": number(),
                    "fat100": number(),
                    "carbs100": number(),
                },
                required=["name", "kcal100", "protein100", "fat100", "carbs100"],
            ),
            handler=product_create_manual,
            tags=(TAG_PRODUCTS,),
            auth=AUTH_REQUIRED,
            public=False,
            dto=ProductCreateIn,
            examples=(
                ToolExample(
                    "Create product",
                    {"name": "Salmon", "kcal100": 208, "protein100": 20, "fat100": 13, "carbs100": 0},
                ),
            ),
        ),
        ToolDefinition(
            name="product.search",
            description="Search products by name or brand",
            input_schema=obj({"query": string(nullable=True), "limit": number(nullable=True)}),
            output_schema=PRODUCT_SEARCH_OUTPUT,
            handler=product_search,
            tags=(TAG_PRODUCTS,),
            dto=ProductSearchIn,
            examples=(ToolExample("Search products", {"query": "yogurt"}),),
        ),
        # --- users ---
        ToolDefinition(
            name="user.me",
            description="Get current user profile and daily targets",
            input_schema=NO_ARGUMENTS,
            handler=user_me,
            tags=(TAG_USERS,),
            auth=AUTH_REQUIRED,
            public=False,
        ),
        ToolDefinition(
            name="userProfile.upsert",
            description="Create or update user profile and calculate targets",
            input_schema=obj(
                {
                    "firstName": string(nullable=True),
                    "lastName": string(nullable=True),
                    "sex": string(nullable=True, enum=["FEMALE", "MALE"]),
                    "birthDate": string(nullable=True, description="YYYY-MM-DD"),
                    "heightCm": number(nullable=True),
                    "weightKg": number(nullable=True),
                    "activityLevel": string(nullable=True, enum=["SEDENTARY", "LIGHT", "MODERATE", "VERY_ACTIVE"]),
                    "goal": string(nullable=True, enum=["MAINTAIN", "LOSE", "GAIN"]),
                    "calorieDelta": number(nullable=True),
                }
            ),
            handler=user_profile_upsert,
            tags=(TAG_USERS,),
            auth=AUTH_REQUIRED,
            public=False,
            dto=UserProfileUpsertIn,
            examples=(
                ToolExample(
                    "Upsert profile",
                    {"firstName": "Ira", "sex": "FEMALE", "heightCm": 168, "weightKg": 63, "goal": "LOSE"},
                ),
            ),
        ),
        ToolDefinition(
            name="userTargets.recalculate",
            description="Recalculate daily calorie and macro targets",
            input_schema=NO_ARGUMENTS,
            handler=user_targets_recalculate,
            tags=(TAG_USERS,),
            auth=AUTH_REQUIRED,
            public=False,
        ),
        # --- drafts ---
        ToolDefinition(
            name="recipeDraft.create",
            description=(
                "Create a recipe draft, optionally cloned from a published recipe. "
                "clientRequestId replays per caller; anonymous callers share one key space"
            ),
            input_schema=obj(
                {
                    "title": string(),
                    "category": string(nullable=True),
                    "description": string(nullable=True),
                    "servings": number(nullable=True),
                    "sourceRecipeId": string(nullable=True),
                    "clientRequestId": CREATE_CLIENT_REQUEST_ID,
                },
                required=["title"],
            ),
            handler=draft_create,
            tags=(TAG_DRAFTS,),
            dto=RecipeDraftCreateIn,
            examples=(ToolExample("Create draft", {"title": "Omelette", "category": "breakfast"}),),
        ),
        ToolDefinition(
            name="recipeDraft.addIngredient",
            description="Add an ingredient to a draft (order auto-assigned if omitted)",
            input_schema=obj(
                {"draftId": string(), "ingredient": INGREDIENT, "clientRequestId": CLIENT_REQUEST_ID},
                required=["draftId", "ingredient"],
            ),
            handler=draft_add_ingredient,
            tags=(TAG_DRAFTS,),
            dto=AddIngredientIn,
            examples=(
                ToolExample(
                    "Snapshot ingredient",
                    {
                        "draftId": "draft_123",
                        "ingredient": {
                            "name": "Tomato",
                            "amount": 120,
                            "unit": "g",
                            "macrosPer100": {"kcal100": 18, "protein100": 0.9, "fat100": 0.2, "carbs100": 3.9},
                        },
                    },
                ),
            ),
        ),
        ToolDefinition(
            name="recipeDraft.removeIngredient",
            description="Remove an ingredient from a draft",
            input_schema=obj(
                {"draftId": string(), "ingredientId": string(), "clientRequestId": CLIENT_REQUEST_ID},
                required=["draftId", "ingredientId"],
            ),
            handler=draft_remove_ingredient,
            tags=(TAG_DRAFTS,),
            dto=RemoveIngredientIn,
            examples=(ToolExample("Remove ingredient", {"draftId": "draft_123", "ingredientId": "ing_1"}),),
        ),
        ToolDefinition(
            name="recipeDraft.setSteps",
            description="Replace all steps of a draft",
            input_schema=obj(
                {"draftId": string(), "steps": array(string()), "clientRequestId": CLIENT_REQUEST_ID},
                required=["draftId", "steps"],
            ),
            handler=draft_set_steps,
            tags=(TAG_DRAFTS,),
            dto=SetStepsIn,
            examples=(ToolExample("Set steps", {"draftId": "draft_123", "steps": ["Beat eggs", "Cook", "Serve"]}),),
        ),
        ToolDefinition(
            name="recipeDraft.get",
            description="Get a draft with ingredients, steps and nutrition",
            input_schema=DRAFT_ID_ONLY,
            handler=draft_get,
            tags=(TAG_DRAFTS,),
            dto=DraftIdIn,
            examples=(ToolExample("Get draft", {"draftId": "draft_123"}),),
        ),
        ToolDefinition(
            name="recipeDraft.validate",
            description="Check whether a draft can be published",
            input_schema=DRAFT_ID_ONLY,
            output_schema=DRAFT_VALIDATION_OUTPUT,
            handler=draft_validate,
            tags=(TAG_DRAFTS,),
            dto=DraftIdIn,
            examples=(ToolExample("Validate draft", {"draftId": "draft_123"}),),
        ),
        ToolDefinition(
            name="recipeDraft.recalc",
            description="Recalculate draft nutrition totals and per-serving values",
            input_schema=DRAFT_ID_ONLY,
            handler=draft_recalc,
            tags=(TAG_DRAFTS,),
            dto=DraftIdIn,
        ),
        ToolDefinition(
            name="recipeDraft.publish",
            description="Publish a draft into a recipe (fails if incomplete)",
            input_schema=obj({"draftId": string(), "clientRequestId": CLIENT_REQUEST_ID}, required=["draftId"]),
            handler=draft_publish,
            tags=(TAG_DRAFTS,),
            dto=DraftIdIn,
            examples=(ToolExample("Publish draft", {"draftId": "draft_123", "clientRequestId": "req-publish-1"}),),
        ),
        ToolDefinition(
            name="recipeDraft.fromRecipe",
            description="Open (or reuse) a draft cloned from a published recipe",
            input_schema=RECIPE_ID_ONLY,
            handler=draft_from_recipe,
            tags=(TAG_DRAFTS, TAG_RECIPES),
            dto=RecipeIdIn,
            examples=(ToolExample("Edit a recipe", {"recipeId": "rec_123"}),),
        ),
        # --- recipes ---
        ToolDefinition(
            name="recipe.search",
            description="Search published recipes",
            input_schema=obj(
                {"query": string(nullable=True), "category": string(nullable=True), "limit": number(nullable=True)}
            ),
            handler=recipe_search,
            tags=(TAG_RECIPES,),
            dto=RecipeSearchIn,
            examples=(ToolExample("Search recipes", {"query": "omelette", "category": "breakfast", "limit": 5}),),
        ),
        ToolDefinition(
            name="recipe.get",
            description="Get a recipe by id",
            input_schema=RECIPE_ID_ONLY,
            handler=recipe_get,
            tags=(TAG_RECIPES,),
            dto=RecipeIdIn,
            examples=(ToolExample("Get recipe", {"recipeId": "rec_123"}),),
        ),
    ]

    for definition in definitions:
        registry.register(definition)

    return registry


registry = build_registry()
