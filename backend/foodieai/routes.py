# foodieai/routes.py
# ---------------------------------------------------------
# This file defines API ROUTES (endpoints).
#
# Two surfaces over the same services:
# - POST /mcp       JSON-RPC tool gateway (LLM clients)
# - /v1/...         plain REST (apps, scripts, debugging)
#
# routes.py stays THIN:
#   1) read request input
#   2) call a service function (drafts / products / users / recipes)
#   3) return the result
#
# Domain errors (not found, incomplete draft, ...) are turned
# into HTTP status codes by the handlers registered in main.py.
# ---------------------------------------------------------

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from foodieai import drafts, products, recipes, users
from foodieai.auth import current_user_id, optional_user_id
from foodieai.db import get_db
from foodieai.mcp.mappers import format_search_result
from foodieai.mcp.router import SERVER_NAME, handle_jsonrpc
from foodieai.schemas import (
    AddIngredientIn,
    ClientRequestIn,
    DraftValidationOut,
    ProductCreateIn,
    ProductOut,
    RecipeDraftCreateIn,
    RecipeDraftOut,
    RecipeOut,
    RecipeSummaryOut,
    RemoveIngredientIn,
    SetStepsIn,
    UserMeOut,
    UserProfileUpsertIn,
)

router = APIRouter()


# ---------------------------------------------------------
# Health
# ---------------------------------------------------------

@router.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------
# MCP gateway
# ---------------------------------------------------------
# GET  /mcp  -> status ping
# POST /mcp  -> JSON-RPC envelope in, JSON-RPC envelope out
#
# The body is parsed by hand so that malformed JSON still gets
# a JSON-RPC "Invalid Request" answer instead of a 422.
# ---------------------------------------------------------

@router.get("/mcp")
def mcp_status():
    return {"name": SERVER_NAME, "status": "ok"}


@router.post("/mcp")
async def mcp_endpoint(request: Request, db: Session = Depends(get_db)):
    raw = await request.body()
    try:
        body: Any = json.loads(raw) if raw else None
    except ValueError:
        body = None

    # DB work is blocking, keep it off the event loop
    return await run_in_threadpool(handle_jsonrpc, body, dict(request.headers), db)


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------

@router.get("/v1/me", response_model=UserMeOut)
def get_me(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    return users.get_me(db, user_id)


@router.put("/v1/profile", response_model=UserMeOut)
def upsert_profile(
    payload: UserProfileUpsertIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    profile = users.upsert_profile(db, user_id, payload)
    return users.profile_to_me(profile)


@router.post("/v1/profile/recalculate", response_model=UserMeOut)
def recalculate_targets(user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    profile = users.recalculate_targets(db, user_id)
    return users.profile_to_me(profile)


# ---------------------------------------------------------
# Products
# ---------------------------------------------------------

@router.post("/v1/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreateIn,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    return products.create_manual(db, payload, owner_user_id=user_id)


@router.get("/v1/products")
def search_products(
    query: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return format_search_result(products.search_products(db, query, limit))


# ---------------------------------------------------------
# Recipe drafts
# ---------------------------------------------------------
# Example flow:
#   POST /v1/recipe-drafts                 {"title": "Omelette"}
#   POST /v1/recipe-drafts/ingredients     {"draftId": ..., "ingredient": {...}}
#   PUT  /v1/recipe-drafts/steps           {"draftId": ..., "steps": [...]}
#   POST /v1/recipe-drafts/{id}/publish
# ---------------------------------------------------------

@router.post("/v1/recipe-drafts", response_model=RecipeDraftOut, status_code=201)
def create_draft(
    payload: RecipeDraftCreateIn,
    user_id: Optional[str] = Depends(optional_user_id),
    db: Session = Depends(get_db),
):
    return drafts.create_draft(db, payload, owner_user_id=user_id)


@router.post("/v1/recipe-drafts/ingredients", response_model=RecipeDraftOut)
def add_ingredient(payload: AddIngredientIn, db: Session = Depends(get_db)):
    return drafts.add_ingredient(db, payload)


@router.delete("/v1/recipe-drafts/ingredients", response_model=RecipeDraftOut)
def remove_ingredient(payload: RemoveIngredientIn, db: Session = Depends(get_db)):
    return drafts.remove_ingredient(db, payload.draft_id, payload.ingredient_id, payload.client_request_id)


@router.put("/v1/recipe-drafts/steps", response_model=RecipeDraftOut)
def set_steps(payload: SetStepsIn, db: Session = Depends(get_db)):
    return drafts.set_steps(db, payload.draft_id, payload.steps, payload.client_request_id)


@router.get("/v1/recipe-drafts/{draft_id}", response_model=RecipeDraftOut)
def get_draft(draft_id: str, db: Session = Depends(get_db)):
    return drafts.get_draft(db, draft_id)


@router.post("/v1/recipe-drafts/{draft_id}/validate", response_model=DraftValidationOut)
def validate_draft(draft_id: str, db: Session = Depends(get_db)):
    return drafts.validate_draft(db, draft_id)


@router.post("/v1/recipe-drafts/{draft_id}/recalculate", response_model=RecipeDraftOut)
def recalculate_draft(draft_id: str, db: Session = Depends(get_db)):
    return drafts.recalc_draft(db, draft_id)


@router.post("/v1/recipe-drafts/{draft_id}/publish", response_model=RecipeOut)
def publish_draft(
    draft_id: str,
    payload: Optional[ClientRequestIn] = None,
    db: Session = Depends(get_db),
):
    key = payload.client_request_id if payload else None
    return drafts.publish_draft(db, draft_id, key)


# ---------------------------------------------------------
# Published recipes
# ---------------------------------------------------------

@router.get("/v1/recipes", response_model=list[RecipeSummaryOut])
def search_recipes(
    query: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    limit: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    return recipes.search_recipes(db, query, category, limit)


@router.get("/v1/recipes/{recipe_id}", response_model=RecipeOut)
def get_recipe(recipe_id: str, db: Session = Depends(get_db)):
    return recipes.get_recipe(db, recipe_id)


@router.post("/v1/recipes/{recipe_id}/draft", response_model=RecipeDraftOut)
def draft_from_recipe(
    recipe_id: str,
    user_id: Optional[str] = Depends(optional_user_id),
    db: Session = Depends(get_db),
):
    return drafts.draft_from_recipe(db, recipe_id, owner_user_id=user_id)
