# foodieai/main.py
# ---------------------------------------------------------
# This is the ENTRY POINT of the FastAPI application.
#
# Responsibilities of this file:
# 1) Create the FastAPI app
# 2) Create database tables on startup (dev-only)
# 3) Turn domain errors into HTTP responses
# 4) Attach API routes
#
# This file should stay SMALL.
# Business logic and DB code live elsewhere.
#
# Run locally:
#   uvicorn foodieai.main:app --app-dir backend --reload
# ---------------------------------------------------------

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import foodieai.models  # registers every table on Base.metadata
from foodieai.config import config
from foodieai.db import Base, engine
from foodieai.errors import DomainError, to_tool_error
from foodieai.logger import get_logger
from foodieai.routes import router

logger = get_logger(__name__)


# ---------------------------------------------------------
# Create FastAPI application
# ---------------------------------------------------------

app = FastAPI(
    title="FoodieAI API",
    version="1.0.0",
    description="Nutrition tracking backend with an MCP (JSON-RPC) tool gateway",
)

# ---------------------------------------------------------
# Create database tables (DEV ONLY)
# ---------------------------------------------------------
# Looks at every class that inherits from Base (models.py)
# and creates missing tables.
# In production this is replaced by migrations.
# ---------------------------------------------------------

Base.metadata.create_all(bind=engine)


# ---------------------------------------------------------
# Domain errors -> HTTP
# ---------------------------------------------------------
# Same taxonomy as the MCP gateway:
#   NOT_FOUND 404, DRAFT_INCOMPLETE 422, VALIDATION_ERROR 400,
#   AUTH_REQUIRED 401
# ---------------------------------------------------------

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    error = to_tool_error(exc)
    logger.warning(f"{request.method} {request.url.path} -> {error.status} {error.kind}: {error.message}")
    content = {"error": error.kind, "message": error.message}
    content.update(error.data)
    return JSONResponse(status_code=error.status, content=content)


# ---------------------------------------------------------
# Attach routes to the app
# ---------------------------------------------------------

app.include_router(router)


if __name__ == "__main__":
    uvicorn.run("foodieai.main:app", host="0.0.0.0", port=config.PORT)
