# foodieai/errors.py
# ---------------------------------------------------------
# Exceptions shared by the services, the REST routes and the
# MCP gateway.
#
# Two layers:
# 1) DomainError and subclasses: raised by services
#    (drafts.py, users.py, products.py, recipes.py, auth.py)
# 2) ToolError: the single error shape the gateway returns
#    to tool callers (kind + JSON-RPC code + HTTP status)
# ---------------------------------------------------------

from typing import Any


# ---------------------------------------------------------
# Domain errors
# ---------------------------------------------------------

class DomainError(Exception):
    """Base class for errors raised by the service layer."""


class NotFoundError(DomainError):
    entity = "Entity"

    def __init__(self, entity_id: str | None = None, message: str | None = None):
        self.entity_id = entity_id
        if message is None:
            message = f"{self.entity} not found" if entity_id is None else f"{self.entity} {entity_id} not found"
        super().__init__(message)


class RecipeDraftNotFoundError(NotFoundError):
    entity = "Recipe draft"


class RecipeDraftIngredientNotFoundError(NotFoundError):
    entity = "Recipe draft ingredient"


class RecipeNotFoundError(NotFoundError):
    entity = "Recipe"


class ProductNotFoundError(NotFoundError):
    entity = "Product"


class UserNotFoundError(NotFoundError):
    entity = "User"


class DraftIncompleteError(DomainError):
    def __init__(self, missing_fields: list[str], missing_ingredients: list[dict[str, Any]]):
        self.missing_fields = missing_fields
        self.missing_ingredients = missing_ingredients
        super().__init__("Recipe draft is incomplete")


class DraftNotEditableError(DomainError):
    def __init__(self, draft_id: str, status: str):
        self.draft_id = draft_id
        self.status = status
        super().__init__(f"Recipe draft {draft_id} is {status} and can no longer be changed")


class MissingFieldsError(DomainError):
    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__("Missing required profile fields: " + ", ".join(fields))


class InvalidInputError(DomainError):
    """Business-rule validation failure on a single field."""

    def __init__(self, path: str, expected: str, got: Any = None, message: str | None = None):
        self.path = path
        self.expected = expected
        self.got = got
        super().__init__(message or f"Invalid value for {path}: expected {expected}")


class AuthError(DomainError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


# ---------------------------------------------------------
# ToolError
# ---------------------------------------------------------
# kind               JSON-RPC code   HTTP status
# VALIDATION_ERROR   -32000          400
# NOT_FOUND          -32000          404   (unknown tool: -32601)
# DRAFT_INCOMPLETE   -32000          422
# AUTH_REQUIRED      401             401
# INTERNAL_ERROR     -32000          500
# ---------------------------------------------------------

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
DRAFT_INCOMPLETE = "DRAFT_INCOMPLETE"
AUTH_REQUIRED = "AUTH_REQUIRED"
INTERNAL_ERROR = "INTERNAL_ERROR"

APPLICATION_ERROR_CODE = -32000
METHOD_NOT_FOUND_CODE = -32601
INVALID_REQUEST_CODE = -32600

_STATUS_BY_KIND = {
    VALIDATION_ERROR: 400,
    NOT_FOUND: 404,
    DRAFT_INCOMPLETE: 422,
    AUTH_REQUIRED: 401,
    INTERNAL_ERROR: 500,
}


class ToolError(Exception):
    def __init__(
        self,
        kind: str,
        message: str,
        data: dict[str, Any] | None = None,
        code: int | None = None,
    ):
        self.kind = kind
        self.message = message
        self.data = data or {}
        self.status = _STATUS_BY_KIND.get(kind, 500)
        if code is None:
            code = 401 if kind == AUTH_REQUIRED else APPLICATION_ERROR_CODE
        self.code = code
        super().__init__(message)

    @classmethod
    def validation(cls, fields: list[dict[str, Any]], message: str = "Invalid arguments") -> "ToolError":
        return cls(VALIDATION_ERROR, message, {"fields": fields})

    @classmethod
    def tool_not_found(cls, name: str) -> "ToolError":
        return cls(NOT_FOUND, f"Unknown tool: {name}", {"tool": name}, code=METHOD_NOT_FOUND_CODE)

    @classmethod
    def auth_required(cls, tool: str) -> "ToolError":
        return cls(AUTH_REQUIRED, f"Tool {tool} requires an authenticated user", {"tool": tool})

    @classmethod
    def internal(cls) -> "ToolError":
        return cls(INTERNAL_ERROR, "Internal error")


# ---------------------------------------------------------
# Domain -> ToolError mapping
# ---------------------------------------------------------

def draft_incomplete_hints(missing_fields: list[str], missing_ingredients: list[dict[str, Any]]) -> list[str]:
    """Actionable follow-up calls for an incomplete draft."""
    hints = []
    if "title" in missing_fields:
        hints.append("Set a non-empty title (recreate the draft with recipeDraft.create)")
    if "ingredients" in missing_fields:
        hints.append("Add ingredients with recipeDraft.addIngredient")
    if "steps" in missing_fields:
        hints.append("Provide cooking steps with recipeDraft.setSteps")
    for item in missing_ingredients:
        hints.append(
            f"Ingredient '{item.get('name')}': call recipeDraft.addIngredient with order of the "
            "existing ingredient and either productId (see product.search) or macrosPer100"
        )
    if hints:
        hints.append("Run recipeDraft.validate, then recipeDraft.publish")
    return hints


def to_tool_error(exc: DomainError) -> ToolError:
    if isinstance(exc, NotFoundError):
        data = {"entity": exc.entity}
        if exc.entity_id is not None:
            data["id"] = exc.entity_id
        return ToolError(NOT_FOUND, str(exc), data)

    if isinstance(exc, DraftIncompleteError):
        return ToolError(
            DRAFT_INCOMPLETE,
            str(exc),
            {
                "missingFields": exc.missing_fields,
                "missingIngredients": exc.missing_ingredients,
                "nextSteps": draft_incomplete_hints(exc.missing_fields, exc.missing_ingredients),
            },
        )

    if isinstance(exc, DraftNotEditableError):
        return ToolError.validation(
            [{"path": "draftId", "expected": "draft in DRAFT status", "got": exc.status}],
            message=str(exc),
        )

    if isinstance(exc, MissingFieldsError):
        return ToolError.validation(
            [{"path": name, "expected": "value", "got": "missing"} for name in exc.fields],
            message=str(exc),
        )

    if isinstance(exc, InvalidInputError):
        return ToolError.validation(
            [{"path": exc.path, "expected": exc.expected, "got": exc.got}],
            message=str(exc),
        )

    if isinstance(exc, AuthError):
        return ToolError(AUTH_REQUIRED, str(exc))

    return ToolError.internal()
