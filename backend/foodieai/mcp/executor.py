# foodieai/mcp/executor.py
# ---------------------------------------------------------
# Runs one tool call:
#   1) resolve name (aliases)        -> NOT_FOUND
#   2) enforce auth                  -> AUTH_REQUIRED
#   3) schema coercion               -> VALIDATION_ERROR
#   4) domain normalization (units, names, limits)
#   5) typed DTO check (if any)      -> VALIDATION_ERROR
#   6) handler; DomainError          -> ToolError taxonomy
# ---------------------------------------------------------

from typing import Any

from foodieai.errors import DomainError, ToolError, to_tool_error
from foodieai.mcp.normalize import normalize_arguments
from foodieai.mcp.registry import ToolContext, ToolDefinition, ToolPayload, ToolRegistry
from foodieai.mcp.schema import validate_arguments, validate_dto


def resolve_tool(registry: ToolRegistry, name: str) -> ToolDefinition:
    definition = registry.resolve(name)
    if definition is None:
        raise ToolError.tool_not_found(name)
    return definition


def prepare_arguments(definition: ToolDefinition, arguments: dict[str, Any]) -> Any:
    args = validate_arguments(definition.input_schema, arguments)
    args = normalize_arguments(definition.name, args)
    if definition.dto is not None:
        return validate_dto(definition.dto, args)
    return args


def execute_tool(
    registry: ToolRegistry,
    name: str,
    arguments: dict[str, Any],
    ctx: ToolContext,
) -> tuple[ToolDefinition, ToolPayload]:
    """Returns the canonical definition together with the handler's payload."""
    definition = resolve_tool(registry, name)

    if definition.requires_auth and not ctx.user_id:
        raise ToolError.auth_required(definition.name)

    args = prepare_arguments(definition, arguments)

    try:
        payload = definition.handler(args, ctx)
    except DomainError as exc:
        raise to_tool_error(exc) from exc

    return definition, payload
