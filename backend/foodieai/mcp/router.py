# foodieai/mcp/router.py
# ---------------------------------------------------------
# JSON-RPC 2.0 dispatcher behind POST /mcp.
#
# handle_jsonrpc() NEVER raises: every outcome (including bad
# envelopes and internal failures) becomes a JSON-RPC envelope.
#
# Methods:
#   initialize      -> server descriptor
#   tools/list      -> registry catalog
#   resources/list  -> []
#   prompts/list    -> []
#   tools/call      -> executor
#
# Every response carries a fresh correlation id ("requestId")
# so a failure can be found in the logs.
# ---------------------------------------------------------

import uuid
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from foodieai.auth import has_authorization_header, resolve_user_id
from foodieai.config import config
from foodieai.errors import INVALID_REQUEST_CODE, METHOD_NOT_FOUND_CODE, AuthError, ToolError
from foodieai.logger import get_logger
from foodieai.mcp.content import JsonRpcId, build_tool_result, rpc_error, rpc_result, tool_error_envelope
from foodieai.mcp.executor import execute_tool
from foodieai.mcp.registry import ToolContext, ToolDefinition, ToolRegistry
from foodieai.mcp.tools import registry as default_registry

logger = get_logger(__name__)

SERVER_NAME = "FoodieAI MCP"
SERVER_VERSION = "1.0.0"


def new_request_id() -> str:
    return str(uuid.uuid4())


def extract_id(body: Any) -> JsonRpcId:
    """Best effort: string / number / null ids are echoed, anything else becomes null."""
    if not isinstance(body, dict):
        return None
    rpc_id = body.get("id")
    if isinstance(rpc_id, bool):
        return None
    if isinstance(rpc_id, (str, int, float)):
        return rpc_id
    return None


def is_valid_request(body: Any) -> bool:
    return isinstance(body, dict) and body.get("jsonrpc") == "2.0" and isinstance(body.get("method"), str)


def _resolve_caller(db: Session, definition: ToolDefinition, headers: Mapping[str, Any], request_id: str) -> Optional[str]:
    """
    auth=required -> the caller must resolve (AuthError otherwise).
    auth=none     -> resolve only when a token was sent; a bad token
                     downgrades to an anonymous call.
    """
    if definition.requires_auth:
        try:
            return resolve_user_id(db, headers)
        except AuthError as exc:
            raise ToolError.auth_required(definition.name) from exc

    if not has_authorization_header(headers):
        return None
    try:
        return resolve_user_id(db, headers)
    except AuthError as exc:
        logger.warning(f"Ignoring invalid token on public tool {definition.name}: {exc}", extra={"request_id": request_id})
        return None


def _call_tool(
    db: Session,
    registry: ToolRegistry,
    params: Any,
    headers: Mapping[str, Any],
    rpc_id: JsonRpcId,
    request_id: str,
) -> dict[str, Any]:
    if not isinstance(params, dict):
        return rpc_error(rpc_id, INVALID_REQUEST_CODE, "Invalid Request", {"requestId": request_id})

    name = params.get("name")
    arguments = params.get("arguments")
    if not isinstance(name, str) or not isinstance(arguments, dict):
        return rpc_error(rpc_id, INVALID_REQUEST_CODE, "Invalid Request", {"requestId": request_id})

    logger.info(f"tools/call {name}", extra={"request_id": request_id})

    try:
        definition = registry.resolve(name)
        if definition is None:
            raise ToolError.tool_not_found(name)

        user_id = _resolve_caller(db, definition, headers, request_id)
        ctx = ToolContext(db=db, user_id=user_id, headers=headers, request_id=request_id)

        definition, payload = execute_tool(registry, name, arguments, ctx)
    except ToolError as err:
        logger.warning(f"{err.kind} in {name}: {err.message}", extra={"request_id": request_id})
        return tool_error_envelope(rpc_id, err, request_id)
    except Exception:
        logger.exception(f"INTERNAL_ERROR in {name}", extra={"request_id": request_id})
        db.rollback()
        return tool_error_envelope(rpc_id, ToolError.internal(), request_id)

    meta = dict(payload.meta or {})
    meta.update({"requestId": request_id, "tool": definition.name})
    return rpc_result(rpc_id, build_tool_result(payload.text, payload.json, meta))


def _dispatch(
    body: Any,
    headers: Mapping[str, Any],
    db: Session,
    registry: ToolRegistry,
    request_id: str,
) -> dict[str, Any]:
    rpc_id = extract_id(body)
    if not is_valid_request(body):
        return rpc_error(rpc_id, INVALID_REQUEST_CODE, "Invalid Request", {"requestId": request_id})

    method = body["method"]

    if method == "initialize":
        return rpc_result(
            rpc_id,
            {
                "protocolVersion": config.MCP_PROTOCOL_VERSION,
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                "capabilities": {"tools": {}},
                "requestId": request_id,
            },
        )

    if method == "tools/list":
        return rpc_result(rpc_id, {"tools": registry.catalog(), "requestId": request_id})

    if method == "resources/list":
        return rpc_result(rpc_id, {"resources": [], "requestId": request_id})

    if method == "prompts/list":
        return rpc_result(rpc_id, {"prompts": [], "requestId": request_id})

    if method == "tools/call":
        return _call_tool(db, registry, body.get("params"), headers, rpc_id, request_id)

    return rpc_error(rpc_id, METHOD_NOT_FOUND_CODE, "Method not found", {"requestId": request_id})


def handle_jsonrpc(
    body: Any,
    headers: Mapping[str, Any],
    db: Session,
    registry: Optional[ToolRegistry] = None,
) -> dict[str, Any]:
    request_id = new_request_id()
    try:
        return _dispatch(body, headers, db, registry if registry is not None else default_registry, request_id)
    except Exception:
        logger.exception("Unhandled error in JSON-RPC dispatch", extra={"request_id": request_id})
        return tool_error_envelope(extract_id(body), ToolError.internal(), request_id)
