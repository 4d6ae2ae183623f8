# foodieai/mcp/content.py
# ---------------------------------------------------------
# JSON-RPC envelopes and MCP tool-result content.
#
# A successful tools/call result looks like:
# {
#   "content": [
#     {"type": "text", "text": "<summary>"},
#     {"type": "text", "text": "<data as pretty JSON>"},
#     {"type": "text", "text": "{\"_meta\": {...}}"}
#   ],
#   "isError": false,
#   "data": <data>,
#   "meta": {"requestId": ..., "tool": ...}
# }
# ---------------------------------------------------------

import json
from typing import Any, Optional, Union

from foodieai.errors import ToolError

JsonRpcId = Union[str, int, float, None]


def text_content(text: str) -> dict[str, str]:
    return {"type": "text", "text": text}


def build_tool_result(text: str, data: Any = None, meta: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    content = [text_content(text)]
    if data is not None:
        content.append(
            text_content(data if isinstance(data, str) else json.dumps(data, indent=2, ensure_ascii=False))
        )
    if meta is not None:
        content.append(text_content(json.dumps({"_meta": meta}, ensure_ascii=False)))

    result: dict[str, Any] = {"content": content, "isError": False, "data": data}
    if meta is not None:
        result["meta"] = meta
    return result


def rpc_result(rpc_id: JsonRpcId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def rpc_error(rpc_id: JsonRpcId, code: int, message: str, data: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": rpc_id, "error": error}


def tool_error_envelope(rpc_id: JsonRpcId, error: ToolError, request_id: str) -> dict[str, Any]:
    data = {
        "requestId": request_id,
        "kind": error.kind,
        "status": error.status,
        "message": error.message,
    }
    data.update(error.data)
    return rpc_error(rpc_id, error.code, error.kind, data)
