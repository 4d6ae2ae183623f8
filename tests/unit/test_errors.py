"""Unit tests for the error taxonomy and JSON-RPC envelopes."""

import json

from foodieai.errors import (
    AUTH_REQUIRED,
    DRAFT_INCOMPLETE,
    INTERNAL_ERROR,
    NOT_FOUND,
    VALIDATION_ERROR,
    AuthError,
    DomainError,
    DraftIncompleteError,
    DraftNotEditableError,
    InvalidInputError,
    MissingFieldsError,
    RecipeDraftNotFoundError,
    ToolError,
    to_tool_error,
)
from foodieai.mcp.content import build_tool_result, rpc_error, tool_error_envelope


class TestToolError:
    """Codes and statuses per kind."""

    def test_codes_and_statuses(self):
        """Test the kind -> (code, status) table."""
        assert (ToolError.validation([]).code, ToolError.validation([]).status) == (-32000, 400)
        assert (ToolError(NOT_FOUND, "x").code, ToolError(NOT_FOUND, "x").status) == (-32000, 404)
        assert ToolError(DRAFT_INCOMPLETE, "x").status == 422
        assert (ToolError.auth_required("user.me").code, ToolError.auth_required("user.me").status) == (401, 401)
        assert (ToolError.internal().code, ToolError.internal().status) == (-32000, 500)

    def test_unknown_tool_uses_method_not_found(self):
        """Test an unknown tool is NOT_FOUND with -32601."""
        err = ToolError.tool_not_found("nope")

        assert err.kind == NOT_FOUND
        assert err.code == -32601
        assert err.data == {"tool": "nope"}


class TestToToolError:
    """Domain error mapping."""

    def test_not_found(self):
        """Test entity and id are exposed."""
        err = to_tool_error(RecipeDraftNotFoundError("d1"))

        assert err.kind == NOT_FOUND
        assert err.data == {"entity": "Recipe draft", "id": "d1"}
        assert "d1" in err.message

    def test_draft_incomplete_has_next_steps(self):
        """Test missing pieces come with actionable hints."""
        missing = [{"ingredientId": "i1", "name": "Salt", "missing": ["productId", "macrosPer100"], "hint": "h"}]

        err = to_tool_error(DraftIncompleteError(["steps"], missing))

        assert err.kind == DRAFT_INCOMPLETE
        assert err.status == 422
        assert err.data["missingFields"] == ["steps"]
        assert err.data["missingIngredients"] == missing
        hints = " ".join(err.data["nextSteps"])
        assert "recipeDraft.setSteps" in hints
        assert "Salt" in hints

    def test_validation_kinds(self):
        """Test editable / profile / input errors become VALIDATION_ERROR."""
        not_editable = to_tool_error(DraftNotEditableError("d1", "PUBLISHED"))
        missing = to_tool_error(MissingFieldsError(["sex", "heightCm"]))
        invalid = to_tool_error(InvalidInputError("birthDate", "date in YYYY-MM-DD format", "1.1.90"))

        assert not_editable.kind == VALIDATION_ERROR
        assert not_editable.data["fields"] == [
            {"path": "draftId", "expected": "draft in DRAFT status", "got": "PUBLISHED"}
        ]
        assert [f["path"] for f in missing.data["fields"]] == ["sex", "heightCm"]
        assert invalid.data["fields"][0] == {
            "path": "birthDate", "expected": "date in YYYY-MM-DD format", "got": "1.1.90"
        }

    def test_auth_and_fallback(self):
        """Test AuthError and unknown domain errors."""
        assert to_tool_error(AuthError()).kind == AUTH_REQUIRED
        assert to_tool_error(DomainError("odd")).kind == INTERNAL_ERROR


class TestEnvelopes:
    """JSON-RPC envelope shapes."""

    def test_tool_result_content(self):
        """Test summary, pretty JSON and _meta blocks."""
        result = build_tool_result("Done", {"a": 1}, {"requestId": "r1", "tool": "t"})

        assert result["isError"] is False
        assert result["data"] == {"a": 1}
        assert result["meta"] == {"requestId": "r1", "tool": "t"}
        texts = [block["text"] for block in result["content"]]
        assert texts[0] == "Done"
        assert json.loads(texts[1]) == {"a": 1}
        assert json.loads(texts[2]) == {"_meta": {"requestId": "r1", "tool": "t"}}

    def test_error_envelope(self):
        """Test the error data carries request id, kind, status and details."""
        envelope = tool_error_envelope(7, ToolError.validation([{"path": "x", "expected": "number", "got": "string"}]), "r1")

        assert envelope["jsonrpc"] == "2.0"
        assert envelope["id"] == 7
        error = envelope["error"]
        assert error["code"] == -32000
        assert error["message"] == VALIDATION_ERROR
        assert error["data"]["requestId"] == "r1"
        assert error["data"]["status"] == 400
        assert error["data"]["fields"][0]["path"] == "x"

    def test_plain_rpc_error_without_data(self):
        """Test data is omitted when not given."""
        assert rpc_error(None, -32600, "Invalid Request") == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32600, "message": "Invalid Request"},
        }
