"""Unit tests for the tool registry and the built-in catalog."""

import pytest

from foodieai.mcp.registry import ALIASES, AUTH_REQUIRED, ToolDefinition, ToolExample, ToolPayload, ToolRegistry
from foodieai.mcp.schema import obj, string
from foodieai.mcp.tools import build_registry, registry

EXPECTED_TOOLS = {
    "mcp.capabilities",
    "mcp.help",
    "product.createManual",
    "product.search",
    "user.me",
    "userProfile.upsert",
    "userTargets.recalculate",
    "recipeDraft.create",
    "recipeDraft.addIngredient",
    "recipeDraft.removeIngredient",
    "recipeDraft.setSteps",
    "recipeDraft.get",
    "recipeDraft.validate",
    "recipeDraft.recalc",
    "recipeDraft.publish",
    "recipeDraft.fromRecipe",
    "recipe.search",
    "recipe.get",
}


def _echo(args, ctx):
    return ToolPayload(text="ok", json=args)


def _definition(name="demo.echo", **kwargs):
    return ToolDefinition(
        name=name,
        description="Echo",
        input_schema=obj({"value": string()}, required=["value"]),
        handler=_echo,
        **kwargs,
    )


class TestToolRegistry:
    """Registration and lookup."""

    def test_register_and_resolve(self):
        """Test a registered tool resolves by name."""
        reg = ToolRegistry()
        definition = reg.register(_definition())

        assert reg.resolve("demo.echo") is definition
        assert "demo.echo" in reg
        assert len(reg) == 1

    def test_duplicate_name_rejected(self):
        """Test names are unique."""
        reg = ToolRegistry()
        reg.register(_definition())

        with pytest.raises(ValueError, match="already registered"):
            reg.register(_definition())

    def test_alias_resolves_to_canonical(self):
        """Test legacy names map onto the canonical tool."""
        reg = ToolRegistry(aliases={"echo": "demo.echo"})
        definition = reg.register(_definition())

        assert reg.canonical_name("echo") == "demo.echo"
        assert reg.resolve("echo") is definition
        assert reg.names() == ["demo.echo"]

    def test_name_colliding_with_alias_rejected(self):
        """Test a tool cannot be registered under an alias."""
        reg = ToolRegistry(aliases={"echo": "demo.echo"})

        with pytest.raises(ValueError, match="alias"):
            reg.register(_definition(name="echo"))

    def test_unknown_name(self):
        """Test unknown names resolve to None."""
        assert ToolRegistry().resolve("nope") is None


class TestCatalogEntry:
    """tools/list metadata."""

    def test_minimal_entry(self):
        """Test the fields every entry carries."""
        entry = _definition().to_catalog_entry()

        assert entry["name"] == "demo.echo"
        assert entry["auth"] == "none"
        assert entry["public"] is True
        assert entry["inputSchema"]["type"] == "object"
        assert entry["inputSchema"]["required"] == ["value"]
        assert "outputSchema" not in entry
        assert "examples" not in entry

    def test_examples_produce_rpc_examples(self):
        """Test each example becomes a ready-to-send JSON-RPC request."""
        entry = _definition(examples=(ToolExample("Echo hi", {"value": "hi"}),)).to_catalog_entry()

        assert entry["examples"] == [{"summary": "Echo hi", "arguments": {"value": "hi"}}]
        request = entry["rpcExamples"][0]["request"]
        assert request["method"] == "tools/call"
        assert request["params"] == {"name": "demo.echo", "arguments": {"value": "hi"}}


class TestBuiltInCatalog:
    """The process-wide registry."""

    def test_all_tools_registered(self):
        """Test the full tool set is present."""
        assert set(registry.names()) == EXPECTED_TOOLS

    def test_every_alias_targets_a_real_tool(self):
        """Test no alias dangles."""
        for alias, target in ALIASES.items():
            assert registry.resolve(alias) is registry.resolve(target), alias

    def test_user_tools_require_auth(self):
        """Test auth modes and visibility."""
        required = {d.name for d in registry.definitions() if d.auth == AUTH_REQUIRED}

        assert required == {"product.createManual", "user.me", "userProfile.upsert", "userTargets.recalculate"}
        assert all(not registry.resolve(name).public for name in required)

    def test_catalog_is_serializable_metadata(self):
        """Test every catalog entry has a name and an object input schema."""
        for entry in registry.catalog():
            assert entry["inputSchema"]["type"] == "object"
            assert entry["description"]

    def test_build_registry_returns_fresh_instance(self):
        """Test building twice does not collide."""
        assert build_registry() is not registry

    def test_create_draft_documents_anonymous_key_scope(self):
        """Test recipeDraft.create warns that anonymous callers share one key space."""
        entry = registry.resolve("recipeDraft.create").to_catalog_entry()

        assert "anonymous" in entry["description"]
        assert "globally unique" in entry["inputSchema"]["properties"]["clientRequestId"]["description"]
