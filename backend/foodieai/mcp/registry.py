# foodieai/mcp/registry.py
# ---------------------------------------------------------
# Tool registry.
#
# A ToolDefinition describes one callable tool:
# - name / description / tags        (tools/list metadata)
# - auth: "none" | "required"
# - input_schema (+ optional dto)    (argument validation)
# - handler(args, ctx) -> ToolPayload
#
# Legacy names resolve through ALIASES at lookup time, the
# registry itself only stores canonical names.
# ---------------------------------------------------------

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from foodieai.mcp.schema import JsonSchema

AUTH_NONE = "none"
AUTH_REQUIRED = "required"

ALIASES = {
    "products.search": "product.search",
    "product.create": "product.createManual",
    "recipes.search": "recipe.search",
    "recipes.get": "recipe.get",
    "profile.upsert": "userProfile.upsert",
    "targets.recalculate": "userTargets.recalculate",
    "draft.create": "recipeDraft.create",
    "draft.publish": "recipeDraft.publish",
}


@dataclass
class ToolContext:
    db: Session
    user_id: Optional[str]
    headers: Mapping[str, Any]
    request_id: str


@dataclass
class ToolPayload:
    """What a handler returns: a short summary + structured data."""

    text: str
    json: Any = None
    meta: Optional[dict[str, Any]] = None


@dataclass
class ToolExample:
    summary: str
    arguments: dict[str, Any]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: JsonSchema
    handler: Callable[[Any, ToolContext], ToolPayload]
    tags: tuple[str, ...] = ()
    auth: str = AUTH_NONE
    public: bool = True
    output_schema: Optional[JsonSchema] = None
    examples: tuple[ToolExample, ...] = ()
    # Optional stricter typed check run after schema coercion
    dto: Optional[type[BaseModel]] = None

    @property
    def requires_auth(self) -> bool:
        return self.auth == AUTH_REQUIRED

    def rpc_examples(self) -> list[dict[str, Any]]:
        return [
            {
                "summary": example.summary,
                "request": {
                    "jsonrpc": "2.0",
                    "id": index,
                    "method": "tools/call",
                    "params": {"name": self.name, "arguments": example.arguments},
                },
            }
            for index, example in enumerate(self.examples, start=1)
        ]

    def to_catalog_entry(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "auth": self.auth,
            "public": self.public,
            "inputSchema": self.input_schema.to_dict(),
        }
        if self.output_schema is not None:
            entry["outputSchema"] = self.output_schema.to_dict()
        if self.examples:
            entry["examples"] = [
                {"summary": example.summary, "arguments": example.arguments} for example in self.examples
            ]
            entry["rpcExamples"] = self.rpc_examples()
        return entry


class ToolRegistry:
    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self._tools: dict[str, ToolDefinition] = {}
        self._aliases = dict(aliases or {})

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        if definition.name in self._tools:
            raise ValueError(f"Tool already registered: {definition.name}")
        if definition.name in self._aliases:
            raise ValueError(f"Tool name collides with an alias: {definition.name}")
        self._tools[definition.name] = definition
        return definition

    def canonical_name(self, name: str) -> str:
        return self._aliases.get(name, name)

    def resolve(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(self.canonical_name(name))

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def catalog(self) -> list[dict[str, Any]]:
        return [definition.to_catalog_entry() for definition in self._tools.values()]

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None

    def __len__(self) -> int:
        return len(self._tools)
