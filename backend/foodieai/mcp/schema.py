# foodieai/mcp/schema.py
# ---------------------------------------------------------
# Tool argument schemas + the recursive coercer.
#
# Only the JSON Schema subset tool arguments need:
#   string / number / boolean / object / array / null
#   (and unions of them), enum, required, additionalProperties
#
# coerce() walks (schema, value, path) and:
# - coerces loosely typed input ("168" -> 168, 5 -> "5")
# - trims strings
# - collects {path, expected, got} errors instead of stopping
#   at the first one
# ---------------------------------------------------------

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from foodieai.errors import ToolError

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
OBJECT = "object"
ARRAY = "array"
NULL = "null"


@dataclass(frozen=True)
class JsonSchema:
    types: tuple[str, ...]
    properties: Optional[dict[str, "JsonSchema"]] = None
    items: Optional["JsonSchema"] = None
    required: tuple[str, ...] = ()
    additional_properties: bool = True
    enum: Optional[tuple[Any, ...]] = None
    description: Optional[str] = None

    def allows(self, type_name: str) -> bool:
        return type_name in self.types

    @property
    def expected(self) -> str:
        return "|".join(self.types)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON Schema, as published by tools/list."""
        data: dict[str, Any] = {"type": self.types[0] if len(self.types) == 1 else list(self.types)}
        if self.description:
            data["description"] = self.description
        if self.enum is not None:
            data["enum"] = list(self.enum)
        if self.properties is not None:
            data["properties"] = {name: child.to_dict() for name, child in self.properties.items()}
            data["required"] = list(self.required)
            data["additionalProperties"] = self.additional_properties
        if self.items is not None:
            data["items"] = self.items.to_dict()
        return data


# ---------------------------------------------------------
# Builders (keep tool definitions short)
# ---------------------------------------------------------

def _types(base: str, nullable: bool) -> tuple[str, ...]:
    return (base, NULL) if nullable else (base,)


def string(nullable: bool = False, enum: Optional[list[str]] = None, description: Optional[str] = None) -> JsonSchema:
    return JsonSchema(
        types=_types(STRING, nullable),
        enum=tuple(enum) if enum is not None else None,
        description=description,
    )


def number(nullable: bool = False, description: Optional[str] = None) -> JsonSchema:
    return JsonSchema(types=_types(NUMBER, nullable), description=description)


def boolean(nullable: bool = False, description: Optional[str] = None) -> JsonSchema:
    return JsonSchema(types=_types(BOOLEAN, nullable), description=description)


def array(items: JsonSchema, nullable: bool = False, description: Optional[str] = None) -> JsonSchema:
    return JsonSchema(types=_types(ARRAY, nullable), items=items, description=description)


def obj(
    properties: dict[str, JsonSchema],
    required: Optional[list[str]] = None,
    additional: bool = False,
    nullable: bool = False,
    description: Optional[str] = None,
) -> JsonSchema:
    return JsonSchema(
        types=_types(OBJECT, nullable),
        properties=properties,
        required=tuple(required or ()),
        additional_properties=additional,
        description=description,
    )


def free_object(nullable: bool = False, description: Optional[str] = None) -> JsonSchema:
    """Any object, passed through untouched."""
    return JsonSchema(types=_types(OBJECT, nullable), description=description)


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def describe_type(value: Any) -> str:
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    return type(value).__name__


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but not a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# Plain ASCII decimal with optional exponent ("1_000" and non-ASCII digits are not numbers)
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _parse_number(text: str) -> Optional[float]:
    stripped = text.strip()
    if not _NUMBER_RE.fullmatch(stripped):
        return None
    try:
        parsed = float(stripped)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def _as_number(parsed: float) -> Any:
    return int(parsed) if parsed.is_integer() else parsed


def _number_to_string(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def child_path(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def _error(path: str, expected: str, got: Any) -> dict[str, Any]:
    return {"path": path, "expected": expected, "got": got}


# ---------------------------------------------------------
# Coercer
# ---------------------------------------------------------

def coerce(schema: JsonSchema, value: Any, path: str, errors: list[dict[str, Any]]) -> Any:
    """
    Coerce `value` against `schema`; errors are appended to `errors`.
    The returned value is only meaningful when no error was added.
    """
    if value is None:
        if schema.allows(NULL):
            return None
        errors.append(_error(path, schema.expected, NULL))
        return None

    if schema.allows(NUMBER) and isinstance(value, str):
        parsed = _parse_number(value)
        if parsed is not None:
            return _as_number(parsed)

    if schema.allows(STRING) and _is_number(value):
        return _number_to_string(value)

    if schema.allows(NUMBER) and _is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            errors.append(_error(path, "finite number", str(value)))
            return None
        return value

    if schema.allows(STRING) and isinstance(value, str):
        text = value.strip()
        if schema.enum is not None and text not in schema.enum:
            errors.append(_error(path, "|".join(str(item) for item in schema.enum), text))
            return None
        return text

    if schema.allows(BOOLEAN) and isinstance(value, bool):
        return value

    if schema.allows(ARRAY) and isinstance(value, (list, tuple)):
        if schema.items is None:
            return list(value)
        return [coerce(schema.items, item, index_path(path, index), errors) for index, item in enumerate(value)]

    if schema.allows(OBJECT) and isinstance(value, dict):
        return _coerce_object(schema, value, path, errors)

    errors.append(_error(path, schema.expected, describe_type(value)))
    return None


def _coerce_object(schema: JsonSchema, value: dict, path: str, errors: list[dict[str, Any]]) -> dict:
    if schema.properties is None:
        return dict(value)

    result = {}
    for name in schema.required:
        if name not in value:
            child = schema.properties.get(name)
            expected = child.expected if child is not None else "value"
            errors.append(_error(child_path(path, name), expected, "missing"))

    for name, item in value.items():
        child = schema.properties.get(name)
        if child is not None:
            result[name] = coerce(child, item, child_path(path, name), errors)
        elif schema.additional_properties:
            result[name] = item
        # additionalProperties: false -> unknown keys are dropped

    return result


def validate_arguments(schema: JsonSchema, arguments: dict[str, Any]) -> dict[str, Any]:
    """Coerce tool arguments or raise VALIDATION_ERROR with every field error."""
    errors: list[dict[str, Any]] = []
    coerced = coerce(schema, arguments, "", errors)
    if errors:
        raise ToolError.validation(errors)
    return coerced


# ---------------------------------------------------------
# Typed DTO pass (pydantic)
# ---------------------------------------------------------

def _loc_to_path(loc: tuple) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path = index_path(path, part)
        else:
            path = child_path(path, str(part))
    return path


def _expected(error: dict[str, Any]) -> str:
    ctx = error.get("ctx")
    if not ctx:
        return error["type"]
    details = ", ".join(f"{key}={value}" for key, value in ctx.items())
    return f"{error['type']}({details})"


def pydantic_errors_to_fields(exc: ValidationError) -> list[dict[str, Any]]:
    fields = []
    for error in exc.errors():
        got = "missing" if error["type"] == "missing" else describe_type(error.get("input"))
        fields.append(_error(_loc_to_path(error["loc"]), _expected(error), got))
    return fields


def validate_dto(model: type[BaseModel], arguments: dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        raise ToolError.validation(pydantic_errors_to_fields(exc)) from exc
