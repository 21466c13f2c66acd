"""
Field Descriptors — one declaration, two uses

A tool's arguments are declared once as a mapping of name -> Field. The same
declaration is
  - projected into the JSON Schema advertised by tools/list (project), and
  - compiled into a pydantic model that validates incoming arguments
    (build_model / validate_arguments).

Both walks are total over the descriptor variants: a new variant without a
matching branch fails loudly with TypeError instead of degrading to "string".
"""

import dataclasses
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Type

import pydantic
from pydantic import ConfigDict, StrictBool, StrictFloat, StrictStr

from gsd_mcp.errors import ArgumentValidationError


class _Missing:
    def __repr__(self):
        return "MISSING"


MISSING: Any = _Missing()


@dataclasses.dataclass(frozen=True, kw_only=True)
class Field:
    description: Optional[str] = None
    optional: bool = False
    default: Any = MISSING

    @property
    def required(self) -> bool:
        return not self.optional and self.default is MISSING


@dataclasses.dataclass(frozen=True, kw_only=True)
class StringField(Field):
    pass


@dataclasses.dataclass(frozen=True, kw_only=True)
class NumberField(Field):
    pass


@dataclasses.dataclass(frozen=True, kw_only=True)
class BooleanField(Field):
    pass


@dataclasses.dataclass(frozen=True, kw_only=True)
class ArrayField(Field):
    items: Field


@dataclasses.dataclass(frozen=True, kw_only=True)
class EnumField(Field):
    values: Tuple[str, ...]


@dataclasses.dataclass(frozen=True, kw_only=True)
class ObjectField(Field):
    fields: Mapping[str, Field]


Fields = Mapping[str, Field]


# --- projection (tools/list) ---

def project(field: Field) -> Dict[str, Any]:
    """JSON Schema for a single field."""
    if isinstance(field, StringField):
        schema: Dict[str, Any] = {"type": "string"}
    elif isinstance(field, NumberField):
        schema = {"type": "number"}
    elif isinstance(field, BooleanField):
        schema = {"type": "boolean"}
    elif isinstance(field, ArrayField):
        schema = {"type": "array", "items": project(field.items)}
    elif isinstance(field, EnumField):
        schema = {"type": "string", "enum": list(field.values)}
    elif isinstance(field, ObjectField):
        schema = object_schema(field.fields)
    else:
        raise TypeError(f"No JSON Schema projection for {type(field).__name__}")

    if field.description:
        schema["description"] = field.description
    if field.default is not MISSING:
        schema["default"] = field.default
    return schema


def object_schema(fields: Fields) -> Dict[str, Any]:
    """Object schema; ``required`` is every field neither optional nor defaulted."""
    return {
        "type": "object",
        "properties": {name: project(field) for name, field in fields.items()},
        "required": [name for name, field in fields.items() if field.required],
    }


# --- validation (tools/call) ---

def _annotation(field: Field, model_name: str) -> Any:
    if isinstance(field, StringField):
        return StrictStr
    if isinstance(field, NumberField):
        return StrictFloat
    if isinstance(field, BooleanField):
        return StrictBool
    if isinstance(field, ArrayField):
        return List[_annotation(field.items, f"{model_name}_item")]
    if isinstance(field, EnumField):
        return Literal[field.values]
    if isinstance(field, ObjectField):
        return build_model(model_name, field.fields)
    raise TypeError(f"No validator for {type(field).__name__}")


def build_model(name: str, fields: Fields) -> Type[pydantic.BaseModel]:
    """Compile a descriptor mapping into a pydantic model (unknown keys ignored)."""
    definitions: Dict[str, Any] = {}
    for key, field in fields.items():
        annotation = _annotation(field, f"{name}_{key}")
        if field.default is not MISSING:
            definitions[key] = (annotation, pydantic.Field(default=field.default))
        elif field.optional:
            definitions[key] = (Optional[annotation], None)
        else:
            definitions[key] = (annotation, ...)
    return pydantic.create_model(name, __config__=ConfigDict(extra="ignore"), **definitions)


def _format_loc(loc: Tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "(root)"


def validate_arguments(model: Type[pydantic.BaseModel], raw: Any) -> Dict[str, Any]:
    """Validate raw tool arguments. Collects every failing field, not just the first."""
    if raw is None:
        raw = {}
    try:
        instance = model.model_validate(raw)
    except pydantic.ValidationError as exc:
        issues = [(_format_loc(err["loc"]), err["msg"]) for err in exc.errors()]
        raise ArgumentValidationError(issues) from None
    return instance.model_dump()


def format_number(value: float) -> str:
    """Render 3.0 as "3" and 2.5 as "2.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
