"""
Schema validation for tool inputs.

A schema is an ordered mapping of field name to ``FieldConstraint`` (or a plain
dict with the same keys, e.g. ``{"type": float, "required": True, "min": 0}``).
``validate_input`` checks a decoded request against it and raises on the first
violated constraint, in field-declaration order.
"""

import json
import math
import shlex
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from solana_agent_mcp.exceptions import MissingFieldError, OutOfRangeError, ParseError, WrongTypeError

JSON_TYPE_NAMES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


class FieldConstraint(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Any  # a type or a tuple of acceptable types
    required: bool = True
    min: Optional[float] = None
    max: Optional[float] = None
    description: str = ""
    default: Any = None

    @field_validator("type")
    @classmethod
    def _normalize_types(cls, value: Any) -> Tuple[type, ...]:
        types_ = value if isinstance(value, tuple) else (value,)
        if not types_:
            raise ValueError("at least one type is required")
        for candidate in types_:
            if not isinstance(candidate, type):
                raise ValueError(f"{candidate!r} is not a type")
        return types_

    @model_validator(mode="after")
    def _check_bounds(self) -> "FieldConstraint":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) is greater than max ({self.max})")
        return self

    @property
    def type_names(self) -> str:
        return " or ".join(t.__name__ for t in self.type)

    def accepts(self, value: Any) -> bool:
        # bool is a subclass of int, only accept it when declared explicitly
        if isinstance(value, bool):
            return bool in self.type
        if isinstance(value, self.type):
            return True
        # JSON does not distinguish 1 from 1.0
        return float in self.type and isinstance(value, int)


SchemaLike = Mapping[str, Union[FieldConstraint, Mapping[str, Any]]]


def as_constraint(spec: Union[FieldConstraint, Mapping[str, Any]]) -> FieldConstraint:
    if isinstance(spec, FieldConstraint):
        return spec
    return FieldConstraint.model_validate(dict(spec))


def normalize_schema(schema: SchemaLike) -> Dict[str, FieldConstraint]:
    return {field: as_constraint(spec) for field, spec in schema.items()}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_input(data: Mapping[str, Any], schema: SchemaLike) -> None:
    """
    Validates ``data`` against ``schema``.

    A field whose value is ``None`` counts as absent. Absent optional fields are
    skipped; numeric bounds apply only to fields that are present.

    Raises:
        MissingFieldError: a required field is absent.
        WrongTypeError: a value's type is not one of the declared types.
        OutOfRangeError: a numeric value is NaN or infinite, or is below ``min``
            or above ``max``.
    """
    for field, spec in schema.items():
        constraint = as_constraint(spec)
        value = data.get(field)
        if value is None:
            if constraint.required:
                raise MissingFieldError(field)
            continue
        if not constraint.accepts(value):
            raise WrongTypeError(field, constraint.type_names, value)
        if _is_number(value):
            # NaN compares False against any bound
            if isinstance(value, float) and not math.isfinite(value):
                raise OutOfRangeError(field, value, minimum=constraint.min, maximum=constraint.max)
            if constraint.min is not None and value < constraint.min:
                raise OutOfRangeError(field, value, minimum=constraint.min)
            if constraint.max is not None and value > constraint.max:
                raise OutOfRangeError(field, value, maximum=constraint.max)


def coerce_input(data: Mapping[str, Any], schema: SchemaLike) -> Dict[str, Any]:
    """Returns the schema's fields from already-validated ``data``, with defaults applied."""
    coerced: Dict[str, Any] = {}
    for field, spec in schema.items():
        constraint = as_constraint(spec)
        value = data.get(field)
        if value is None:
            if constraint.default is None:
                continue
            value = constraint.default
        if float in constraint.type and int not in constraint.type and _is_number(value):
            value = float(value)
        coerced[field] = value
    return coerced


def _parse_scalar(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _parse_key_values(text: str) -> Dict[str, Any]:
    try:
        parts = shlex.split(text)
    except ValueError as e:
        raise ParseError(f"Invalid key=value input: {e}") from e
    result: Dict[str, Any] = {}
    for part in parts:
        if "=" not in part:
            raise ParseError(f"Invalid key=value input: '{part}' has no '='")
        key, value = part.split("=", 1)
        result[key] = _parse_scalar(value)
    return result


def parse_input(raw: Any) -> Dict[str, Any]:
    """
    Decodes raw tool input into a dict.

    Accepts a mapping, a JSON object string (a JSON string containing a JSON
    object is decoded twice), or shell-style ``key=value`` pairs. Empty input is
    an empty object.
    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Input is not valid UTF-8: {e}") from e
    if not isinstance(raw, str):
        raise ParseError(f"Unsupported input type: {type(raw).__name__}")

    text = raw.strip()
    if not text:
        return {}
    if text[0] in '{["':
        try:
            decoded = json.loads(text)
            if isinstance(decoded, str):
                decoded = json.loads(decoded)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON input: {e}") from e
        if not isinstance(decoded, dict):
            raise ParseError(f"Input must be a JSON object, got {type(decoded).__name__}")
        return decoded
    return _parse_key_values(text)


def to_json_schema(schema: SchemaLike) -> Dict[str, Any]:
    """Renders a schema as a JSON Schema object for tool listings."""
    properties: Dict[str, Any] = {}
    required = []
    for field, spec in schema.items():
        constraint = as_constraint(spec)
        json_types = []
        for t in constraint.type:
            name = JSON_TYPE_NAMES.get(t, "string")
            if name not in json_types:
                json_types.append(name)
        prop: Dict[str, Any] = {"type": json_types[0] if len(json_types) == 1 else json_types}
        if constraint.description:
            prop["description"] = constraint.description
        if constraint.min is not None:
            prop["minimum"] = constraint.min
        if constraint.max is not None:
            prop["maximum"] = constraint.max
        if constraint.default is not None:
            prop["default"] = constraint.default
        properties[field] = prop
        if constraint.required:
            required.append(field)
    json_schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        json_schema["required"] = required
    return json_schema
