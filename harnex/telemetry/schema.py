"""Closed-schema payload validation for telemetry kinds.

Supports a small subset of JSON Schema: an object payload with
`required: [...]` and `properties: {name: {type?, enum?}}`. Fields not
declared in `properties` are rejected. Supported types are `string`,
`integer`, `number` and `boolean`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from harnex.errors import ConfigInvalid, TelemetryPayloadInvalid

_I64_MIN = -(2**63)
_U64_MAX = 2**64 - 1


def _is_integer(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and _I64_MIN <= value <= _U64_MAX
    )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda value: isinstance(value, str),
    "integer": _is_integer,
    "number": _is_number,
    "boolean": lambda value: isinstance(value, bool),
}


def _json_equal(a: Any, b: Any) -> bool:
    """Equality of JSON values that keeps booleans, integers and floats apart."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return type(a) is type(b) and a == b
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(map(_json_equal, a, b))
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_json_equal(a[k], b[k]) for k in a)
    return type(a) is type(b) and a == b


@dataclass(frozen=True)
class PropertySchema:
    """Constraints on one payload field."""

    ty: str | None = None
    enum_values: list[Any] | None = None


def _parse_property(name: str, value: Any) -> PropertySchema:
    def malformed(reason: str) -> ConfigInvalid:
        return ConfigInvalid(
            f"telemetry kind payload_schema.properties.{name} is malformed: {reason}"
        )

    if not isinstance(value, dict):
        raise malformed("expected an object")
    ty = value.get("type")
    if ty is not None and not isinstance(ty, str):
        raise malformed("`type` must be a string")
    enum_values = value.get("enum")
    if enum_values is not None and not isinstance(enum_values, list):
        raise malformed("`enum` must be an array")
    return PropertySchema(ty=ty, enum_values=enum_values)


@dataclass
class KindSchema:
    """A closed payload schema for one telemetry kind."""

    required: set[str] = field(default_factory=set)
    properties: dict[str, PropertySchema] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> KindSchema:
        """Build a schema from its JSON form, raising ConfigInvalid when malformed."""
        if not isinstance(value, dict):
            raise ConfigInvalid("telemetry kind payload_schema must be an object")
        if value.get("type") != "object":
            raise ConfigInvalid('telemetry kind payload_schema.type must be "object"')

        raw_required = value.get("required")
        required: set[str] = set()
        if raw_required is not None:
            if not isinstance(raw_required, list):
                raise ConfigInvalid("telemetry kind payload_schema.required must be an array")
            for entry in raw_required:
                if not isinstance(entry, str):
                    raise ConfigInvalid(
                        "telemetry kind payload_schema.required must be an array of "
                        f"strings; got {json.dumps(entry)}"
                    )
                required.add(entry)

        properties: dict[str, PropertySchema] = {}
        raw_properties = value.get("properties")
        if isinstance(raw_properties, dict):
            for name, prop in raw_properties.items():
                properties[name] = _parse_property(name, prop)

        for name in sorted(required):
            if name not in properties:
                raise ConfigInvalid(
                    f"telemetry kind required field '{name}' has no entry in properties"
                )

        for name, prop in properties.items():
            if prop.ty is not None and prop.ty not in _TYPE_CHECKS:
                raise ConfigInvalid(
                    f"telemetry kind property '{name}' has unknown type '{prop.ty}' "
                    "(use string | integer | number | boolean)"
                )

        return cls(required=required, properties=properties)

    def validate(self, payload: Any) -> None:
        """Raise TelemetryPayloadInvalid unless `payload` satisfies the schema."""
        if not isinstance(payload, dict):
            raise TelemetryPayloadInvalid("payload must be a JSON object")

        for name in sorted(self.required):
            if name not in payload:
                raise TelemetryPayloadInvalid(f"missing required field '{name}'")

        for name, value in payload.items():
            schema = self.properties.get(name)
            if schema is None:
                raise TelemetryPayloadInvalid(
                    f"field '{name}' is not declared in payload_schema"
                )
            if schema.ty is not None:
                check = _TYPE_CHECKS.get(schema.ty)
                if check is None:
                    raise ConfigInvalid(f"unknown property type '{schema.ty}'")
                if not check(value):
                    raise TelemetryPayloadInvalid(f"field '{name}' is not a {schema.ty}")
            if schema.enum_values is not None and not any(
                _json_equal(allowed, value) for allowed in schema.enum_values
            ):
                raise TelemetryPayloadInvalid(f"field '{name}' value not in declared enum")