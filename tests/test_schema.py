import pytest

from harnex.errors import ConfigInvalid, TelemetryPayloadInvalid
from harnex.telemetry.schema import KindSchema, PropertySchema

SKILL_SCHEMA = {
    "type": "object",
    "required": ["skill", "outcome"],
    "properties": {
        "skill": {"type": "string"},
        "outcome": {"type": "string", "enum": ["ok", "warn", "fail"]},
    },
}


def test_from_value_reads_required_and_properties():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    assert schema.required == {"skill", "outcome"}
    assert schema.properties["skill"] == PropertySchema(ty="string")
    assert schema.properties["outcome"].enum_values == ["ok", "warn", "fail"]


def test_from_value_rejects_non_object():
    with pytest.raises(ConfigInvalid, match="must be an object"):
        KindSchema.from_value(["type", "object"])


def test_from_value_requires_object_type():
    with pytest.raises(ConfigInvalid, match="type must be"):
        KindSchema.from_value({"type": "array"})


def test_required_must_be_array():
    with pytest.raises(ConfigInvalid, match="must be an array"):
        KindSchema.from_value({"type": "object", "required": "skill"})


def test_required_entries_must_be_strings():
    with pytest.raises(ConfigInvalid, match="array of strings"):
        KindSchema.from_value(
            {"type": "object", "required": [1], "properties": {"a": {"type": "string"}}}
        )


def test_required_field_must_be_declared():
    with pytest.raises(ConfigInvalid, match="has no entry in properties"):
        KindSchema.from_value({"type": "object", "required": ["x"], "properties": {}})


def test_unknown_property_type_rejected_at_load():
    with pytest.raises(ConfigInvalid, match="unknown type 'date'"):
        KindSchema.from_value({"type": "object", "properties": {"d": {"type": "date"}}})


@pytest.mark.parametrize("prop", [{"enum": "ok"}, {"type": 3}, "string"])
def test_malformed_property_rejected(prop):
    with pytest.raises(ConfigInvalid, match="is malformed"):
        KindSchema.from_value({"type": "object", "properties": {"p": prop}})


def test_validate_rejects_non_object_payload():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    with pytest.raises(TelemetryPayloadInvalid, match="must be a JSON object"):
        schema.validate(["skill"])


def test_validate_missing_required_field():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    with pytest.raises(TelemetryPayloadInvalid, match="missing required field 'outcome'"):
        schema.validate({"skill": "x"})


def test_validate_rejects_undeclared_field():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    with pytest.raises(TelemetryPayloadInvalid, match="not declared in payload_schema"):
        schema.validate({"skill": "x", "outcome": "ok", "extra": 1})


def test_validate_rejects_type_mismatch():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    with pytest.raises(TelemetryPayloadInvalid, match="field 'skill' is not a string"):
        schema.validate({"skill": 5, "outcome": "ok"})


def test_validate_rejects_enum_violation():
    schema = KindSchema.from_value(SKILL_SCHEMA)
    schema.validate({"skill": "x", "outcome": "warn"})
    with pytest.raises(TelemetryPayloadInvalid, match="not in declared enum"):
        schema.validate({"skill": "x", "outcome": "maybe"})


@pytest.mark.parametrize("bad", [True, 1.5, "3"])
def test_integer_type_is_strict(bad):
    schema = KindSchema.from_value(
        {"type": "object", "properties": {"n": {"type": "integer"}}}
    )
    schema.validate({"n": 3})
    with pytest.raises(TelemetryPayloadInvalid, match="is not a integer"):
        schema.validate({"n": bad})


def test_number_accepts_int_and_float_but_not_bool():
    schema = KindSchema.from_value(
        {"type": "object", "properties": {"n": {"type": "number"}}}
    )
    schema.validate({"n": 3})
    schema.validate({"n": 2.5})
    with pytest.raises(TelemetryPayloadInvalid, match="is not a number"):
        schema.validate({"n": False})


@pytest.mark.parametrize("bad", [True, 1.0, "1"])
def test_enum_comparison_keeps_json_types_apart(bad):
    schema = KindSchema.from_value({"type": "object", "properties": {"n": {"enum": [1]}}})
    schema.validate({"n": 1})
    with pytest.raises(TelemetryPayloadInvalid, match="not in declared enum"):
        schema.validate({"n": bad})