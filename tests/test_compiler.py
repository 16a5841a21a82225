"""Schema compiler unit tests"""

import json
import re
from pathlib import Path

import pytest

from dynaform.compiler import (
    compile_schema,
    humanize_label,
    infer_input_type,
    parse_option_source,
    resolve_order,
)
from dynaform.enums import InputType
from dynaform.errors import SchemaException
from dynaform.models import DependentOptions, FlatOptions, SelectOption

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def vehicle_schema():
    return json.loads((FIXTURES / "vehicle_registration.json").read_text(encoding="utf-8"))


def text_field(**extra):
    return {"type": "string", "x-source": {"type": "text"}, **extra}


# ========== Ordering ==========


def test_compile_sorts_by_order():
    schema = {
        "type": "object",
        "properties": {
            "b": text_field(**{"x-order": 2}),
            "a": text_field(**{"x-order": 1}),
        },
    }

    fields = compile_schema(schema)

    assert [f.name for f in fields] == ["a", "b"]


def test_compile_keeps_document_order_for_ties():
    schema = {
        "properties": {
            "c": text_field(**{"x-order": 5}),
            "a": text_field(**{"x-order": 5}),
            "z": text_field(),
            "b": text_field(**{"x-order": 5}),
            "y": text_field(),
        },
    }

    fields = compile_schema(schema)

    assert [f.name for f in fields] == ["c", "a", "b", "z", "y"]


def test_compile_unordered_fields_sort_last_with_sentinel():
    schema = {"properties": {"late": text_field(), "early": text_field(**{"x-order": 1000})}}

    fields = compile_schema(schema)

    assert [f.name for f in fields] == ["late", "early"]
    assert fields[0].order == 999


def test_compile_custom_order_default():
    schema = {"properties": {"late": text_field(), "early": text_field(**{"x-order": 3})}}

    fields = compile_schema(schema, order_default=-1)

    assert [f.name for f in fields] == ["late", "early"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        (3, 3),
        (2.5, 2.5),
        ("7", 7),
        (" 4 ", 4),
        ("abc", 999),
        ("", 999),
        (None, 999),
        (True, 999),
        (float("nan"), 999),
        (float("inf"), 999),
        ({"n": 1}, 999),
    ],
)
def test_resolve_order(raw, expected):
    assert resolve_order(raw) == expected


def test_compile_sample_schema_order(vehicle_schema):
    fields = compile_schema(vehicle_schema)

    assert len(fields) == 23
    assert fields[0].name == "first_name"
    assert fields[1].name == "last_name"
    assert fields[-1].name == "purchase_type"
    assert [f.order for f in fields] == sorted(f.order for f in fields)


# ========== Labels and metadata ==========


@pytest.mark.parametrize(
    "name, label",
    [
        ("first_name", "First name"),
        ("dateOfBirth", "Date Of Birth"),
        ("vehicle-make", "Vehicle make"),
        ("email", "Email"),
        ("Nin", "Nin"),
    ],
)
def test_humanize_label(name, label):
    assert humanize_label(name) == label


def test_compile_uses_x_label_and_description():
    schema = {
        "required": ["nin"],
        "properties": {
            "nin": text_field(
                **{
                    "x-label": "NIN",
                    "x-description": "Enter your 11-digit NIN",
                    "errorMessage": {"pattern": "NIN must be exactly 11 digits", "minLength": "Short"},
                }
            ),
            "last_name": text_field(),
        },
    }

    nin, last_name = compile_schema(schema)

    assert nin.label == "NIN"
    assert nin.placeholder == "Enter your 11-digit NIN"
    assert nin.is_required is True
    assert nin.error_messages.pattern == "NIN must be exactly 11 digits"
    assert nin.error_messages.min_length == "Short"

    assert last_name.label == "Last name"
    assert last_name.placeholder is None
    assert last_name.is_required is False


def test_compile_keeps_x_required_if():
    schema = {
        "properties": {
            "nin": text_field(**{"x-required_if": {"field": "has_nin", "value": True, "operator": "eq"}}),
        }
    }

    (nin,) = compile_schema(schema)

    assert nin.conditional_required.field == "has_nin"
    assert nin.conditional_required.value is True
    assert nin.conditional_required.operator == "eq"


# ========== Input types ==========


@pytest.mark.parametrize(
    "field_schema, expected",
    [
        ({"type": "integer"}, InputType.NUMBER),
        ({"type": "number"}, InputType.NUMBER),
        ({"type": "string", "format": "date"}, InputType.DATE),
        ({"type": "string", "format": "url"}, InputType.TEXT),
        ({"type": "boolean"}, InputType.TEXT),
        ({}, InputType.TEXT),
    ],
)
def test_infer_input_type(field_schema, expected):
    assert infer_input_type(field_schema) == expected


def test_compile_prefers_declared_source_type():
    schema = {
        "properties": {
            "phone": {"type": "string", "x-source": {"type": "tel"}},
            "age": {"type": "integer"},
            "born": {"type": "string", "format": "date", "x-source": {"type": "date"}},
            "odd": {"type": "integer", "x-source": {"type": "email"}},
        }
    }

    fields = {f.name: f for f in compile_schema(schema)}

    assert fields["phone"].input_type == InputType.TEL
    assert fields["age"].input_type == InputType.NUMBER
    assert fields["born"].input_type == InputType.DATE
    assert fields["odd"].input_type == InputType.NUMBER


# ========== Options ==========


def test_parse_option_source_flat_list_coerces_values():
    source = parse_option_source([{"label": "Yes", "value": True}, {"label": "No", "value": False}])

    assert isinstance(source, FlatOptions)
    assert source.options == [
        SelectOption(label="Yes", value="true"),
        SelectOption(label="No", value="false"),
    ]


def test_parse_option_source_nested_options_list():
    source = parse_option_source({"options": [{"label": "2024", "value": 2024}]})

    assert isinstance(source, FlatOptions)
    assert source.options == [SelectOption(label="2024", value="2024")]


def test_parse_option_source_dependent_with_embedded_options():
    source = parse_option_source(
        {
            "dependsOn": "make",
            "options": {
                "toyota": [{"label": "Camry", "value": "camry"}],
                "broken": "not a list",
            },
        }
    )

    assert isinstance(source, DependentOptions)
    assert source.depends_on == "make"
    assert source.options == {"toyota": [SelectOption(label="Camry", value="camry")]}


def test_parse_option_source_dependent_without_embedded_options():
    source = parse_option_source({"dependsOn": "make"})

    assert isinstance(source, DependentOptions)
    assert source.options is None


@pytest.mark.parametrize(
    "data",
    [
        "toyota",
        [],
        ["toyota", "honda"],
        [{"name": "Toyota"}],
        {"minAge": 18},
        {"options": {"toyota": []}},
    ],
)
def test_parse_option_source_unrecognized_shapes(data):
    assert parse_option_source(data) is None


def test_compile_options_only_for_array_inputs():
    data = [{"label": "A", "value": "a"}]
    schema = {
        "properties": {
            "choice": {"type": "string", "x-source": {"type": "array", "data": data}},
            "plain": {"type": "string", "x-source": {"type": "text", "data": data}},
        }
    }

    choice, plain = compile_schema(schema)

    assert choice.options == [SelectOption(label="A", value="a")]
    assert choice.depends_on is None
    assert plain.options is None
    assert plain.source is None


def test_compile_sample_dependent_dropdown(vehicle_schema):
    fields = {f.name: f for f in compile_schema(vehicle_schema)}

    model = fields["vehicle_model"]
    assert model.options is None
    assert model.depends_on == "vehicle_make"
    assert model.dependent_options["toyota"][0] == SelectOption(label="Camry", value="camry")
    assert set(model.dependent_options) == {
        "toyota",
        "honda",
        "mercedes",
        "bmw",
        "lexus",
        "nissan",
        "hyundai",
        "kia",
    }

    has_nin = fields["has_nin"]
    assert [o.value for o in has_nin.options] == ["true", "false"]
    assert has_nin.depends_on is None


# ========== Validation rules ==========


def test_compile_folds_source_validation(vehicle_schema):
    fields = {f.name: f for f in compile_schema(vehicle_schema)}

    assert fields["date_of_birth"].validation.min_age == 18
    assert fields["identification_url"].validation.file_type == ["image", "pdf"]
    assert fields["identification_url"].validation.accept == "image/*,application/pdf"
    assert fields["email"].validation.min_length == 5
    assert fields["nin"].validation.pattern.pattern == "^[0-9]{11}$"


def test_compile_collects_length_and_pattern_rules():
    schema = {
        "properties": {
            "code": {
                "type": "string",
                "minLength": 2,
                "maxLength": 4,
                "pattern": "^[A-Z]+$",
                "x-source": {"type": "file", "data": {"maxSize": 1024, "minAge": 0}},
            }
        }
    }

    (code,) = compile_schema(schema)

    assert code.validation.min_length == 2
    assert code.validation.max_length == 4
    assert isinstance(code.validation.pattern, re.Pattern)
    assert code.validation.max_size == 1024
    assert code.validation.min_age is None


def test_compile_invalid_pattern_raises():
    schema = {"properties": {"bad": {"type": "string", "pattern": "([a-z"}}}

    with pytest.raises(SchemaException, match="Invalid pattern for field 'bad'"):
        compile_schema(schema)


def test_compile_is_pure(vehicle_schema):
    snapshot = json.dumps(vehicle_schema, sort_keys=True)

    first = compile_schema(vehicle_schema)
    second = compile_schema(vehicle_schema)

    assert first == second
    assert json.dumps(vehicle_schema, sort_keys=True) == snapshot


@pytest.mark.parametrize(
    "field_schema, message",
    [
        ({"type": "string", "x-description": 5}, "Invalid metadata for field 'bad'"),
        ({"type": "string", "x-label": ["Bad"]}, "Invalid metadata for field 'bad'"),
        ({"type": "string", "errorMessage": {"required": 5}}, "Invalid metadata for field 'bad'"),
        ({"type": "string", "errorMessage": "Required"}, "Invalid metadata for field 'bad'"),
    ],
)
def test_compile_invalid_field_metadata_raises(field_schema, message):
    with pytest.raises(SchemaException, match=message):
        compile_schema({"properties": {"bad": field_schema}})
