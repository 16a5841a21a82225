"""Compile a form schema document into ordered field descriptors."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from .consts import ORDER_DEFAULT
from .enums import InputType
from .errors import SchemaException
from .models import (
    DependentOptions,
    ErrorMessages,
    FieldDescriptor,
    FlatOptions,
    OptionSource,
    RequiredIf,
    SelectOption,
    ValidationRules,
)
from .utils import coerce_finite_number, coerce_str

logger = logging.getLogger(__name__)

# Keys of x-source.data that carry validation limits rather than choices
SOURCE_VALIDATION_KEYS = {
    "minAge": "min_age",
    "accept": "accept",
    "fileType": "file_type",
    "maxSize": "max_size",
}


def humanize_label(name: str) -> str:
    """Turn a field name into a display label.

    Examples:
        >>> humanize_label("first_name")
        'First name'
        >>> humanize_label("dateOfBirth")
        'Date Of Birth'
    """
    label = re.sub(r"([A-Z])", r" \1", name)
    label = re.sub(r"[_-]", " ", label)
    label = label.strip()
    return label[:1].upper() + label[1:]


def infer_input_type(field_schema: Mapping[str, Any]) -> InputType:
    """Infer the input type when ``x-source`` does not declare one"""
    schema_type = field_schema.get("type")
    if schema_type in ("integer", "number"):
        return InputType.NUMBER
    if schema_type == "string" and field_schema.get("format") == "date":
        return InputType.DATE
    return InputType.TEXT


def resolve_input_type(name: str, field_schema: Mapping[str, Any]) -> InputType:
    source = field_schema.get("x-source")
    declared = source.get("type") if isinstance(source, Mapping) else None
    if declared:
        try:
            return InputType(declared)
        except ValueError:
            logger.debug(f"Field {name!r} declares unknown input type {declared!r}, inferring")
    return infer_input_type(field_schema)


def resolve_order(raw: Any, default: float = ORDER_DEFAULT) -> float:
    number = coerce_finite_number(raw)
    return default if number is None else number


def _is_option_list(data: Any) -> bool:
    return (
        isinstance(data, list)
        and len(data) > 0
        and isinstance(data[0], Mapping)
        and "label" in data[0]
        and "value" in data[0]
    )


def _to_options(entries: list) -> list[SelectOption]:
    return [
        SelectOption(label=coerce_str(entry.get("label")), value=coerce_str(entry.get("value")))
        for entry in entries
        if isinstance(entry, Mapping)
    ]


def parse_option_source(data: Any) -> Optional[OptionSource]:
    """Resolve ``x-source.data`` of a choice field into an option source.

    Two shapes are recognized:

    - a list of ``{label, value}`` entries, used as flat options
    - a mapping with either ``dependsOn`` plus an ``options`` mapping of
      parent value to entries, or a flat ``options`` list

    Anything else yields None.
    """
    if _is_option_list(data):
        return FlatOptions(options=_to_options(data))

    if not isinstance(data, Mapping):
        return None

    depends_on = data.get("dependsOn")
    options = data.get("options")

    if depends_on:
        embedded = None
        if isinstance(options, Mapping):
            embedded = {
                coerce_str(parent): _to_options(entries)
                for parent, entries in options.items()
                if isinstance(entries, list)
            }
        return DependentOptions(depends_on=str(depends_on), options=embedded)

    if isinstance(options, list):
        return FlatOptions(options=_to_options(options))

    return None


def build_validation(name: str, field_schema: Mapping[str, Any]) -> ValidationRules:
    rules: dict[str, Any] = {
        "min_length": field_schema.get("minLength"),
        "max_length": field_schema.get("maxLength"),
    }

    pattern = field_schema.get("pattern")
    if pattern:
        try:
            rules["pattern"] = re.compile(pattern)
        except re.error as e:
            raise SchemaException(f"Invalid pattern for field '{name}': {e}") from e

    source = field_schema.get("x-source")
    data = source.get("data") if isinstance(source, Mapping) else None
    if isinstance(data, Mapping):
        for key, attr in SOURCE_VALIDATION_KEYS.items():
            if data.get(key):
                rules[attr] = data[key]

    try:
        return ValidationRules(**rules)
    except ValidationError as e:
        raise SchemaException(f"Invalid validation settings for field '{name}': {e}") from e


def compile_field(
    name: str,
    field_schema: Mapping[str, Any],
    is_required: bool,
    order_default: float = ORDER_DEFAULT,
) -> FieldDescriptor:
    input_type = resolve_input_type(name, field_schema)

    source = None
    x_source = field_schema.get("x-source")
    if input_type is InputType.ARRAY and isinstance(x_source, Mapping) and x_source.get("data"):
        source = parse_option_source(x_source["data"])
        if source is None:
            logger.debug(f"Field {name!r} has unrecognized option data, no options compiled")

    conditional_required = None
    required_if = field_schema.get("x-required_if")
    if isinstance(required_if, Mapping):
        try:
            conditional_required = RequiredIf.model_validate(required_if)
        except ValidationError as e:
            raise SchemaException(f"Invalid x-required_if for field '{name}': {e}") from e

    validation = build_validation(name, field_schema)

    try:
        return FieldDescriptor(
            name=name,
            label=field_schema.get("x-label") or humanize_label(name),
            placeholder=field_schema.get("x-description"),
            order=resolve_order(field_schema.get("x-order"), order_default),
            input_type=input_type,
            is_required=is_required,
            conditional_required=conditional_required,
            validation=validation,
            error_messages=ErrorMessages.model_validate(field_schema.get("errorMessage") or {}),
            source=source,
        )
    except ValidationError as e:
        raise SchemaException(f"Invalid metadata for field '{name}': {e}") from e


def compile_schema(
    schema: Mapping[str, Any], order_default: float = ORDER_DEFAULT
) -> list[FieldDescriptor]:
    """Compile a schema document into field descriptors.

    Args:
        schema: Schema document with a ``properties`` mapping
        order_default: Order given to fields without a numeric ``x-order``

    Returns:
        Descriptors sorted by order, ties kept in document order
    """
    required = set(schema.get("required") or [])

    indexed = []
    for index, (name, field_schema) in enumerate(schema["properties"].items()):
        descriptor = compile_field(name, field_schema or {}, name in required, order_default)
        indexed.append((descriptor.order, index, descriptor))

    indexed.sort(key=lambda entry: (entry[0], entry[1]))
    fields = [descriptor for _order, _index, descriptor in indexed]

    logger.debug(f"Compiled {len(fields)} field(s): {[f.name for f in fields]}")
    return fields
