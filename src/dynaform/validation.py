"""Field value validation and submit normalization"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from .consts import BYTES_PER_MB
from .models import FieldDescriptor, FileValue
from .utils import age_in_years, parse_calendar_date


def is_file_value(value: Any, files_supported: bool = True) -> bool:
    """Whether ``value`` is a file value in a host that supports files"""
    return files_supported and isinstance(value, FileValue)


def is_empty_value(value: Any, files_supported: bool = True) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if is_file_value(value, files_supported):
        return not value.name
    # booleans count as filled
    return False


def normalize_value_for_submit(value: Any) -> Any:
    """Trim strings; files, booleans and None pass through unchanged"""
    if isinstance(value, str):
        return value.strip()
    return value


def accepted_file_types(file_type: str | list[str]) -> list[str]:
    if isinstance(file_type, list):
        return [t.lower() for t in file_type]
    return [t.strip().lower() for t in file_type.split(",")]


def matches_file_type(file: FileValue, accepted: list[str]) -> bool:
    """Check a file against accepted type tokens.

    ``.ext`` tokens compare with the file extension, ``image``, ``pdf`` and
    wildcard tokens with the MIME category, anything else with the exact
    MIME type.
    """
    extension = file.name.rsplit(".", 1)[-1].lower()
    mime_type = file.type.lower()

    for token in accepted:
        if token.startswith("."):
            if f".{extension}" == token:
                return True
        elif token == "image":
            if mime_type.startswith("image/"):
                return True
        elif token == "pdf":
            if mime_type == "application/pdf":
                return True
        elif "*" in token:
            category = token.split("/")[0]
            if mime_type.startswith(f"{category}/"):
                return True
        elif mime_type == token:
            return True
    return False


def _validate_file(field: FieldDescriptor, file: FileValue) -> Optional[str]:
    rules = field.validation
    messages = field.error_messages

    if rules.file_type:
        if not matches_file_type(file, accepted_file_types(rules.file_type)):
            listed = ", ".join(rules.file_type) if isinstance(rules.file_type, list) else rules.file_type
            return messages.file_type or f"Invalid file type. Accepted: {listed}"

    if rules.max_size and file.size > rules.max_size:
        max_size_mb = rules.max_size / BYTES_PER_MB
        return messages.file_size or f"File size must be less than {max_size_mb:.1f}MB"

    return None


def validate_field(
    field: FieldDescriptor,
    value: Any,
    is_required: bool,
    *,
    files_supported: bool = True,
    today: Optional[date] = None,
) -> Optional[str]:
    """Validate one value against a compiled field.

    Checks run in a fixed order and stop at the first failure: required,
    pattern, minimum length, maximum length, minimum age, then file type
    and size. Optional fields left empty are always valid.

    Args:
        field: Compiled field descriptor
        value: Candidate value
        is_required: Whether the field is currently required
        files_supported: Whether file values are recognized in this host
        today: Reference date for age checks, defaults to the local date

    Returns:
        Error message, or None when the value is valid
    """
    rules = field.validation
    messages = field.error_messages
    is_file = is_file_value(value, files_supported)

    if is_required:
        if value is None or value == "" or (is_file and not value.name):
            return messages.required or f"{field.label} is required"

    if is_empty_value(value, files_supported):
        return None

    text = value if isinstance(value, str) else ""

    if rules.pattern is not None and text:
        if not rules.pattern.search(text):
            return messages.pattern or f"{field.label} format is invalid"

    if rules.min_length and isinstance(value, str) and len(text) < rules.min_length:
        return messages.min_length or f"{field.label} must be at least {rules.min_length} characters"

    # the max-length override shares the "type" message key
    if rules.max_length and isinstance(value, str) and len(text) > rules.max_length:
        return messages.type or f"{field.label} must be no more than {rules.max_length} characters"

    if rules.min_age and text:
        born = parse_calendar_date(text)
        if born is not None:
            age = age_in_years(born, today or date.today())
            if age < rules.min_age:
                return messages.min_age or f"You must be at least {rules.min_age} years old"

    if is_file:
        return _validate_file(field, value)

    return None
