from __future__ import annotations

from .compiler import compile_schema
from .conditions import conditionally_required_fields, is_field_conditionally_required
from .config import Settings
from .errors import ConfigException, DynaformException, SchemaException
from .models import FieldDescriptor, FileValue, SelectOption, SubmissionResult
from .options import resolve_dependent_options
from .parser import ParseResult, load_schema_file, parse_schema_input
from .session import FormSession
from .validation import normalize_value_for_submit, validate_field

__all__ = [
    "ConfigException",
    "DynaformException",
    "FieldDescriptor",
    "FileValue",
    "FormSession",
    "ParseResult",
    "SchemaException",
    "SelectOption",
    "Settings",
    "SubmissionResult",
    "compile_schema",
    "conditionally_required_fields",
    "is_field_conditionally_required",
    "load_schema_file",
    "normalize_value_for_submit",
    "parse_schema_input",
    "resolve_dependent_options",
    "validate_field",
]
