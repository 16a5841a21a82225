"""Enumeration type definitions"""

from enum import Enum


class InputType(str, Enum):
    """Rendered input kinds a field can compile to"""

    TEXT = "text"
    TEL = "tel"
    NUMBER = "number"
    DATE = "date"
    FILE = "file"
    ARRAY = "array"


class Operator(str, Enum):
    """Comparison operators accepted by ``x-required_if``"""

    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    NIN = "nin"


class ConditionOutcome(Enum):
    MATCH = "match"
    NO_MATCH = "no-match"
    UNKNOWN = "unknown"


class FormState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
