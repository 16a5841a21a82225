"""Conditional requirement evaluation.

Two independent sources can make a field required beyond the schema's
``required`` list:

- schema-level ``if``/``then``/``else`` blocks and ``allOf`` entries,
  evaluated with three-valued logic by ``conditionally_required_fields``
- a field's own ``x-required_if`` rule, evaluated by
  ``is_field_conditionally_required``
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from .enums import ConditionOutcome, Operator
from .models import ConditionalRule, FieldDescriptor, IfClause
from .utils import coerce_str
from .validation import is_empty_value

logger = logging.getLogger(__name__)


def is_filled(value: Any, files_supported: bool = True) -> bool:
    return not is_empty_value(value, files_supported=files_supported)


def evaluate_condition(
    if_clause: IfClause, values: Mapping[str, Any], files_supported: bool = True
) -> ConditionOutcome:
    # undecidable until every field in if.required is filled
    for name in if_clause.required:
        if not is_filled(values.get(name), files_supported):
            return ConditionOutcome.UNKNOWN

    for name, condition in if_clause.properties.items():
        if not condition.matches(values.get(name)):
            return ConditionOutcome.NO_MATCH

    return ConditionOutcome.MATCH


def extract_rules(schema: Mapping[str, Any]) -> list[ConditionalRule]:
    """Collect the conditional rules declared by a schema document.

    The top-level ``if`` counts when it has a ``then`` or ``else`` branch;
    every ``allOf`` entry carrying an ``if`` is another rule.
    """
    candidates = []
    has_branch = isinstance(schema.get("then"), Mapping) or isinstance(schema.get("else"), Mapping)
    if isinstance(schema.get("if"), Mapping) and has_branch:
        candidates.append({"if": schema["if"], "then": schema.get("then"), "else": schema.get("else")})

    for entry in schema.get("allOf") or []:
        # an empty if clause still counts and always matches
        if isinstance(entry, Mapping) and isinstance(entry.get("if"), Mapping):
            candidates.append(entry)

    rules = []
    for candidate in candidates:
        try:
            rules.append(ConditionalRule.model_validate(candidate))
        except ValidationError as e:
            logger.warning(f"Skipping malformed conditional rule: {e}")
    return rules


def conditionally_required_fields(
    schema: Mapping[str, Any], values: Mapping[str, Any], files_supported: bool = True
) -> set[str]:
    """Compute the field names required by the schema's conditionals.

    Args:
        schema: Schema document
        values: Current form values
        files_supported: Whether file values are recognized in this host

    Returns:
        Union of the required lists of every decided rule's active branch
    """
    required: set[str] = set()

    for rule in extract_rules(schema):
        outcome = evaluate_condition(rule.if_, values, files_supported)
        if outcome is ConditionOutcome.UNKNOWN:
            continue

        branch = rule.then if outcome is ConditionOutcome.MATCH else rule.else_
        if branch is not None:
            required.update(branch.required)

    return required


def _equals(current: Any, expected: Any) -> bool:
    # native equality only between values of the same type, so True != 1
    if type(current) is type(expected) and current == expected:
        return True
    return coerce_str(current) == coerce_str(expected)


def _matches(current: Any, expected: Any) -> bool:
    if isinstance(expected, (list, tuple)):
        return any(_equals(current, candidate) for candidate in expected)
    return _equals(current, expected)


def is_field_conditionally_required(field: FieldDescriptor, values: Mapping[str, Any]) -> bool:
    """Evaluate a field's own ``x-required_if`` rule.

    Fields without the rule fall back to their unconditional flag. Unknown
    operators compare for equality.
    """
    rule = field.conditional_required
    if rule is None:
        return field.is_required

    current = values.get(rule.field)

    if rule.operator in (Operator.NEQ.value, Operator.NIN.value):
        return not _matches(current, rule.value)
    if rule.operator not in (Operator.EQ.value, Operator.IN.value):
        logger.debug(f"Unknown operator {rule.operator!r} on field {field.name!r}, using eq")
    return _matches(current, rule.value)
