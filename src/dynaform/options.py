"""Dependent dropdown option resolution"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .models import FieldDescriptor, SelectOption

DependentOptionsMap = Mapping[str, Mapping[str, list]]


def resolve_dependent_options(
    field: FieldDescriptor,
    values: Mapping[str, Any],
    external_map: Optional[DependentOptionsMap] = None,
) -> list[SelectOption]:
    """Resolve the choices of a dependent dropdown.

    Options embedded in the schema win over the host's external map; the
    two sources are never merged.

    Args:
        field: Compiled field descriptor
        values: Current form values
        external_map: Field name -> parent value -> options

    Returns:
        Options for the parent's current value, empty when the parent is
        unset or no options are known for it
    """
    if not field.depends_on:
        return []

    parent = values.get(field.depends_on)
    if not isinstance(parent, str):
        return []
    parent = parent.strip()
    if not parent:
        return []

    embedded = field.dependent_options
    if embedded is not None and parent in embedded:
        return list(embedded[parent])

    field_map = (external_map or {}).get(field.name)
    if not field_map:
        return []

    return [SelectOption.model_validate(option) for option in field_map.get(parent) or []]
