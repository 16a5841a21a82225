"""Pydantic models for compiled form fields, rules and submissions"""

from __future__ import annotations

from re import Pattern
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from .enums import InputType, Operator
from .utils import coerce_str


class CamelModel(BaseModel):
    """Accepts both schema-style camelCase keys and snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SelectOption(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    label: str
    value: Union[str, bool]


class FileValue(BaseModel):
    """File-like form value: only the metadata the engine inspects."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    size: int = 0
    type: str = ""


class RequiredIf(BaseModel):
    """A field's own ``x-required_if`` rule."""

    field: str
    value: Any = None
    operator: str = Operator.EQ.value


class ValidationRules(CamelModel):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[Pattern[str]] = None
    min_age: Optional[int] = None
    accept: Optional[str] = None
    file_type: Optional[Union[str, list[str]]] = None
    max_size: Optional[int] = None


class ErrorMessages(CamelModel):
    """Per-field overrides for the validator's default messages.

    Note that ``type`` is the override used for the max-length check.
    """

    required: Optional[str] = None
    pattern: Optional[str] = None
    min_length: Optional[str] = None
    type: Optional[str] = None
    min_age: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[str] = None


class FlatOptions(BaseModel):
    kind: Literal["flat"] = "flat"
    options: list[SelectOption] = Field(default_factory=list)


class DependentOptions(BaseModel):
    kind: Literal["dependent"] = "dependent"
    depends_on: str
    # None when the choices come from the host's external map
    options: Optional[dict[str, list[SelectOption]]] = None


OptionSource = Annotated[
    Union[FlatOptions, DependentOptions],
    Field(discriminator="kind"),
]


class FieldDescriptor(BaseModel):
    name: str
    label: str
    placeholder: Optional[str] = None
    order: float
    input_type: InputType = InputType.TEXT
    is_required: bool = False
    conditional_required: Optional[RequiredIf] = None
    validation: ValidationRules = Field(default_factory=ValidationRules)
    error_messages: ErrorMessages = Field(default_factory=ErrorMessages)
    source: Optional[OptionSource] = None

    @computed_field
    @property
    def options(self) -> Optional[list[SelectOption]]:
        if isinstance(self.source, FlatOptions):
            return self.source.options
        return None

    @computed_field
    @property
    def depends_on(self) -> Optional[str]:
        if isinstance(self.source, DependentOptions):
            return self.source.depends_on
        return None

    @computed_field
    @property
    def dependent_options(self) -> Optional[dict[str, list[SelectOption]]]:
        if isinstance(self.source, DependentOptions):
            return self.source.options
        return None


class Condition(BaseModel):
    """``const``/``enum`` matcher for one property of an ``if`` clause."""

    model_config = ConfigDict(extra="ignore")

    const: Any = None
    enum: Optional[list[Any]] = None

    @field_validator("enum", mode="before")
    @classmethod
    def ignore_non_list_enum(cls, v: Any) -> Any:
        return v if isinstance(v, list) else None

    def matches(self, value: Any) -> bool:
        if "const" in self.model_fields_set:
            return coerce_str(value) == coerce_str(self.const)
        if self.enum is not None:
            return any(coerce_str(candidate) == coerce_str(value) for candidate in self.enum)
        return True


class IfClause(BaseModel):
    model_config = ConfigDict(extra="ignore")

    required: list[str] = Field(default_factory=list)
    properties: dict[str, Condition] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def pass_through_non_mapping_conditions(cls, v: Any) -> Any:
        # a condition without const/enum matches any value
        if not isinstance(v, Mapping):
            return {}
        return {
            name: condition if isinstance(condition, (Mapping, Condition)) else {}
            for name, condition in v.items()
        }


class Branch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    required: list[str] = Field(default_factory=list)


class ConditionalRule(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    if_: IfClause = Field(alias="if")
    then: Optional[Branch] = None
    else_: Optional[Branch] = Field(default=None, alias="else")


class SubmissionResult(BaseModel):
    success: bool
    data: Optional[dict[str, Any]] = None
    errors: dict[str, str] = Field(default_factory=dict)
    first_error_field: Optional[str] = None
