"""Form session: values, errors and submission for one form instance."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from .compiler import compile_schema
from .conditions import conditionally_required_fields, is_field_conditionally_required
from .config import Settings
from .consts import FORM_ERROR_KEY
from .enums import FormState
from .models import FieldDescriptor, SelectOption, SubmissionResult
from .options import DependentOptionsMap, resolve_dependent_options
from .utils import get_today
from .validation import is_file_value, normalize_value_for_submit, validate_field

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[dict[str, Any]], Any]
AsyncSubmitHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class FormSession:
    """Owns the state of one form instance.

    Derived state (conditional requirements, dependent options) is computed
    on demand from the current schema and values. ``load_schema`` is the
    explicit schema-changed event; it recompiles fields and resets values.

    Overlapping ``submit``/``asubmit`` calls on one session are not guarded.
    """

    def __init__(
        self,
        schema: Optional[Mapping[str, Any]] = None,
        dependent_options_map: Optional[DependentOptionsMap] = None,
        settings: Optional[Settings] = None,
        on_first_error: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings or Settings()
        self.dependent_options_map = dependent_options_map or {}
        self.on_first_error = on_first_error

        self.schema: Optional[Mapping[str, Any]] = None
        self.fields: list[FieldDescriptor] = []
        self.values: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.state = FormState.UNINITIALIZED
        self.is_submitting = False
        self.submit_success = False
        self.last_submitted: Optional[dict[str, Any]] = None
        self.first_error_field: Optional[str] = None

        if schema is not None:
            self.load_schema(schema)

    def load_schema(self, schema: Mapping[str, Any]) -> None:
        self.schema = schema
        self.fields = compile_schema(schema, order_default=self.settings.order_default)
        self.values = {field.name: "" for field in self.fields}
        self.errors = {}
        self.submit_success = False
        self.last_submitted = None
        self.first_error_field = None
        self.state = FormState.READY
        logger.debug(f"Loaded schema with {len(self.fields)} field(s)")

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        return next((field for field in self.fields if field.name == name), None)

    def set_value(self, name: str, value: Any) -> None:
        self.values[name] = value

        for field in self.fields:
            if field.depends_on == name:
                self.values[field.name] = ""

        self.errors.pop(name, None)
        self.submit_success = False

    def is_required(self, field: FieldDescriptor) -> bool:
        if field.is_required:
            return True
        if self.schema is not None and field.name in conditionally_required_fields(
            self.schema, self.values, self.settings.files_supported
        ):
            return True
        return is_field_conditionally_required(field, self.values)

    def required_fields(self) -> set[str]:
        """Names of every field currently required"""
        return {field.name for field in self.fields if self.is_required(field)}

    def dependent_options(self, field: FieldDescriptor) -> list[SelectOption]:
        return resolve_dependent_options(field, self.values, self.dependent_options_map)

    def validate_all(self) -> bool:
        previous_state = self.state
        self.state = FormState.VALIDATING
        try:
            today = get_today(self.settings.get_timezone())
            errors = {}
            for field in self.fields:
                error = validate_field(
                    field,
                    self.values.get(field.name),
                    self.is_required(field),
                    files_supported=self.settings.files_supported,
                    today=today,
                )
                if error:
                    errors[field.name] = error

            self.errors = errors
            return not errors
        finally:
            self.state = previous_state

    def normalized_values(self) -> dict[str, Any]:
        return {name: normalize_value_for_submit(value) for name, value in self.values.items()}

    def build_payload(self, normalized: Mapping[str, Any]) -> dict[str, Any]:
        """JSON-safe copy of submitted values with files reduced to metadata"""
        payload = {}
        for name, value in normalized.items():
            if is_file_value(value, self.settings.files_supported):
                payload[name] = value.model_dump()
            else:
                payload[name] = value
        return payload

    def _reject(self) -> SubmissionResult:
        self.first_error_field = next(
            (field.name for field in self.fields if field.name in self.errors), None
        )
        logger.info(f"Submission blocked by {len(self.errors)} invalid field(s)")

        if self.first_error_field and self.on_first_error:
            self.on_first_error(self.first_error_field)

        return SubmissionResult(
            success=False,
            errors=dict(self.errors),
            first_error_field=self.first_error_field,
        )

    def _begin(self) -> tuple[dict[str, Any], dict[str, Any]]:
        self.first_error_field = None
        self.is_submitting = True
        self.submit_success = False
        self.state = FormState.SUBMITTING

        normalized = self.normalized_values()
        payload = self.build_payload(normalized)
        logger.info(f"Form submitted: {payload}")
        return normalized, payload

    def _succeed(self, payload: dict[str, Any]) -> SubmissionResult:
        self.last_submitted = payload
        self.submit_success = True
        return SubmissionResult(success=True, data=payload)

    def _fail(self, error: Exception) -> SubmissionResult:
        logger.error(f"Form submission error: {error}", exc_info=True)
        self.errors = {FORM_ERROR_KEY: self.settings.submit_error_message}
        return SubmissionResult(success=False, errors=dict(self.errors))

    def _finish(self) -> None:
        self.is_submitting = False
        self.state = FormState.READY

    def submit(self, handler: SubmitHandler) -> SubmissionResult:
        """Validate, normalize and hand the values to ``handler``.

        Invalid forms are not submitted: errors are recorded and the first
        failing field is reported. A raising handler leaves a single
        form-level error.

        Raises:
            TypeError: If ``handler`` is asynchronous, use ``asubmit`` instead
        """
        if inspect.iscoroutinefunction(handler):
            raise TypeError("submit() needs a synchronous handler, use asubmit() for coroutines")

        if not self.validate_all():
            return self._reject()

        normalized, payload = self._begin()
        try:
            result = handler(normalized)
        except Exception as e:
            return self._fail(e)
        else:
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                raise TypeError("submit() handler returned an awaitable, use asubmit() instead")
            return self._succeed(payload)
        finally:
            self._finish()

    async def asubmit(self, handler: AsyncSubmitHandler) -> SubmissionResult:
        """Same as ``submit`` for a coroutine handler"""
        if not self.validate_all():
            return self._reject()

        normalized, payload = self._begin()
        try:
            await handler(normalized)
        except Exception as e:
            return self._fail(e)
        else:
            return self._succeed(payload)
        finally:
            self._finish()
