"""Validation engine for grievance wizard steps."""

from __future__ import annotations

from typing import Any, Callable

from grievance.intake.models import FieldDefinition, StepDefinition, ValidationResult, WizardDefinition
from grievance.intake.validators import VALIDATORS


class ValidationEngine:
    """Registry-based validation engine.

    Runs all validators for a step's fields against submitted data. Step
    rules never mutate the data they are given.
    """

    def __init__(self) -> None:
        self._validators: dict[str, Callable[..., str | None]] = dict(VALIDATORS)

    def register(self, name: str, fn: Callable[..., str | None]) -> None:
        self._validators[name] = fn

    def validate_field(
        self, field: FieldDefinition, value: Any, params: dict[str, Any] | None = None
    ) -> list[str]:
        """Validate a single field value. Returns list of error messages."""
        errors: list[str] = []
        params = params or {}

        # Always check required first
        if field.required:
            fn = self._validators.get("required")
            if fn:
                err = fn(value)
                if err:
                    errors.append(field.messages.get("required", err))
                    return errors  # No point running other validators on empty

        for validator_name in field.validators:
            # Validator name may include params like "min_length:min_chars=100"
            parts = validator_name.split(":", 1)
            name = parts[0]
            extra_params: dict[str, Any] = {}
            if len(parts) > 1:
                for pair in parts[1].split(","):
                    k, _, v = pair.partition("=")
                    extra_params[k.strip()] = v.strip()

            fn = self._validators.get(name)
            if fn is None:
                continue

            merged = {"options": field.options, **params, **extra_params}
            err = fn(value, **merged)
            if err:
                errors.append(field.messages.get(name, err))

        return errors

    def validate_step(
        self, step: StepDefinition, data: dict[str, Any], params: dict[str, Any] | None = None
    ) -> ValidationResult:
        """Validate all fields in a step against submitted data."""
        all_errors: dict[str, list[str]] = {}

        for field in step.fields:
            value = data.get(field.id)
            field_errors = self.validate_field(field, value, params)
            if field_errors:
                all_errors[field.id] = field_errors

        return ValidationResult(
            valid=len(all_errors) == 0,
            errors=all_errors,
        )

    def validate_all(
        self, wizard: WizardDefinition, data: dict[str, Any], params: dict[str, Any] | None = None
    ) -> ValidationResult:
        """Run every step's rules, regardless of which step is being viewed."""
        all_errors: dict[str, list[str]] = {}
        for step in wizard.steps:
            all_errors.update(self.validate_step(step, data, params).errors)
        return ValidationResult(valid=len(all_errors) == 0, errors=all_errors)
