"""Loading of YAML wizard definitions."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from grievance.intake.models import FieldDefinition, FieldType, StepDefinition, WizardDefinition

DEFAULT_WIZARD_PATH = Path(__file__).resolve().parent / "wizards" / "grievance_form.yml"


def _parse_field(data: dict[str, Any]) -> FieldDefinition:
    return FieldDefinition(
        id=data["id"],
        label=data.get("label", data["id"]),
        field_type=FieldType(data.get("type", "text")),
        required=data.get("required", False),
        validators=data.get("validators", []),
        options=data.get("options", []),
        messages=data.get("messages", {}),
        placeholder=data.get("placeholder", ""),
        help_text=data.get("help_text", ""),
    )


def _parse_step(data: dict[str, Any]) -> StepDefinition:
    fields = [_parse_field(f) for f in data.get("fields", [])]
    return StepDefinition(
        id=data["id"],
        title=data.get("title", data["id"]),
        description=data.get("description", ""),
        fields=fields,
    )


def load_wizard(path: str | Path | None = None) -> WizardDefinition:
    """Load a wizard definition, defaulting to the packaged grievance form.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    with open(Path(path) if path else DEFAULT_WIZARD_PATH) as fh:
        data = yaml.safe_load(fh)
    steps = [_parse_step(s) for s in data.get("steps", [])]
    return WizardDefinition(
        id=data["id"],
        title=data.get("title", data["id"]),
        description=data.get("description", ""),
        steps=steps,
    )
