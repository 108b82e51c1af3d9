"""Shared models for the grievance intake wizard."""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from grievance.core.types import DocumentType, DraftStatus, GrievanceCategory, NoticeSeverity

# Index of the review step, the last step of the wizard.
REVIEW_STEP = 3

# Wire shape used by the draft slot and the HTTP API: camelCase keys,
# snake_case attribute names in Python.
_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class FieldType(str, Enum):
    """Supported field types in wizard steps."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PHONE = "phone"
    DATE = "date"
    SELECT = "select"
    CHECKBOX = "checkbox"
    ADDRESS = "address"
    FILE = "file"


class FieldDefinition(BaseModel):
    """Definition of a single form field within a wizard step."""

    id: str
    label: str
    field_type: FieldType
    required: bool = False
    validators: list[str] = Field(default_factory=list)
    options: list[str] = Field(default_factory=list)
    # Per-validator message overrides, keyed by validator name.
    messages: dict[str, str] = Field(default_factory=dict)
    placeholder: str = ""
    help_text: str = ""


class StepDefinition(BaseModel):
    """Definition of a single wizard step."""

    id: str
    title: str
    description: str = ""
    fields: list[FieldDefinition] = Field(default_factory=list)


class WizardDefinition(BaseModel):
    """Full definition of a wizard loaded from YAML."""

    id: str
    title: str
    description: str = ""
    steps: list[StepDefinition] = Field(default_factory=list)

    def step_index(self, step_id: str) -> int:
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                return index
        raise KeyError(f"Unknown step: {step_id!r}")


class ValidationResult(BaseModel):
    """Result of validating a field or step."""

    valid: bool
    errors: dict[str, list[str]] = Field(default_factory=dict)


class DocumentFile(BaseModel):
    """An uploaded attachment with its base64-encoded content."""

    model_config = _WIRE_CONFIG

    name: str
    size: int = Field(ge=0)
    type: str
    content: str

    @model_validator(mode="after")
    def _check_content(self) -> DocumentFile:
        # size must equal the decoded length of content.
        try:
            payload = base64.b64decode(self.content, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"content of {self.name!r} is not valid base64") from exc
        if len(payload) != self.size:
            raise ValueError(
                f"size of {self.name!r} is {self.size} but content holds {len(payload)} bytes"
            )
        return self

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, payload: bytes) -> DocumentFile:
        """Build a document whose size is the true length of ``payload``."""
        doc_type = DocumentType.from_mime(mime_type)
        return cls(
            name=name,
            size=len(payload),
            type=doc_type.value if doc_type else mime_type,
            content=base64.b64encode(payload).decode("ascii"),
        )

    @property
    def data_url(self) -> str:
        return f"data:{self.type};base64,{self.content}"

    def decode(self) -> bytes:
        return base64.b64decode(self.content, validate=True)


class FormData(BaseModel):
    """The single aggregate edited by the wizard."""

    model_config = _WIRE_CONFIG

    full_name: str = ""
    email: str = ""
    phone: str | None = ""
    address: str = ""
    category: str = GrievanceCategory.SERVICE_ISSUE.value
    subject: str = ""
    description: str = ""
    incident_date: str = ""
    files: list[DocumentFile] = Field(default_factory=list)
    agreed_to_terms: bool = False

    @classmethod
    def field_name(cls, key: str) -> str:
        """Resolve a snake_case name or camelCase alias to the attribute name.

        Raises:
            KeyError: If ``key`` is not a form field.
        """
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        raise KeyError(f"Unknown form field: {key!r}")

    @classmethod
    def wire_name(cls, key: str) -> str:
        name = cls.field_name(key)
        return cls.model_fields[name].alias or name

    def is_initial(self) -> bool:
        return self == FormData()

    def merged(self, fields: Mapping[str, Any]) -> FormData:
        """Return a copy with ``fields`` applied on top of the current values."""
        payload = self.model_dump()
        for key, value in fields.items():
            payload[self.field_name(key)] = value
        return FormData.model_validate(payload)


class FormState(BaseModel):
    """Persisted draft snapshot."""

    model_config = _WIRE_CONFIG

    current_step: int = Field(ge=0, le=REVIEW_STEP)
    data: FormData
    is_loaded: bool = True

    @field_validator("data", mode="before")
    @classmethod
    def _require_every_field(cls, value: Any) -> Any:
        # A draft written by an older form may lack fields; treat it as drift.
        if isinstance(value, dict):
            missing = [
                info.alias or name
                for name, info in FormData.model_fields.items()
                if name not in value and (info.alias or name) not in value
            ]
            if missing:
                raise ValueError(f"draft data is missing fields: {', '.join(missing)}")
        return value


class DraftLoad(BaseModel):
    """Tagged result of reading the draft slot."""

    status: DraftStatus
    state: FormState | None = None


class FormErrors(BaseModel):
    """At most one message per known form field."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    category: str | None = None
    subject: str | None = None
    description: str | None = None
    incident_date: str | None = None
    files: str | None = None
    agreed_to_terms: str | None = None

    @classmethod
    def from_messages(cls, messages: Mapping[str, Sequence[str] | str]) -> FormErrors:
        """Keep the first message per field; keys naming no form field are dropped."""
        values: dict[str, str] = {}
        for key, value in messages.items():
            try:
                name = FormData.field_name(key)
            except KeyError:
                continue
            if isinstance(value, str):
                values[name] = value
            elif value:
                values[name] = value[0]
        return cls(**values)

    def get(self, field: str) -> str | None:
        return getattr(self, FormData.field_name(field))

    def without(self, *fields: str) -> FormErrors:
        return self.model_copy(update={FormData.field_name(f): None for f in fields})

    def as_dict(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)

    def __bool__(self) -> bool:
        return bool(self.as_dict())


class SubmitResult(BaseModel):
    """Outcome of handing a grievance to the submission gateway."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    reference_id: str | None = None
    errors: dict[str, list[str]] | None = None


class Notice(BaseModel):
    """A blocking or transient message surfaced to the user."""

    severity: NoticeSeverity
    message: str
    reference_id: str | None = None
