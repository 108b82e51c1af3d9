"""Core type definitions shared across the grievance modules."""

from __future__ import annotations

from enum import StrEnum


class GrievanceCategory(StrEnum):
    """Categories a grievance can be filed under."""

    SERVICE_ISSUE = "Service Issue"
    BILLING = "Billing"
    TECHNICAL_SUPPORT = "Technical Support"
    REFUND = "Refund"
    OTHER = "Other"


class DocumentType(StrEnum):
    """Accepted attachment formats, keyed by MIME type."""

    PDF = "application/pdf"
    JPEG = "image/jpeg"
    PNG = "image/png"

    @classmethod
    def from_mime(cls, mime_type: str | None) -> DocumentType | None:
        """Map a declared MIME type to a DocumentType, or None if unsupported."""
        if not mime_type:
            return None
        normalized = mime_type.strip().lower()
        if normalized == "image/jpg":
            return cls.JPEG
        try:
            return cls(normalized)
        except ValueError:
            return None


class WizardPhase(StrEnum):
    """Lifecycle phase of a wizard session."""

    INITIALIZING = "initializing"
    DRAFT_PENDING = "draft_pending"
    EDITING = "editing"
    SUBMITTING = "submitting"


class NoticeSeverity(StrEnum):
    """Severity of a notice surfaced to the user."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class DraftStatus(StrEnum):
    """Outcome of reading the persisted draft slot."""

    OK = "ok"
    ABSENT = "absent"
    CORRUPT = "corrupt"
