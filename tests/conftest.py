"""Shared test fixtures and helpers."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from grievance.intake.definition import load_wizard
from grievance.intake.drafts import DraftStore, InMemoryDraftSlot
from grievance.intake.models import DocumentFile, FormData
from grievance.intake.scheduler import ManualClock
from grievance.intake.validation import ValidationEngine

TODAY = date(2024, 6, 15)
MIB = 1024 * 1024


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(today=TODAY)


@pytest.fixture
def wizard_definition():
    return load_wizard()


@pytest.fixture
def validation_engine() -> ValidationEngine:
    return ValidationEngine()


@pytest.fixture
def slot() -> InMemoryDraftSlot:
    return InMemoryDraftSlot()


@pytest.fixture
def drafts(slot) -> DraftStore:
    return DraftStore(slot)


@pytest.fixture
def make_document():
    def _make(name: str = "receipt.pdf", size: int = 1024, mime_type: str = "application/pdf") -> DocumentFile:
        return DocumentFile.from_bytes(name, mime_type, b"\x00" * size)
    return _make


@pytest.fixture
def make_form(make_document):
    """Build a FormData that passes every step, with overrides applied."""
    def _make(**overrides: Any) -> FormData:
        values: dict[str, Any] = {
            "full_name": "Asha Verma",
            "email": "asha.verma@example.in",
            "phone": "9876543210",
            "address": "14 MG Road, Bengaluru",
            "category": "Billing",
            "subject": "Double charge on March bill",
            "description": "I was charged twice for the same billing period. " * 3,
            "incident_date": "2024-05-20",
            "files": [make_document()],
            "agreed_to_terms": True,
        }
        values.update(overrides)
        return FormData(**values)
    return _make
