"""Tests for form models and their wire shape."""

from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from grievance.core.types import DocumentType, GrievanceCategory
from grievance.intake.models import DocumentFile, FormData, FormErrors, FormState


class TestDocumentFile:
    def test_from_bytes_sets_true_size(self):
        doc = DocumentFile.from_bytes("scan.png", "image/png", b"\x89PNG1234")
        assert doc.size == 8
        assert doc.decode() == b"\x89PNG1234"
        assert doc.type == DocumentType.PNG

    def test_jpg_alias_normalized(self):
        doc = DocumentFile.from_bytes("photo.jpg", "image/jpg", b"jpeg")
        assert doc.type == "image/jpeg"

    def test_data_url(self):
        doc = DocumentFile.from_bytes("a.pdf", "application/pdf", b"%PDF")
        assert doc.data_url == "data:application/pdf;base64," + base64.b64encode(b"%PDF").decode()

    def test_size_must_match_content(self):
        with pytest.raises(ValidationError, match="content holds 4 bytes"):
            DocumentFile(
                name="a.pdf", size=10, type="application/pdf",
                content=base64.b64encode(b"%PDF").decode(),
            )

    def test_content_must_be_base64(self):
        with pytest.raises(ValidationError, match="not valid base64"):
            DocumentFile(name="a.pdf", size=3, type="application/pdf", content="!!!not base64!!!")

    def test_wire_shape_validated(self):
        doc = DocumentFile.model_validate(
            {"name": "a.png", "size": 3, "type": "image/png", "content": base64.b64encode(b"png").decode()}
        )
        assert doc.decode() == b"png"


class TestFormData:
    def test_initial_defaults(self):
        form = FormData()
        assert form.category == GrievanceCategory.SERVICE_ISSUE
        assert form.files == []
        assert form.agreed_to_terms is False
        assert form.is_initial()

    def test_edit_makes_non_initial(self):
        assert not FormData().merged({"subject": "x"}).is_initial()

    def test_merged_accepts_wire_names(self):
        form = FormData().merged({"fullName": "Ravi", "agreed_to_terms": True})
        assert form.full_name == "Ravi"
        assert form.agreed_to_terms is True

    def test_merged_leaves_original_untouched(self):
        form = FormData()
        form.merged({"email": "a@b.co"})
        assert form.email == ""

    def test_merged_unknown_field(self):
        with pytest.raises(KeyError, match="Unknown form field"):
            FormData().merged({"nickname": "x"})

    def test_wire_dump_uses_camel_case(self):
        dumped = FormData().model_dump(by_alias=True)
        assert "fullName" in dumped
        assert "incidentDate" in dumped
        assert "agreedToTerms" in dumped

    def test_wire_name(self):
        assert FormData.wire_name("incident_date") == "incidentDate"
        assert FormData.wire_name("incidentDate") == "incidentDate"


class TestFormErrors:
    def test_first_message_per_field(self):
        errors = FormErrors.from_messages({"email": ["Invalid email address", "Other"], "files": []})
        assert errors.email == "Invalid email address"
        assert errors.files is None

    def test_accepts_wire_keys_and_drops_unknown(self):
        errors = FormErrors.from_messages({"fullName": ["Required"], "bogus": ["x"]})
        assert errors.as_dict() == {"full_name": "Required"}

    def test_without_clears_only_named(self):
        errors = FormErrors(email="bad", subject="missing")
        cleared = errors.without("email")
        assert cleared.as_dict() == {"subject": "missing"}
        assert errors.email == "bad"

    def test_truthiness(self):
        assert not FormErrors()
        assert FormErrors(phone="bad")

    def test_get(self):
        assert FormErrors(incident_date="future").get("incidentDate") == "future"


class TestFormState:
    def test_round_trip_wire_shape(self, make_form):
        state = FormState(current_step=2, data=make_form())
        raw = state.model_dump_json(by_alias=True)
        assert '"currentStep":2' in raw
        assert '"isLoaded":true' in raw
        assert FormState.model_validate_json(raw) == state

    def test_step_out_of_range(self):
        with pytest.raises(ValidationError):
            FormState(current_step=4, data=FormData())

    def test_missing_data_field_rejected(self):
        data = FormData().model_dump(by_alias=True)
        del data["subject"]
        with pytest.raises(ValidationError, match="missing fields"):
            FormState.model_validate({"currentStep": 1, "data": data, "isLoaded": True})

    def test_unknown_data_field_rejected(self):
        data = FormData().model_dump(by_alias=True)
        data["priority"] = "high"
        with pytest.raises(ValidationError):
            FormState.model_validate({"currentStep": 1, "data": data, "isLoaded": True})
