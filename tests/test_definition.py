"""Tests for loading wizard definitions from YAML."""

from __future__ import annotations

import pytest

from grievance.intake.definition import DEFAULT_WIZARD_PATH, load_wizard
from grievance.intake.models import FieldType, REVIEW_STEP


class TestLoadWizard:
    def test_packaged_definition(self, wizard_definition):
        assert DEFAULT_WIZARD_PATH.exists()
        assert wizard_definition.id == "grievance_form"
        assert [s.id for s in wizard_definition.steps] == ["personal", "grievance", "documents", "review"]
        assert len(wizard_definition.steps) - 1 == REVIEW_STEP

    def test_fields_per_step(self, wizard_definition):
        fields = {s.id: [f.id for f in s.fields] for s in wizard_definition.steps}
        assert fields["personal"] == ["full_name", "email", "phone", "address"]
        assert fields["grievance"] == ["category", "subject", "incident_date", "description"]
        assert fields["documents"] == ["files"]
        assert fields["review"] == ["agreed_to_terms"]

    def test_field_attributes(self, wizard_definition):
        grievance = wizard_definition.steps[wizard_definition.step_index("grievance")]
        category = grievance.fields[0]
        assert category.field_type is FieldType.SELECT
        assert category.required is True
        assert category.options == ["Service Issue", "Billing", "Technical Support", "Refund", "Other"]
        assert category.messages["choice"] == "Please select a category"

    def test_phone_optional(self, wizard_definition):
        phone = wizard_definition.steps[0].fields[2]
        assert phone.id == "phone"
        assert phone.required is False

    def test_unknown_step_index(self, wizard_definition):
        with pytest.raises(KeyError):
            wizard_definition.step_index("payment")

    def test_custom_path(self, tmp_path):
        path = tmp_path / "tiny.yml"
        path.write_text(
            "id: tiny\n"
            "steps:\n"
            "  - id: only\n"
            "    fields:\n"
            "      - id: subject\n"
            "        required: true\n"
        )
        wizard = load_wizard(path)
        assert wizard.title == "tiny"
        assert wizard.steps[0].title == "only"
        field = wizard.steps[0].fields[0]
        assert field.field_type is FieldType.TEXT
        assert field.label == "subject"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_wizard(tmp_path / "absent.yml")
