"""
Tests for request validation.

Validates:
- Fixed inputs (workflow, project, title, amount, deadline)
- Required dynamic fields, including the repeatable URL list
- Reserved keys never produce dynamic-field errors
"""
import pytest
from datetime import date, timedelta

from fundapproval.models.draft import RequestDraft
from fundapproval.schemas.catalog import FormSchema
from fundapproval.services.validation import MESSAGES, is_blank, validate_request


TODAY = date(2026, 3, 10)


def _schema(*fields: dict) -> FormSchema:
    return FormSchema.model_validate({"fields": list(fields)})


def _valid_draft(**overrides) -> RequestDraft:
    draft = RequestDraft(title="Laptop", amount="1500", approval_by=TODAY + timedelta(days=10))
    for key, value in overrides.items():
        setattr(draft, key, value)
    return draft


def _validate(draft: RequestDraft, schema=None, values=None, workflow="1", project="101", is_edit=False):
    return validate_request(
        selected_workflow=workflow,
        selected_project=project,
        schema=schema,
        values=values or {},
        draft=draft,
        is_edit=is_edit,
        today=TODAY,
    )


# ============================================================
# FIXED INPUTS
# ============================================================

def test_empty_draft_reports_workflow_title_and_deadline():
    errors = _validate(RequestDraft(), workflow="", project="")

    assert set(errors) == {"workflow", "whatNeed", "approvalBy"}
    assert errors["workflow"] == MESSAGES["workflow"]


def test_valid_draft_has_no_errors():
    assert _validate(_valid_draft()) == {}


def test_workflow_not_required_when_editing():
    errors = _validate(_valid_draft(), workflow="", is_edit=True)
    assert "workflow" not in errors


def test_project_required_only_when_schema_says_so():
    required = _schema({"key": "projectId", "label": "Project", "type": "select", "required": True})
    optional = _schema({"key": "projectId", "label": "Project", "type": "select", "required": False})

    assert _validate(_valid_draft(), schema=required, project="") == {"project": MESSAGES["project"]}
    assert _validate(_valid_draft(), schema=required, project="101") == {}
    assert _validate(_valid_draft(), schema=optional, project="") == {}


def test_blank_title_is_rejected():
    assert "whatNeed" in _validate(_valid_draft(title="   "))


def test_amount_with_thousands_separator_is_valid():
    assert "amount" not in _validate(_valid_draft(amount="12,345.6"))


@pytest.mark.parametrize("amount", ["-5", "0", "abc"])
def test_non_positive_or_garbage_amount_is_rejected(amount):
    errors = _validate(_valid_draft(amount=amount))
    assert errors["amount"] == MESSAGES["amount"]


def test_blank_amount_is_allowed():
    assert "amount" not in _validate(_valid_draft(amount=""))


def test_past_deadline_is_rejected():
    errors = _validate(_valid_draft(approval_by=TODAY - timedelta(days=1)))
    assert errors["approvalBy"] == "Approval deadline cannot be in the past."


def test_deadline_today_is_accepted():
    assert "approvalBy" not in _validate(_valid_draft(approval_by=TODAY))


# ============================================================
# DYNAMIC FIELDS
# ============================================================

def test_required_dynamic_field_uses_label_in_message():
    schema = _schema({"key": "employee", "label": "Employee", "required": True})

    errors = _validate(_valid_draft(), schema=schema, values={"employee": "  "})
    assert errors == {"employee": "Employee is required."}

    assert _validate(_valid_draft(), schema=schema, values={"employee": "Ann"}) == {}


def test_reserved_keys_are_not_validated_as_dynamic_fields():
    schema = _schema(
        {"key": "urgency", "label": "Urgency", "required": True},
        {"key": "additionalInfo", "label": "Additional info", "required": True},
    )
    assert _validate(_valid_draft(), schema=schema, values={}) == {}


def test_required_url_list_needs_one_non_blank_entry():
    schema = _schema({"key": "hyperlinkUrl", "label": "Hyperlink URL", "type": "url", "required": True})

    assert "hyperlinkUrl" in _validate(_valid_draft(), schema=schema, values={"hyperlinkUrl": ["", "  "]})
    assert _validate(_valid_draft(), schema=schema, values={"hyperlinkUrl": ["", "https://a"]}) == {}


def test_is_blank():
    assert is_blank(None)
    assert is_blank("  ")
    assert is_blank([])
    assert is_blank(["", " "])
    assert not is_blank("x")
    assert not is_blank(["", "x"])
    assert not is_blank(0)
