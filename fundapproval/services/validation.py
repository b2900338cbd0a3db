"""
Request-form validation.

`validate_request` is a pure function of the current selection, schema,
dynamic values and draft. It is re-evaluated on every change and once more
in full on submit.
"""
import math
from datetime import date
from typing import Any, Mapping, Optional

from fundapproval.models.draft import RequestDraft
from fundapproval.schemas.catalog import FormSchema
from fundapproval.services.derivation import days_until, parse_amount
from fundapproval.services.schema_renderer import RESERVED_KEYS


# Error keys for the fixed (non-schema) inputs
WORKFLOW = "workflow"
PROJECT = "project"
TITLE = "whatNeed"
AMOUNT = "amount"
APPROVAL_BY = "approvalBy"

MESSAGES = {
    WORKFLOW: "Please select a workflow.",
    PROJECT: "Please select a project.",
    TITLE: "This field is required.",
    AMOUNT: "Enter a valid amount (> 0).",
    APPROVAL_BY: "Please select the approval deadline.",
    "approvalByPast": "Approval deadline cannot be in the past.",
}


def is_blank(value: Any) -> bool:
    """Blank after trimming. A URL list is blank when none of its entries is."""
    if value is None:
        return True
    if isinstance(value, (list, tuple)):
        return all(is_blank(v) for v in value)
    return str(value).strip() == ""


def validate_request(
    *,
    selected_workflow: str,
    selected_project: str,
    schema: Optional[FormSchema],
    values: Mapping[str, Any],
    draft: RequestDraft,
    is_edit: bool = False,
    today: Optional[date] = None,
) -> dict[str, str]:
    """
    Compute the error mapping for the current form state.

    Returns:
        Mapping of field key to message; empty when the form can be submitted
    """
    errors: dict[str, str] = {}

    # Workflow is fixed once the request exists
    if not selected_workflow and not is_edit:
        errors[WORKFLOW] = MESSAGES[WORKFLOW]

    if schema is not None and schema.is_required("projectId") and not selected_project:
        errors[PROJECT] = MESSAGES[PROJECT]

    if is_blank(draft.title):
        errors[TITLE] = MESSAGES[TITLE]

    if not is_blank(draft.amount):
        amount = parse_amount(draft.amount)
        if not math.isfinite(amount) or amount <= 0:
            errors[AMOUNT] = MESSAGES[AMOUNT]

    if draft.approval_by is None:
        errors[APPROVAL_BY] = MESSAGES[APPROVAL_BY]
    elif days_until(draft.approval_by, today) < 0:
        errors[APPROVAL_BY] = MESSAGES["approvalByPast"]

    for f in (schema.fields if schema is not None else []):
        if f.required and f.key not in RESERVED_KEYS and is_blank(values.get(f.key)):
            errors[f.key] = f"{f.label} is required."

    return errors
