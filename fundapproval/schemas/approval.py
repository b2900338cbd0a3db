"""Approval trail and approval-list Pydantic schemas."""
from datetime import datetime
from typing import Any, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TrailEntry(BaseModel):
    """Schema for one recorded action in an approval trail."""
    step_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("stepName", "StepName"))
    actor: Optional[str] = Field(default=None, validation_alias=AliasChoices("actor", "Actor", "approverName", "ApproverName"))
    action: Optional[str] = Field(default=None, validation_alias=AliasChoices("action", "Action", "status", "Status"))
    comments: Optional[str] = Field(default=None, validation_alias=AliasChoices("comments", "Comments"))
    acted_at: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("actedAt", "ActedAt", "actionedAt", "ActionedAt"))

    model_config = ConfigDict(populate_by_name=True)


class ApprovalTrail(BaseModel):
    """Schema for the history of a request, including its current status."""
    request_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("requestId", "RequestId", "fundRequestId", "FundRequestId"))
    request_status: Optional[str] = Field(default=None, validation_alias=AliasChoices("requestStatus", "RequestStatus", "status", "Status"))
    steps: list[TrailEntry] = Field(default_factory=list, validation_alias=AliasChoices("steps", "Steps", "trail", "Trail"))

    model_config = ConfigDict(populate_by_name=True)


def _pick(data: dict, *keys: str) -> Any:
    """Return the first key present with a non-null value."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


class ApprovalRow(BaseModel):
    """One row of the approvals list, normalized from the many shapes the backend emits."""
    ref: Optional[str] = None
    title: Optional[str] = None
    particulars: Optional[str] = None
    initiated_by: Optional[str] = None
    initiated_date: Optional[datetime] = None
    last_action_date: Optional[datetime] = None
    needed_by: Optional[datetime] = None
    status: Optional[str] = None

    @classmethod
    def from_payload(cls, row: dict) -> "ApprovalRow":
        ref = _pick(row, "approvalId", "fundRequestId", "id")
        return cls(
            ref=None if ref is None else str(ref),
            title=_pick(row, "approvals", "title", "requestTitle", "Name"),
            particulars=_pick(row, "particulars", "workflowName", "workflow", "categoryName"),
            initiated_by=_pick(row, "initiatedBy", "initiatorName", "requesterName"),
            initiated_date=_pick(row, "initiatedDate", "createdAt", "created", "CreatedAt"),
            last_action_date=_pick(row, "lastActionDate", "lastActionAt", "actionedAt", "ActionedAt"),
            needed_by=_pick(row, "approvalNeededByDate", "neededBy", "dueBy", "requiredByDate", "deadline"),
            status=_pick(row, "approvalStatus", "status"),
        )
