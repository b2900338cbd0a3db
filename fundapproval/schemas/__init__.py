"""Pydantic schemas for backend payloads"""
from fundapproval.schemas.catalog import (
    FieldDescriptor,
    FieldOption,
    FieldType,
    FormSchema,
    ProjectSummary,
    WorkflowSummary,
)
from fundapproval.schemas.fund_request import (
    AttachmentInfo,
    FieldEntry,
    FundRequestCreate,
    FundRequestCreated,
    FundRequestRecord,
    FundRequestResubmit,
)
from fundapproval.schemas.approval import ApprovalRow, ApprovalTrail, TrailEntry

__all__ = [
    "FieldDescriptor",
    "FieldOption",
    "FieldType",
    "FormSchema",
    "ProjectSummary",
    "WorkflowSummary",
    "AttachmentInfo",
    "FieldEntry",
    "FundRequestCreate",
    "FundRequestCreated",
    "FundRequestRecord",
    "FundRequestResubmit",
    "ApprovalRow",
    "ApprovalTrail",
    "TrailEntry",
]
