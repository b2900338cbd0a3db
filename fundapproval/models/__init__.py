"""In-memory request state"""
from fundapproval.models.attachment import (
    Attachment,
    ExistingAttachment,
    PendingAttachment,
    merge_attachments,
)
from fundapproval.models.draft import RequestDraft
from fundapproval.models.view_context import Action, Mode, Tab, ViewContext

__all__ = [
    "Attachment",
    "ExistingAttachment",
    "PendingAttachment",
    "merge_attachments",
    "RequestDraft",
    "Action",
    "Mode",
    "Tab",
    "ViewContext",
]
