from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from fundapproval.models.attachment import Attachment


@dataclass
class RequestDraft:
    """Fixed (non-schema) part of a request being edited."""
    title: str = ""                      # "What do you need?"
    description: str = ""                # "Why do you need it?"
    amount: str = ""                     # raw input; parsed at submit
    approval_by: Optional[date] = None
    attachments: list[Attachment] = field(default_factory=list)
