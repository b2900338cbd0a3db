from dataclasses import dataclass, field
from enum import Enum


class Tab(str, Enum):
    """View contexts a request can be opened in"""
    INITIATED = "initiated"
    SENTBACK = "sentback"
    ASSIGNED = "assigned"
    APPROVED = "approved"
    REJECTED = "rejected"


class Mode(str, Enum):
    INITIATOR = "initiator"
    APPROVER = "approver"


class Action(str, Enum):
    """Buttons the action bar can show"""
    APPROVE = "approve"
    SENT_BACK = "sentBack"
    REJECT = "reject"
    APPROVE_WITH_MODIFICATION = "approveWithModification"
    UPDATE = "update"
    CANCEL = "cancel"
    SHARE = "share"


APPROVER_ACTIONS = frozenset({
    Action.APPROVE,
    Action.SENT_BACK,
    Action.REJECT,
    Action.APPROVE_WITH_MODIFICATION,
})

INITIATOR_ACTIONS = frozenset({Action.UPDATE, Action.CANCEL, Action.SHARE})


@dataclass(frozen=True)
class ViewContext:
    """Derived view policy. Recomputed, never mutated."""
    tab: Tab
    mode: Mode
    disabled: bool
    hide_actions: bool
    visible_actions: frozenset = field(default_factory=frozenset)

    def shows(self, action: Action) -> bool:
        return not self.hide_actions and action in self.visible_actions
