"""
Tab/context resolution.

Maps the `?tab=` query parameter, or failing that an approval trail's status
string, to a Tab, and derives the view policy (mode, editability, actions)
from it.
"""
from typing import Any, Optional

from fundapproval.models.view_context import (
    APPROVER_ACTIONS,
    INITIATOR_ACTIONS,
    Mode,
    Tab,
    ViewContext,
)


ALLOWED_TABS = tuple(t.value for t in Tab)

# Server status (lower-cased, spaces/underscores/dashes removed) → tab
STATUS_TO_TAB = {
    "pending": Tab.ASSIGNED.value,
    "inprogress": Tab.ASSIGNED.value,
    "assigned": Tab.ASSIGNED.value,
    "awaitingapproval": Tab.ASSIGNED.value,
    "initiated": Tab.INITIATED.value,
    "submitted": Tab.INITIATED.value,
    "resubmitted": Tab.INITIATED.value,
    "sentback": Tab.SENTBACK.value,
    "returned": Tab.SENTBACK.value,
    "approved": Tab.APPROVED.value,
    "approvedwithmodification": Tab.APPROVED.value,
    "completed": Tab.APPROVED.value,
    "closed": Tab.APPROVED.value,
    "rejected": Tab.REJECTED.value,
}

# Tab for a view whose status is missing or not in the table
DEFAULT_TAB = Tab.ASSIGNED


def _normalize_status(status: Optional[str]) -> str:
    text = (status or "").strip().lower()
    for ch in (" ", "_", "-"):
        text = text.replace(ch, "")
    return text


def tab_from_status(status: Optional[str]) -> Optional[str]:
    """Tab for a server status string, or None when the status is unknown."""
    return STATUS_TO_TAB.get(_normalize_status(status))


def resolve_tab(url_tab: Optional[str], trail_status: Optional[str] = None) -> Tab:
    """
    Effective tab for a request view.

    An allowed `url_tab` wins. Otherwise the trail status is looked up; a
    missing or unknown status resolves to DEFAULT_TAB.
    """
    requested = (url_tab or "").strip().lower()
    if requested in ALLOWED_TABS:
        return Tab(requested)

    inferred = tab_from_status(trail_status)
    if inferred in ALLOWED_TABS:
        return Tab(inferred)

    return DEFAULT_TAB


def build_view_context(tab: Tab) -> ViewContext:
    """View policy for a resolved tab on the request review surface."""
    tab = Tab(tab)
    assigned = tab == Tab.ASSIGNED
    return ViewContext(
        tab=tab,
        mode=Mode.APPROVER if assigned else Mode.INITIATOR,
        disabled=tab in (Tab.ASSIGNED, Tab.APPROVED),
        hide_actions=not assigned,
        visible_actions=APPROVER_ACTIONS if assigned else frozenset(),
    )


def initiator_context() -> ViewContext:
    """View policy for a brand new request."""
    return ViewContext(
        tab=Tab.INITIATED,
        mode=Mode.INITIATOR,
        disabled=False,
        hide_actions=False,
        visible_actions=INITIATOR_ACTIONS,
    )


def view_key(record_id: Any, tab: Tab, ready: bool) -> str:
    """Identity of a form instance; any change means the form is rebuilt from scratch."""
    return f"{'' if record_id is None else record_id}:{Tab(tab).value}:{'ready' if ready else 'loading'}"
