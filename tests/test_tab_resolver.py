"""
Tests for tab resolution and view policy.
"""
import pytest

from fundapproval.models.view_context import Action, Mode, Tab
from fundapproval.services.tab_resolver import (
    DEFAULT_TAB,
    build_view_context,
    initiator_context,
    resolve_tab,
    tab_from_status,
    view_key,
)


# ============================================================
# TAB RESOLUTION
# ============================================================

def test_url_tab_wins_over_status():
    assert resolve_tab("approved", "Pending") == Tab.APPROVED


def test_url_tab_is_case_insensitive():
    assert resolve_tab(" SentBack ", None) == Tab.SENTBACK


def test_unknown_url_tab_falls_back_to_status():
    assert resolve_tab("bogus", "Rejected") == Tab.REJECTED


@pytest.mark.parametrize(
    "status, expected",
    [
        ("Pending", "assigned"),
        ("In Progress", "assigned"),
        ("in_progress", "assigned"),
        ("Sent-Back", "sentback"),
        ("Approved With Modification", "approved"),
        ("REJECTED", "rejected"),
        ("Submitted", "initiated"),
    ],
)
def test_status_lookup(status, expected):
    assert tab_from_status(status) == expected


def test_unknown_status_has_no_tab():
    assert tab_from_status("Escalated") is None


def test_missing_status_resolves_to_assigned():
    assert resolve_tab(None, None) == Tab.ASSIGNED
    assert resolve_tab(None, "") == Tab.ASSIGNED


def test_unmapped_status_resolves_to_default():
    assert resolve_tab(None, "Escalated") == DEFAULT_TAB == Tab.ASSIGNED


# ============================================================
# VIEW POLICY
# ============================================================

def test_assigned_context_is_read_only_approver():
    context = build_view_context(Tab.ASSIGNED)

    assert context.mode == Mode.APPROVER
    assert context.disabled is True
    assert context.hide_actions is False
    assert context.shows(Action.APPROVE)
    assert context.shows(Action.SENT_BACK)
    assert context.shows(Action.REJECT)
    assert context.shows(Action.APPROVE_WITH_MODIFICATION)
    assert not context.shows(Action.UPDATE)


def test_approved_context_is_read_only_without_actions():
    context = build_view_context(Tab.APPROVED)

    assert context.mode == Mode.INITIATOR
    assert context.disabled is True
    assert context.hide_actions is True
    assert not context.shows(Action.APPROVE)


@pytest.mark.parametrize("tab", [Tab.INITIATED, Tab.SENTBACK, Tab.REJECTED])
def test_initiator_tabs_are_editable(tab):
    context = build_view_context(tab)

    assert context.mode == Mode.INITIATOR
    assert context.disabled is False
    assert context.hide_actions is True


def test_new_request_context():
    context = initiator_context()

    assert context.tab == Tab.INITIATED
    assert context.disabled is False
    assert context.shows(Action.UPDATE)
    assert context.shows(Action.SHARE)
    assert not context.shows(Action.APPROVE)


def test_view_key_changes_with_tab_and_readiness():
    assert view_key(5, Tab.ASSIGNED, True) == "5:assigned:ready"
    assert view_key(5, Tab.ASSIGNED, False) == "5:assigned:loading"
    assert view_key(None, Tab.APPROVED, True) == ":approved:ready"
