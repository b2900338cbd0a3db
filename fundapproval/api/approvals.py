"""
Approval endpoints (stub backend).
Trail, form snapshot and the per-tab approvals list.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from fundapproval.services.tab_resolver import resolve_tab
from fundapproval.store import InMemoryStore, first_match, get_store

router = APIRouter()


@router.get("")
async def list_approvals(
    tab: Optional[str] = Query(None, description="Filter by tab (initiated, assigned, ...)"),
    store: InMemoryStore = Depends(get_store)
):
    """List approvals, optionally only those whose status lands on the given tab."""
    rows = []
    for approval_id, approval in store.approvals.items():
        record = store.fund_requests.get(approval["requestId"], {})
        workflow = first_match(store.dataset.workflows, "workflowId", record.get("workflowId")) or {}
        status = approval["requestStatus"]
        if tab and resolve_tab(None, status).value != tab.lower():
            continue
        rows.append({
            "approvalId": approval_id,
            "requestTitle": record.get("requestTitle"),
            "workflowName": workflow.get("name"),
            "createdAt": approval["steps"][0]["actedAt"] if approval["steps"] else None,
            "status": status,
        })
    return rows


@router.get("/{approval_id}/trail")
async def get_trail(
    approval_id: int,
    store: InMemoryStore = Depends(get_store)
):
    approval = store.approvals.get(approval_id)
    if approval is None:
        raise HTTPException(status_code=404, detail=f"Approval {approval_id} not found")
    return approval


@router.get("/{approval_id}/form-snapshot")
async def get_form_snapshot(
    approval_id: int,
    store: InMemoryStore = Depends(get_store)
):
    """Pre-resolved form record for the approval, attachments included."""
    snapshot = store.snapshot(approval_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Approval {approval_id} not found")
    return snapshot
