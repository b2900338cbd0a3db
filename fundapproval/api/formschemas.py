"""
Form schema endpoints (stub backend).
"""
from fastapi import APIRouter, Depends, HTTPException

from fundapproval.store import InMemoryStore, first_match, get_store

router = APIRouter()


@router.get("/by-workflow/{workflow_id}")
async def get_schema_by_workflow(
    workflow_id: int,
    store: InMemoryStore = Depends(get_store)
):
    """
    Dynamic field descriptors for a workflow.
    
    Returns 404 if the workflow is unknown.
    """
    if first_match(store.dataset.workflows, "workflowId", workflow_id) is None:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return store.dataset.schema_for(workflow_id)
