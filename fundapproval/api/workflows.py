"""
Workflow catalog endpoints (stub backend).
"""
from fastapi import APIRouter, Depends

from fundapproval.store import InMemoryStore, get_store

router = APIRouter()


@router.get("")
async def list_workflows(store: InMemoryStore = Depends(get_store)):
    """List workflows a request can be raised against."""
    return store.dataset.workflows
