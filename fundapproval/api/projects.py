"""
Project endpoints (stub backend).
"""
from fastapi import APIRouter, Depends

from fundapproval.store import InMemoryStore, get_store

router = APIRouter()


@router.get("/assigned")
async def list_assigned_projects(store: InMemoryStore = Depends(get_store)):
    """Projects assigned to the caller."""
    return store.dataset.projects
