"""
Fund request endpoints (stub backend).
Create, read back, resubmit and attach files to fund requests.
"""
import logging
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from fundapproval.schemas.fund_request import FundRequestCreate, FundRequestResubmit
from fundapproval.store import InMemoryStore, first_match, get_store

logger = logging.getLogger(__name__)
router = APIRouter()


def _require(store: InMemoryStore, request_id: int) -> dict:
    record = store.fund_requests.get(request_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Fund request {request_id} not found")
    return record


# Endpoints
@router.post("", status_code=201)
async def create_fund_request(
    body: FundRequestCreate,
    store: InMemoryStore = Depends(get_store)
):
    """
    Create a fund request.
    
    The workflow must exist. Returns the new request id.
    """
    if first_match(store.dataset.workflows, "workflowId", body.workflow_id) is None:
        raise HTTPException(status_code=400, detail=f"Unknown workflow {body.workflow_id}")
    record = store.create_fund_request(body)
    return {"id": record["id"]}


@router.get("/{request_id}")
async def get_fund_request(
    request_id: int,
    store: InMemoryStore = Depends(get_store)
):
    """Get a fund request by ID."""
    return _require(store, request_id)


@router.put("/{request_id}/resubmit")
async def resubmit_fund_request(
    request_id: int,
    body: FundRequestResubmit,
    store: InMemoryStore = Depends(get_store)
):
    """Replace the editable content of a request and put it back in the approval queue."""
    _require(store, request_id)
    store.resubmit_fund_request(request_id, body)
    return {"ok": True}


@router.get("/{request_id}/attachments")
async def list_attachments(
    request_id: int,
    store: InMemoryStore = Depends(get_store)
):
    _require(store, request_id)
    return store.attachments.get(request_id, [])


@router.post("/{request_id}/attachments")
async def upload_attachment(
    request_id: int,
    file: UploadFile = File(...),
    store: InMemoryStore = Depends(get_store)
):
    """Attach one file per call."""
    _require(store, request_id)
    content = await file.read()
    attachment = store.add_attachment(request_id, file.filename or "upload", len(content))
    logger.info(f"Attached {attachment['fileName']} ({len(content)} bytes) to fund request {request_id}")
    return {"uploaded": True, "id": attachment["id"]}
