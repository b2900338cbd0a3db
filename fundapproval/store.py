"""
In-memory storage behind the stub backend.

Seeded from a MockDataset; lives on `app.state.store` for the lifetime of the
FastAPI app.
"""
import itertools
import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import Request

from fundapproval.mocks import MockDataset
from fundapproval.schemas.fund_request import FundRequestCreate, FundRequestResubmit

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Fund requests, their attachments and approval trails, keyed by id."""

    def __init__(self, dataset: Optional[MockDataset] = None):
        self.dataset = dataset or MockDataset()
        self.fund_requests: dict[int, dict] = {}
        self.attachments: dict[int, list[dict]] = {}
        self.approvals: dict[int, dict] = {}
        self._request_ids = itertools.count(1)
        self._attachment_ids = itertools.count(1)

    def create_fund_request(self, body: FundRequestCreate) -> dict:
        request_id = next(self._request_ids)
        record = {
            "id": request_id,
            "requestTitle": body.title,
            "description": body.description,
            "amount": body.amount,
            "fields": [f.model_dump(by_alias=True) for f in body.fields],
            "workflowId": body.workflow_id,
            "projectId": body.project_id,
        }
        self.fund_requests[request_id] = record
        self.attachments[request_id] = []
        # One approval per request; the approval id mirrors the request id
        self.approvals[request_id] = {
            "requestId": request_id,
            "requestStatus": "Pending",
            "steps": [{"stepName": "Initiator", "action": "Initiated", "actedAt": _now()}],
        }
        logger.info(f"Stored fund request {request_id} (workflow={body.workflow_id})")
        return record

    def resubmit_fund_request(self, request_id: int, body: FundRequestResubmit) -> Optional[dict]:
        record = self.fund_requests.get(request_id)
        if record is None:
            return None
        record.update({
            "requestTitle": body.title,
            "description": body.description,
            "amount": body.amount,
            "fields": [f.model_dump(by_alias=True) for f in body.fields],
        })
        if body.project_id is not None:
            record["projectId"] = body.project_id
        approval = self.approvals.get(request_id)
        if approval is not None:
            approval["requestStatus"] = "Pending"
            approval["steps"].append({"stepName": "Initiator", "action": "Resubmitted", "actedAt": _now()})
        logger.info(f"Resubmitted fund request {request_id}")
        return record

    def add_attachment(self, request_id: int, file_name: str, size: int) -> dict:
        attachment = {"id": next(self._attachment_ids), "fileName": file_name, "size": size}
        self.attachments.setdefault(request_id, []).append(attachment)
        return attachment

    def set_status(self, approval_id: int, status: str) -> None:
        self.approvals[approval_id]["requestStatus"] = status

    def snapshot(self, approval_id: int) -> Optional[dict]:
        approval = self.approvals.get(approval_id)
        if approval is None:
            return None
        record = self.fund_requests.get(approval["requestId"])
        if record is None:
            return None
        return {**record, "attachments": list(self.attachments.get(record["id"], []))}


def _now() -> str:
    return datetime.utcnow().isoformat()


def get_store(request: Request) -> InMemoryStore:
    """FastAPI dependency returning the app's store."""
    return request.app.state.store


def first_match(items: list[dict], key: str, value: Any) -> Optional[dict]:
    for item in items:
        if item.get(key) == value:
            return item
    return None
