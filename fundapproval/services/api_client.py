"""
REST client for the FundApproval backend.

Every request carries `Accept: application/json` and, when the credential
provider yields one, a bearer token. Cookies persist on the underlying
httpx client. When a call fails and a MockDataset was supplied, canned data
is returned instead of raising.
"""
import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

import httpx
from pydantic import ValidationError

from fundapproval.config import settings
from fundapproval.mocks import MockDataset
from fundapproval.models.attachment import PendingAttachment
from fundapproval.schemas.approval import ApprovalRow, ApprovalTrail
from fundapproval.schemas.catalog import FormSchema, ProjectSummary, WorkflowSummary
from fundapproval.schemas.fund_request import (
    AttachmentInfo,
    FundRequestCreate,
    FundRequestCreated,
    FundRequestRecord,
    FundRequestResubmit,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(Exception):
    """Raised when a backend call fails, or its response is not usable"""

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class CredentialProvider(Protocol):
    def get_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    """Credential provider returning a fixed token (or none)."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token or None


class ApiClient:
    """Async client for the endpoints the request form consumes."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        credentials: Optional[CredentialProvider] = None,
        mocks: Optional[MockDataset] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.credentials = credentials or StaticTokenProvider(settings.api_token)
        if mocks is None and settings.use_mocks:
            mocks = MockDataset()
        self.mocks = mocks
        self._http = httpx.AsyncClient(base_url=self.base_url, transport=transport)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        files: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """
        Issue one request and return the decoded body.

        Absolute URLs bypass the base URL; relative paths are appended to it.

        Raises:
            ApiError: on transport failure or non-2xx status, unless a mock covers the call
        """
        try:
            response = await self._http.request(
                method,
                path,
                json=json,
                files=files,
                params=params,
                headers=self._headers(),
            )
            content_type = response.headers.get("content-type", "")
            if "application/json" in content_type:
                try:
                    data = response.json()
                except ValueError:
                    data = None
            else:
                data = response.text
            if response.is_error:
                raise ApiError(
                    f"Request failed: {response.status_code}",
                    status=response.status_code,
                    data=data,
                )
            return data
        except (ApiError, httpx.HTTPError) as e:
            if self.mocks is not None:
                mocked = self.mocks.resolve(method, path)
                if mocked is not None:
                    logger.warning(f"{method} {path} failed ({e}); serving mock data")
                    return mocked.data
            if isinstance(e, ApiError):
                raise
            raise ApiError(f"Request failed: {type(e).__name__}: {e}") from e

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, json=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("PUT", path, json=body, **kwargs)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def list_workflows(self) -> list[WorkflowSummary]:
        path = "/workflows"
        data = await self.get(path)
        return _decode(path, data, lambda d: [WorkflowSummary.model_validate(w) for w in _as_list(d)])

    async def list_assigned_projects(self) -> list[ProjectSummary]:
        path = "/projects/assigned"
        data = await self.get(path)
        return _decode(path, data, lambda d: [ProjectSummary.model_validate(p) for p in _as_list(d)])

    async def get_form_schema(self, workflow_id: int) -> FormSchema:
        path = f"/formschemas/by-workflow/{workflow_id}"
        data = await self.get(path)
        return _decode(path, data, FormSchema.from_payload)

    async def get_fund_request(self, request_id: Any) -> FundRequestRecord:
        path = f"/fundrequests/{request_id}"
        data = await self.get(path)
        return _decode(path, _require_object(path, data), FundRequestRecord.model_validate)

    async def list_attachments(self, request_id: Any) -> list[AttachmentInfo]:
        path = f"/fundrequests/{request_id}/attachments"
        data = await self.get(path)
        return _decode(path, data, lambda d: [AttachmentInfo.model_validate(a) for a in _as_list(d)])

    async def create_fund_request(self, payload: FundRequestCreate) -> FundRequestCreated:
        path = "/fundrequests"
        data = await self.post(path, payload.model_dump(by_alias=True))
        return _decode(path, data if isinstance(data, dict) else {}, FundRequestCreated.model_validate)

    async def resubmit_fund_request(self, request_id: Any, payload: FundRequestResubmit) -> Any:
        return await self.put(f"/fundrequests/{request_id}/resubmit", payload.model_dump(by_alias=True))

    async def upload_attachment(self, request_id: Any, attachment: PendingAttachment) -> Any:
        files = {"file": (attachment.name, attachment.content, attachment.content_type)}
        return await self.request("POST", f"/fundrequests/{request_id}/attachments", files=files)

    async def get_approval_trail(self, approval_id: Any) -> ApprovalTrail:
        path = f"/approvals/{approval_id}/trail"
        data = await self.get(path)
        return _decode(path, data if isinstance(data, dict) else {}, ApprovalTrail.model_validate)

    async def get_form_snapshot(self, approval_id: Any) -> FundRequestRecord:
        path = f"/approvals/{approval_id}/form-snapshot"
        data = await self.get(path)
        return _decode(path, _require_object(path, data), FundRequestRecord.model_validate)

    async def list_approvals(self, tab: str) -> list[ApprovalRow]:
        path = "/approvals"
        data = await self.get(path, params={"tab": tab})
        return _decode(path, data, lambda d: [ApprovalRow.from_payload(r) for r in _as_list(d) if isinstance(r, dict)])


def _as_list(data: Any) -> list:
    return data if isinstance(data, list) else []


def _require_object(path: str, data: Any) -> dict:
    if not isinstance(data, dict):
        raise ApiError(f"Malformed response from {path}: expected an object", data=data)
    return data


def _decode(path: str, data: Any, parse: Callable[[Any], T]) -> T:
    """Parse a 2xx body; payloads that fail validation surface as ApiError."""
    try:
        return parse(data)
    except ValidationError as e:
        logger.warning(f"Malformed response from {path}: {e.error_count()} validation error(s)")
        raise ApiError(f"Malformed response from {path}", data=data) from e
