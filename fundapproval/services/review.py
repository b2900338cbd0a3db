"""
Review container for an existing request.

Loads the approval trail and the form snapshot side by side, resolves the
view context and owns a RequestForm keyed by (request, tab, readiness). When
the key changes the form is thrown away and rebuilt, so no touched/error
state leaks from one context into another.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable, Optional

from fundapproval.models.view_context import Tab, ViewContext
from fundapproval.schemas.approval import ApprovalTrail
from fundapproval.schemas.fund_request import FundRequestRecord
from fundapproval.services.api_client import ApiClient, ApiError
from fundapproval.services.request_form import RequestForm
from fundapproval.services.scope import LoadScope
from fundapproval.services.tab_resolver import build_view_context, resolve_tab, view_key

logger = logging.getLogger(__name__)


class ReviewSession:
    """Container that resolves context for a request view and hosts its form."""

    def __init__(
        self,
        client: ApiClient,
        approval_id: Optional[Any] = None,
        *,
        tab_param: Optional[str] = None,
        record_id: Optional[Any] = None,
        navigate: Optional[Callable[[str], None]] = None,
        alert: Optional[Callable[[str], None]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.client = client
        self.approval_id = approval_id
        self.record_id = record_id
        self.tab_param = tab_param
        self._navigate = navigate or (lambda path: logger.info(f"Navigate to {path}"))
        self._alert = alert
        self._today = today

        self.trail: Optional[ApprovalTrail] = None
        self.snapshot: Optional[FundRequestRecord] = None
        self.load_error: Optional[str] = None
        self.loading = False

        self.tab: Tab = resolve_tab(tab_param)
        self.context: ViewContext = build_view_context(self.tab)
        self.key: Optional[str] = None
        self.form: Optional[RequestForm] = None

        self._scope = LoadScope()

    async def load(self) -> Optional[RequestForm]:
        """Fetch trail and snapshot, then build (or keep) the form for the resolved context."""
        token = self._scope.begin()
        self.loading = True
        trail, (snapshot, error) = await asyncio.gather(self._fetch_trail(), self._fetch_snapshot())
        if not self._scope.is_current(token):
            logger.debug(f"Discarding stale review load for approval {self.approval_id}")
            return None

        self.trail = trail
        self.snapshot = snapshot
        self.load_error = error
        self.loading = False
        return await self._refresh(token)

    async def change_tab(self, tab_param: Optional[str]) -> Optional[RequestForm]:
        """The `?tab=` parameter changed; re-resolve and rebuild if the key moved."""
        self.tab_param = tab_param
        return await self._refresh(self._scope.begin())

    async def _fetch_trail(self) -> Optional[ApprovalTrail]:
        if self.approval_id is None:
            return None
        try:
            return await self.client.get_approval_trail(self.approval_id)
        except ApiError as e:
            logger.warning(f"Failed to load trail for approval {self.approval_id}: {e}")
            return None

    async def _fetch_snapshot(self) -> tuple[Optional[FundRequestRecord], Optional[str]]:
        """Returns (snapshot, load error); the caller applies both once its load is still current."""
        if self.approval_id is None:
            return None, None
        try:
            return await self.client.get_form_snapshot(self.approval_id), None
        except ApiError as e:
            logger.warning(f"Failed to load form snapshot for approval {self.approval_id}: {e}")
            if e.status is not None and e.data:
                return None, str(e.data)
            return None, "Failed to load form data"

    def _form_record_id(self) -> Optional[Any]:
        if self.record_id is not None:
            return self.record_id
        if self.snapshot is not None and self.snapshot.id is not None:
            return self.snapshot.id
        return self.approval_id

    async def _refresh(self, token: int) -> Optional[RequestForm]:
        self.tab = resolve_tab(self.tab_param, self.trail.request_status if self.trail else None)
        self.context = build_view_context(self.tab)
        key = view_key(self.approval_id if self.approval_id is not None else self.record_id, self.tab, self.snapshot is not None)

        if key == self.key and self.form is not None:
            return self.form

        if self.form is not None:
            self.form.close()
        self.key = key
        self.form = None
        if self.load_error:
            return None

        form = RequestForm(
            self.client,
            record_id=self._form_record_id(),
            snapshot=self.snapshot,
            disabled=self.context.disabled,
            mode=self.context.mode,
            tab=self.context.tab,
            navigate=self._navigate,
            alert=self._alert,
            today=self._today,
        )
        self.form = form
        logger.info(f"Review view {key}: mode={self.context.mode.value}, disabled={self.context.disabled}")
        await form.initialize()
        if not self._scope.is_current(token):
            return None
        return form

    @property
    def submit(self) -> Optional[Callable[[], Awaitable[bool]]]:
        """Submit handle handed to the page's outer action bar."""
        return self.form.submit_handle() if self.form is not None else None

    def on_cancel(self) -> None:
        self._navigate(f"/approvals?tab={self.tab.value}")

    def close(self) -> None:
        self._scope.invalidate()
        if self.form is not None:
            self.form.close()
