"""
State machine for the fund request form.
ALL state transitions must go through this module.

A RequestForm owns the workflow/project selection, the dynamic field values,
touched flags, the draft (title, description, amount, deadline, attachments)
and the submission status. It is seeded exactly once per instance, from an
injected snapshot, from a record fetched by id, or from blank defaults.
"""
import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from fundapproval.config import settings
from fundapproval.models.attachment import (
    Attachment,
    ExistingAttachment,
    merge_attachments,
    uploadable,
)
from fundapproval.models.draft import RequestDraft
from fundapproval.models.view_context import Mode, Tab
from fundapproval.schemas.catalog import (
    FieldOption,
    FieldType,
    FormSchema,
    ProjectSummary,
    WorkflowSummary,
)
from fundapproval.schemas.fund_request import (
    FieldEntry,
    FundRequestCreate,
    FundRequestRecord,
    FundRequestResubmit,
)
from fundapproval.services.api_client import ApiClient, ApiError
from fundapproval.services.derivation import (
    amount_or_none,
    clean_amount_input,
    compute_urgency,
    parse_date,
)
from fundapproval.services.scope import LoadScope
from fundapproval.services.schema_renderer import (
    HYPERLINK_URL,
    LEGAL_ENTITY,
    LEGAL_ENTITY_FALLBACK,
    RESERVED_KEYS,
    Control,
    add_url_row,
    remove_url_row,
    render_controls,
    update_url_row,
)
from fundapproval.services.validation import (
    AMOUNT,
    APPROVAL_BY,
    PROJECT,
    TITLE,
    WORKFLOW,
    is_blank,
    validate_request,
)

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    """Lifecycle states of a request form"""
    UNINITIALIZED = "UNINITIALIZED"
    LOADING = "LOADING"
    SCHEMA_LOADING = "SCHEMA_LOADING"
    READY = "READY"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# Define allowed state transitions
ALLOWED_TRANSITIONS: dict[FormState, list[FormState]] = {
    FormState.UNINITIALIZED: [FormState.LOADING],
    FormState.LOADING: [FormState.SCHEMA_LOADING, FormState.READY],
    FormState.SCHEMA_LOADING: [FormState.READY, FormState.SCHEMA_LOADING],  # Re-selection while loading
    FormState.READY: [FormState.SCHEMA_LOADING, FormState.VALIDATING],
    FormState.VALIDATING: [FormState.READY, FormState.SUBMITTING],
    FormState.SUBMITTING: [FormState.SUCCESS, FormState.FAILED],
    FormState.SUCCESS: [FormState.VALIDATING, FormState.SCHEMA_LOADING],  # Same draft may be sent again
    FormState.FAILED: [FormState.READY],  # State is kept so the user can retry
}

# States in which user actions are accepted; anything else is ignored
SUBMITTABLE_STATES = (FormState.READY, FormState.SUCCESS)
WORKFLOW_SELECTABLE_STATES = (FormState.READY, FormState.SCHEMA_LOADING, FormState.SUCCESS)

# Fields the server manages; surfaced as `approval_by` and the derived urgency instead
SERVER_MANAGED_FIELDS = ("ApprovalBy", "Priority")

SUBMIT_FAILED = "Failed to submit fund request."
LOAD_UNAVAILABLE = "API Unavailable"
RESUBMIT_FAILED = "Failed to resubmit the request."


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted"""
    pass


def can_transition(from_state: FormState, to_state: FormState) -> bool:
    """Check if a transition is allowed without touching any form"""
    return to_state in ALLOWED_TRANSITIONS.get(from_state, [])


def to_pascal(key: str) -> str:
    return key[:1].upper() + key[1:]


def to_camel(name: str) -> str:
    return name[:1].lower() + name[1:]


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return None


def _format_amount(amount: Optional[float]) -> str:
    if amount is None:
        return ""
    return str(int(amount)) if float(amount).is_integer() else str(amount)


class RequestForm:
    """
    Request form state machine.

    Args:
        client: API client used for every load and submit
        record_id: Id of the request being edited; None when creating
        snapshot: Pre-resolved record; when present the by-id fetch is skipped
        disabled: Read-only view; mutation handlers and submit become no-ops
        mode: Initiator or approver surface
        tab: View context the form was opened in
        navigate: Called with the post-submit location on success
        alert: Called with a blocking message when a submit fails
        today: Clock for deadline maths (local date)
    """

    def __init__(
        self,
        client: ApiClient,
        *,
        record_id: Optional[Any] = None,
        snapshot: Optional[FundRequestRecord] = None,
        disabled: bool = False,
        mode: Mode = Mode.INITIATOR,
        tab: Tab = Tab.INITIATED,
        navigate: Optional[Callable[[str], None]] = None,
        alert: Optional[Callable[[str], None]] = None,
        today: Callable[[], date] = date.today,
        post_submit_path: Optional[str] = None,
    ):
        self.client = client
        self.record_id = record_id
        self.snapshot = snapshot
        self.disabled = disabled
        self.mode = mode
        self.tab = tab
        self.post_submit_path = post_submit_path or settings.post_submit_path
        self._navigate = navigate or (lambda path: logger.info(f"Navigate to {path}"))
        self._alert = alert or (lambda message: logger.warning(f"Alert: {message}"))
        self._today = today

        self.state = FormState.UNINITIALIZED
        self.workflows: list[WorkflowSummary] = []
        self.projects: list[ProjectSummary] = []
        self.selected_workflow = ""
        self.selected_project = ""
        self.schema: Optional[FormSchema] = None
        self.values: dict[str, Any] = {}
        self.draft = RequestDraft()
        self.touched: set[str] = set()
        self.prefill: Optional[FundRequestRecord] = None
        self.seed_source: Optional[str] = None  # snapshot | fetched | blank
        self.submitting = False
        self.load_error: Optional[str] = None

        self._scope = LoadScope()
        self._schema_scope = LoadScope()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_edit(self) -> bool:
        return self.record_id is not None or self.snapshot is not None

    @property
    def request_id(self) -> Optional[Any]:
        if self.record_id is not None:
            return self.record_id
        return self.snapshot.id if self.snapshot is not None else None

    @property
    def urgency(self) -> str:
        return self.values.get("urgency", "")

    @property
    def errors(self) -> dict[str, str]:
        return validate_request(
            selected_workflow=self.selected_workflow,
            selected_project=self.selected_project,
            schema=self.schema,
            values=self.values,
            draft=self.draft,
            is_edit=self.is_edit,
            today=self._today(),
        )

    def visible_error(self, key: str) -> Optional[str]:
        """Error text to show for a field: only once it has been touched."""
        if key not in self.touched:
            return None
        return self.errors.get(key)

    def controls(self) -> list[Control]:
        return render_controls(self.schema, self.values, self.errors, self.touched, self.disabled)

    @property
    def project_options(self) -> list[FieldOption]:
        return [FieldOption(value=str(p.project_id), label=p.project_name) for p in self.projects]

    @property
    def submit_label(self) -> str:
        if self.tab == Tab.SENTBACK:
            return "Resubmitting…" if self.submitting else "Resubmit"
        if self.is_edit:
            return "Updating…" if self.submitting else "Update"
        return "Submitting…" if self.submitting else "Submit"

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(self, to_state: FormState) -> None:
        if not can_transition(self.state, to_state):
            raise InvalidTransitionError(
                f"Invalid transition from {self.state.value} to {to_state.value}"
            )
        logger.debug(f"Form state transition: {self.state.value} → {to_state.value}")
        self.state = to_state

    # ------------------------------------------------------------------
    # Loading and seeding
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load the workflow and project lists, then seed the form."""
        if self.state != FormState.UNINITIALIZED:
            logger.debug(f"Ignoring initialize: form is already {self.state.value}")
            return
        self._transition(FormState.LOADING)
        token = self._scope.begin()

        await asyncio.gather(self._load_workflows(token), self._load_projects(token))
        if not self._scope.is_current(token):
            return

        if self.snapshot is not None:
            attachments = [ExistingAttachment.from_info(a) for a in (self.snapshot.attachments or [])]
            await self._apply_record(self.snapshot, attachments, token)
            self.seed_source = "snapshot"
        elif self.record_id is not None:
            await self._fetch_and_seed(token)
        else:
            self.values = self._initial_values(None)
            self.seed_source = "blank"

        if self._scope.is_current(token) and self.state == FormState.LOADING:
            self._transition(FormState.READY)

        logger.info(
            f"Request form ready (seed={self.seed_source}, edit={self.is_edit}, "
            f"workflow={self.selected_workflow or '-'}, fields={len(self.schema.fields) if self.schema else 0})"
        )

    def close(self) -> None:
        """Tear down: any response still in flight is discarded."""
        self._scope.invalidate()
        self._schema_scope.invalidate()

    async def _load_workflows(self, token: int) -> None:
        try:
            workflows = await self.client.list_workflows()
        except ApiError as e:
            logger.warning(f"Failed to load workflows: {e}")
            workflows = []
            if self.client.mocks is None:
                self.load_error = LOAD_UNAVAILABLE
        if self._scope.is_current(token):
            self.workflows = workflows

    async def _load_projects(self, token: int) -> None:
        try:
            projects = await self.client.list_assigned_projects()
        except ApiError as e:
            logger.warning(f"Failed to load assigned projects: {e}")
            projects = []
        if not self._scope.is_current(token):
            return
        self.projects = projects
        # A single assignment is picked for the user when creating
        if not self.is_edit and len(projects) == 1:
            self.selected_project = str(projects[0].project_id)

    async def _fetch_and_seed(self, token: int) -> None:
        try:
            record = await self.client.get_fund_request(self.record_id)
        except ApiError as e:
            logger.warning(f"Failed to load fund request {self.record_id}: {e}")
            if self._scope.is_current(token):
                self.schema = FormSchema()
                self.values = self._initial_values(self.schema)
                self.seed_source = "blank"
            return

        try:
            infos = await self.client.list_attachments(self.record_id)
        except ApiError as e:
            logger.warning(f"Failed to load attachments for fund request {self.record_id}: {e}")
            infos = []

        if not self._scope.is_current(token):
            return
        await self._apply_record(record, [ExistingAttachment.from_info(a) for a in infos], token)
        self.seed_source = "fetched"

    async def _apply_record(
        self,
        record: FundRequestRecord,
        attachments: list[Attachment],
        token: int,
    ) -> None:
        """Seed draft, selection and values from a record, loading its schema first."""
        self.prefill = record
        mapped = {
            to_camel(entry.field_name): entry.field_value
            for entry in record.fields
            if entry.field_name not in SERVER_MANAGED_FIELDS
        }
        self.draft = RequestDraft(
            title=record.title,
            description=record.description,
            amount=_format_amount(record.amount),
            approval_by=parse_date(record.field_value("ApprovalBy")),
            attachments=attachments,
        )
        if record.project_id:
            self.selected_project = str(record.project_id)

        if record.workflow_id:
            self.selected_workflow = str(record.workflow_id)
            await self._load_schema(self.selected_workflow)
            if not self._scope.is_current(token):
                return
        else:
            self.values = self._initial_values(None)

        # Record values go on top of the freshly reset schema values
        self.values.update(mapped)
        self._refresh_urgency()

    async def _load_schema(self, workflow_id: str) -> None:
        self._transition(FormState.SCHEMA_LOADING)
        token = self._schema_scope.begin()
        try:
            schema = await self.client.get_form_schema(int(workflow_id))
        except (ApiError, ValueError) as e:
            logger.warning(f"Failed to load form schema for workflow {workflow_id}: {e}")
            schema = FormSchema()

        if not self._schema_scope.is_current(token):
            # A later selection owns the transition back to READY
            return
        self.schema = self._normalize_schema(schema)
        self.values = self._initial_values(self.schema)
        self._transition(FormState.READY)

    def _normalize_schema(self, schema: FormSchema) -> FormSchema:
        fields = []
        for f in schema.fields:
            if f.key == "projectId":
                f = f.model_copy(update={"type": FieldType.SELECT, "options": f.options or self.project_options})
            elif f.key == LEGAL_ENTITY:
                f = f.model_copy(update={"type": FieldType.SELECT, "options": f.options or list(LEGAL_ENTITY_FALLBACK)})
            fields.append(f)
        return FormSchema(fields=fields)

    def _initial_values(self, schema: Optional[FormSchema]) -> dict[str, Any]:
        values: dict[str, Any] = {key: "" for key in (schema.keys() if schema else [])}
        values.setdefault("additionalInfo", "")
        values["urgency"] = compute_urgency(self.draft.approval_by, self._today())
        return values

    def _refresh_urgency(self) -> None:
        self.values["urgency"] = compute_urgency(self.draft.approval_by, self._today())

    # ------------------------------------------------------------------
    # Mutation handlers (no-ops when disabled)
    # ------------------------------------------------------------------

    def _blocked(self, what: str) -> bool:
        if self.disabled:
            logger.debug(f"Ignoring {what}: form is read-only")
        return self.disabled

    async def select_workflow(self, workflow_id: Union[int, str, None]) -> None:
        """Select a workflow, fetching its schema and resetting every dynamic value."""
        if self._blocked("workflow change"):
            return
        if self.is_edit:
            logger.debug("Ignoring workflow change: workflow is fixed once the request exists")
            return
        if self.state not in WORKFLOW_SELECTABLE_STATES:
            logger.debug(f"Ignoring workflow change while {self.state.value}")
            return
        self.selected_workflow = "" if workflow_id is None else str(workflow_id)
        if not self.selected_workflow:
            self._schema_scope.invalidate()
            self.schema = None
            self.values = self._initial_values(None)
            if self.state == FormState.SCHEMA_LOADING:
                self._transition(FormState.READY)
            return
        await self._load_schema(self.selected_workflow)

    def select_project(self, project_id: Union[int, str, None]) -> None:
        if self._blocked("project change"):
            return
        self.selected_project = "" if project_id is None else str(project_id)

    def set_title(self, text: str) -> None:
        if not self._blocked("title change"):
            self.draft.title = text

    def set_description(self, text: str) -> None:
        if not self._blocked("description change"):
            self.draft.description = text

    def set_amount(self, text: str) -> bool:
        """Apply an amount keystroke. Returns False when the input mask rejects it."""
        if self._blocked("amount change"):
            return False
        cleaned = clean_amount_input(text)
        if cleaned is None:
            return False
        self.draft.amount = cleaned
        return True

    def set_approval_by(self, value: Union[date, str, None]) -> None:
        """Set the deadline; urgency follows it."""
        if self._blocked("deadline change"):
            return
        self.draft.approval_by = parse_date(value)
        self._refresh_urgency()

    def set_field(self, key: str, value: Any) -> None:
        if self._blocked(f"{key} change"):
            return
        if key == "urgency":
            logger.debug("Ignoring urgency change: it is derived from the deadline")
            return
        self.values[key] = value

    def add_url(self) -> None:
        if not self._blocked("URL add"):
            self.values[HYPERLINK_URL] = add_url_row(self.values.get(HYPERLINK_URL))

    def remove_url(self, index: int) -> None:
        if not self._blocked("URL removal"):
            self.values[HYPERLINK_URL] = remove_url_row(self.values.get(HYPERLINK_URL), index)

    def set_url(self, index: int, text: str) -> None:
        if not self._blocked("URL change"):
            self.values[HYPERLINK_URL] = update_url_row(self.values.get(HYPERLINK_URL), index, text)

    def mark_touched(self, key: str) -> None:
        """Field lost focus."""
        self.touched.add(key)

    def add_files(self, files: Iterable[Attachment]) -> None:
        if self._blocked("attachment add"):
            return
        self.draft.attachments = merge_attachments(self.draft.attachments, files)

    def remove_attachment(self, index: int) -> None:
        if self._blocked("attachment removal"):
            return
        self.draft.attachments = [a for i, a in enumerate(self.draft.attachments) if i != index]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def build_fields(self) -> list[FieldEntry]:
        """Serialize dynamic values into ordered `{fieldName, fieldValue}` pairs."""
        fields: list[FieldEntry] = []
        for f in (self.schema.fields if self.schema else []):
            if f.key in RESERVED_KEYS:
                continue
            value = self.values.get(f.key)
            if f.key == HYPERLINK_URL and isinstance(value, list):
                urls = [u.strip() for u in value if u and u.strip()]
                if urls:
                    fields.append(FieldEntry(field_name=to_pascal(f.key), field_value=urls))
            elif not is_blank(value):
                fields.append(FieldEntry(field_name=to_pascal(f.key), field_value=str(value)))

        if self.values.get("urgency"):
            fields.append(FieldEntry(field_name="Urgency", field_value=str(self.values["urgency"])))
        if not is_blank(self.values.get("additionalInfo")):
            fields.append(FieldEntry(field_name="AdditionalInfo", field_value=str(self.values["additionalInfo"])))

        if self.draft.approval_by is not None:
            fields.append(FieldEntry(field_name="ApprovalBy", field_value=self.draft.approval_by.isoformat()))
            priority = compute_urgency(self.draft.approval_by, self._today())
            if priority:
                fields.append(FieldEntry(field_name="Priority", field_value=priority))
        return fields

    def build_payload(self) -> Union[FundRequestCreate, FundRequestResubmit]:
        prefill = self.prefill
        workflow_id = self.selected_workflow or (str(prefill.workflow_id) if prefill and prefill.workflow_id else "")
        project_id = self.selected_project or (str(prefill.project_id) if prefill and prefill.project_id else "")

        base = dict(
            title=self.draft.title,
            description=self.draft.description,
            amount=amount_or_none(self.draft.amount),
            fields=self.build_fields(),
            project_id=_to_int(project_id) or None,
        )
        if self.is_edit:
            return FundRequestResubmit(**base)
        return FundRequestCreate(**base, workflow_id=_to_int(workflow_id))

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _submit_touch_keys(self) -> set[str]:
        keys = {WORKFLOW, TITLE, AMOUNT, APPROVAL_BY}
        if self.schema is not None:
            if self.schema.is_required("projectId"):
                keys.add(PROJECT)
            keys.update(self.schema.keys())
        return keys

    async def submit(self) -> bool:
        """
        Validate, serialize and send the request, then upload new attachments.

        Returns:
            True when the request was stored and navigation happened
        """
        if self._blocked("submit") or self.submitting:
            return False
        if self.state not in SUBMITTABLE_STATES:
            logger.debug(f"Ignoring submit while {self.state.value}")
            return False

        self._transition(FormState.VALIDATING)
        self.touched |= self._submit_touch_keys()
        errors = self.errors
        if errors:
            logger.info(f"Submit blocked by validation: {sorted(errors)}")
            self._transition(FormState.READY)
            return False

        payload = self.build_payload()
        self.submitting = True
        self._transition(FormState.SUBMITTING)
        try:
            if self.is_edit:
                await self.client.resubmit_fund_request(self.request_id, payload)
                await self._upload_attachments(self.request_id)
                logger.info(f"Resubmitted fund request {self.request_id}")
            else:
                created = await self.client.create_fund_request(payload)
                if created.id is not None:
                    await self._upload_attachments(created.id)
                logger.info(f"Created fund request {created.id}")
        except ApiError as e:
            logger.error(f"Submit failed (edit={self.is_edit}): {e}")
            self._transition(FormState.FAILED)
            self._alert(RESUBMIT_FAILED if self.is_edit else SUBMIT_FAILED)
            self._transition(FormState.READY)
            return False
        finally:
            self.submitting = False

        self._transition(FormState.SUCCESS)
        self._navigate(self.post_submit_path)
        return True

    async def _upload_attachments(self, request_id: Any) -> None:
        """Upload pending files one at a time; the first failure aborts the rest."""
        files = uploadable(self.draft.attachments)
        if not request_id or not files or self.disabled:
            return
        for attachment in files:
            await self.client.upload_attachment(request_id, attachment)
            logger.info(f"Uploaded {attachment.name} to fund request {request_id}")

    def submit_handle(self) -> Callable[[], Awaitable[bool]]:
        """Callable an owning container invokes to trigger submit from outside the form."""
        async def trigger() -> bool:
            if self.disabled:
                return False
            return await self.submit()
        return trigger
