"""
Canned backend data.

A MockDataset is handed to the ApiClient (fallback when a call fails and mocks
are enabled) and to the stub backend (seed data). Nothing here is global.
"""
import copy
import re
from dataclasses import dataclass, field
from typing import Any, Optional


DEFAULT_WORKFLOWS = [
    {"workflowId": 1, "name": "Software Purchase", "description": "Buy/renew software"},
    {"workflowId": 2, "name": "CapEx", "description": "Capital expenditure"},
]

DEFAULT_PROJECTS = [
    {"projectId": 101, "projectName": "Phoenix"},
    {"projectId": 102, "projectName": "Nimbus"},
]

DEFAULT_SCHEMA_FIELDS = [
    {"key": "projectId", "label": "Project", "type": "select", "required": True},
    {"key": "employee", "label": "Employee", "type": "text", "required": False},
    {"key": "legalEntity", "label": "Legal Entity", "type": "select", "required": False},
    {"key": "justification", "label": "Justification", "type": "textarea", "required": False},
    {"key": "hyperlinkTitle", "label": "Hyperlink Title", "type": "text", "required": False},
    {"key": "hyperlinkUrl", "label": "Hyperlink URL", "type": "url", "required": False},
]

MOCK_CREATED_ID = 9999


@dataclass
class MockResponse:
    data: Any
    status: int = 200


@dataclass
class MockDataset:
    """Fixture data for offline development."""
    workflows: list[dict] = field(default_factory=lambda: copy.deepcopy(DEFAULT_WORKFLOWS))
    projects: list[dict] = field(default_factory=lambda: copy.deepcopy(DEFAULT_PROJECTS))
    schema_fields: list[dict] = field(default_factory=lambda: copy.deepcopy(DEFAULT_SCHEMA_FIELDS))
    # Per-workflow overrides; workflows not listed fall back to schema_fields
    schemas_by_workflow: dict[int, list[dict]] = field(default_factory=dict)

    def schema_for(self, workflow_id: int) -> dict:
        fields = self.schemas_by_workflow.get(workflow_id, self.schema_fields)
        return {"schema": {"fields": copy.deepcopy(fields)}}

    def resolve(self, method: str, path: str) -> Optional[MockResponse]:
        """Map a request onto canned data. None when no mock covers it."""
        method = method.upper()
        if method == "GET" and re.search(r"/workflows?$", path):
            return MockResponse(copy.deepcopy(self.workflows))
        if method == "GET" and re.search(r"/projects/assigned$", path):
            return MockResponse(copy.deepcopy(self.projects))
        match = re.search(r"/formschemas/by-workflow/(\d+)$", path)
        if method == "GET" and match:
            return MockResponse(self.schema_for(int(match.group(1))))
        if method == "POST" and re.search(r"/fundrequests$", path):
            return MockResponse({"id": MOCK_CREATED_ID}, status=201)
        if method == "PUT" and re.search(r"/fundrequests/[^/]+/resubmit$", path):
            return MockResponse({"ok": True})
        if method == "POST" and re.search(r"/attachments$", path):
            return MockResponse({"uploaded": True})
        if method == "GET" and re.search(r"/fundrequests/[^/]+/attachments$", path):
            return MockResponse([])
        if method == "GET" and re.search(r"/fundrequests/[^/]+$", path):
            return MockResponse({"amount": 0, "fields": [], "requestTitle": "", "description": ""})
        return None
