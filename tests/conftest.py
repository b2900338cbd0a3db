"""
Pytest fixtures for testing.

Every test gets a fresh stub backend (in-memory store seeded from a
MockDataset) and an ApiClient wired to it through ASGITransport, so the
request form talks real HTTP without a server process.
"""
import asyncio
import pytest
import pytest_asyncio
from datetime import date
from typing import AsyncGenerator, Callable, Optional

import httpx
from httpx import AsyncClient, ASGITransport

from fundapproval.main import create_app
from fundapproval.mocks import MockDataset
from fundapproval.schemas.fund_request import FieldEntry, FundRequestCreate
from fundapproval.services.api_client import ApiClient, StaticTokenProvider
from fundapproval.store import InMemoryStore


# Fixed local date for deadline/urgency maths
TODAY = date(2026, 3, 10)

TEST_BASE_URL = "http://test/api"


class RecordingTransport(httpx.AsyncBaseTransport):
    """
    Wraps another transport and records every (method, path) sent through it.

    When `fail` returns True for a request, a 500 is returned instead of
    forwarding it.
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        fail: Optional[Callable[[httpx.Request], bool]] = None,
    ):
        self.inner = inner
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path))
        if self.fail is not None and self.fail(request):
            return httpx.Response(500, json={"detail": "Simulated failure"})
        return await self.inner.handle_async_request(request)

    async def aclose(self) -> None:
        await self.inner.aclose()


class GatedTransport(httpx.AsyncBaseTransport):
    """
    Holds the first request matching `hold` until `release()` is called.

    `arrived` is set once that request reaches the transport, so a test can
    act while its response is still in flight. With `held_status`, the held
    request is answered with that status instead of being forwarded.
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        hold: Callable[[httpx.Request], bool],
        held_status: Optional[int] = None,
    ):
        self.inner = inner
        self.hold = hold
        self.held_status = held_status
        self.arrived = asyncio.Event()
        self._gate = asyncio.Event()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not self.arrived.is_set() and self.hold(request):
            self.arrived.set()
            await self._gate.wait()
            if self.held_status is not None:
                return httpx.Response(self.held_status, json={"detail": "Simulated failure"})
        return await self.inner.handle_async_request(request)

    def release(self) -> None:
        self._gate.set()

    async def aclose(self) -> None:
        await self.inner.aclose()


def build_client(app, fail: Optional[Callable[[httpx.Request], bool]] = None) -> tuple[ApiClient, RecordingTransport]:
    """ApiClient bound to a stub app, plus the transport recording its traffic."""
    transport = RecordingTransport(ASGITransport(app=app), fail=fail)
    client = ApiClient(
        base_url=TEST_BASE_URL,
        credentials=StaticTokenProvider("test-token"),
        transport=transport,
    )
    return client, transport


def _seed_request(store: InMemoryStore, **overrides) -> dict:
    body = dict(
        title="Laptop",
        description="Developer machine",
        amount=1500.0,
        fields=[
            FieldEntry(field_name="Employee", field_value="Ann"),
            FieldEntry(field_name="HyperlinkUrl", field_value=["https://vendor.example/quote"]),
            FieldEntry(field_name="ApprovalBy", field_value="2026-03-20"),
            FieldEntry(field_name="Priority", field_value="Low"),
        ],
        workflow_id=1,
        project_id=101,
    )
    body.update(overrides)
    return store.create_fund_request(FundRequestCreate(**body))


@pytest.fixture
def today() -> Callable[[], date]:
    return lambda: TODAY


@pytest.fixture
def dataset() -> MockDataset:
    return MockDataset()


@pytest.fixture
def stub_app(dataset: MockDataset):
    """Fresh stub backend per test."""
    return create_app(dataset)


@pytest.fixture
def store(stub_app) -> InMemoryStore:
    return stub_app.state.store


@pytest.fixture
def seed(store: InMemoryStore) -> Callable[..., dict]:
    """Store a complete fund request (and its approval) directly; keyword overrides replace defaults."""
    return lambda **overrides: _seed_request(store, **overrides)


@pytest_asyncio.fixture
async def make_client(stub_app) -> AsyncGenerator[Callable[..., tuple[ApiClient, RecordingTransport]], None]:
    """Factory for extra clients on the same stub, e.g. with a failing transport."""
    clients: list[ApiClient] = []

    def factory(fail: Optional[Callable[[httpx.Request], bool]] = None):
        client, transport = build_client(stub_app, fail=fail)
        clients.append(client)
        return client, transport

    try:
        yield factory
    finally:
        for client in clients:
            await client.close()


@pytest_asyncio.fixture
async def make_gated_client(stub_app) -> AsyncGenerator[Callable[..., tuple[ApiClient, GatedTransport]], None]:
    """Factory for clients whose first matching request is held until released."""
    clients: list[ApiClient] = []

    def factory(hold: Callable[[httpx.Request], bool], held_status: Optional[int] = None, app=None):
        transport = GatedTransport(ASGITransport(app=app or stub_app), hold, held_status=held_status)
        client = ApiClient(
            base_url=TEST_BASE_URL,
            credentials=StaticTokenProvider("test-token"),
            transport=transport,
        )
        clients.append(client)
        return client, transport

    try:
        yield factory
    finally:
        for client in clients:
            await client.close()


@pytest.fixture
def client_and_transport(make_client) -> tuple[ApiClient, RecordingTransport]:
    return make_client()


@pytest.fixture
def api(client_and_transport) -> ApiClient:
    return client_and_transport[0]


@pytest.fixture
def transport(client_and_transport) -> RecordingTransport:
    return client_and_transport[1]


@pytest_asyncio.fixture
async def async_client(stub_app) -> AsyncGenerator[AsyncClient, None]:
    """Raw HTTP client for exercising the stub endpoints directly."""
    async with AsyncClient(
        transport=ASGITransport(app=stub_app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def navigations() -> list[str]:
    return []


@pytest.fixture
def alerts() -> list[str]:
    return []
