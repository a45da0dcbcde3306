import os

# The log store engine is created at import time; keep it off the filesystem.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pulsedesk.log_client import LogServiceClient
from pulsedesk.logstore import models
from pulsedesk.logstore.app import app as logstore_app
from pulsedesk.logstore.session import get_async_session
from pulsedesk.main import app as dashboard_app
from pulsedesk.schemas import Patient
from pulsedesk.store import DashboardStore


class RecordingTransport(httpx.AsyncBaseTransport):
    """Forwards to another transport and remembers (method, path) of every request."""

    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self.inner = inner
        self.requests = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        return await self.inner.handle_async_request(request)

    def count(self, method: str) -> int:
        return sum(1 for m, _ in self.requests if m == method)


@pytest.fixture
def make_patient():
    def _make(**overrides) -> Patient:
        fields = {
            "id": "PT-LOCAL0001",
            "name": "Jane Doe",
            "age": 41,
            "gender": "Female",
            "contact": "+1 (555) 000-1111",
            "email": "jane.doe@example.com",
            "notes": "Seasonal allergies.",
        }
        fields.update(overrides)
        return Patient(**fields)

    return _make


@pytest.fixture
async def engine():
    # In-memory SQLite shared across connections via StaticPool
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(engine):
    AsyncSessionLocal = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def log_app(engine):
    AsyncSessionLocal = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

    async def _session():
        async with AsyncSessionLocal() as session:
            yield session

    logstore_app.dependency_overrides[get_async_session] = _session
    yield logstore_app
    logstore_app.dependency_overrides.clear()


@pytest.fixture
def log_transport(log_app):
    return RecordingTransport(httpx.ASGITransport(app=log_app))


@pytest.fixture
def log_client(log_transport):
    return LogServiceClient("http://logstore", transport=log_transport)


@pytest.fixture
def down_client():
    """A client whose log service answers every request with 503."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"detail": "unavailable"})

    return LogServiceClient("http://logstore", transport=httpx.MockTransport(handler))


@pytest.fixture
def store():
    return DashboardStore()


@pytest.fixture
async def api(log_client, store):
    dashboard_app.state.log_client = log_client
    dashboard_app.state.store = store
    transport = httpx.ASGITransport(app=dashboard_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://dashboard") as client:
        yield client


@pytest.fixture
async def offline_api(down_client, store):
    dashboard_app.state.log_client = down_client
    dashboard_app.state.store = store
    transport = httpx.ASGITransport(app=dashboard_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://dashboard") as client:
        yield client
