from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from src.fault_triage.database.dependencies import verify_database
from src.fault_triage.fault_events.dedup import DeduplicationManager
from src.fault_triage.fault_events.dependencies import (
    get_fault_event_repository,
    get_fault_processor,
)
from src.fault_triage.fault_events.engine import ClassificationEngine
from src.fault_triage.fault_events.locks import DedupLockArena
from src.fault_triage.fault_events.normalizer import EventNormalizer
from src.fault_triage.fault_events.services import FaultProcessor
from src.fault_triage.main import app
from src.fault_triage.redis.redis import RedisManager
from tests.mocks.config_mocks import mock_get_settings  # noqa: F401
from tests.mocks.fault_event_mocks import ASSETS, CUSTOMERS
from tests.mocks.repository_mocks import (
    InMemoryFaultEventRepository,
    InMemoryReferenceRepository,
)

# -----------------------------------------------------------------------------
# ENGINE COLLABORATORS
# -----------------------------------------------------------------------------


@pytest.fixture
def db_session():
    """Session stand-in; the in-memory repositories never touch it."""
    return AsyncMock()


@pytest.fixture
def reference_repo():
    return InMemoryReferenceRepository(CUSTOMERS, ASSETS)


@pytest.fixture
def fault_repo():
    return InMemoryFaultEventRepository()


@pytest.fixture
def lock_arena():
    # Redis-less manager keeps the arena process-local
    return DedupLockArena(RedisManager())


@pytest.fixture
def publisher():
    return AsyncMock()


@pytest.fixture
def processor(reference_repo, fault_repo, lock_arena, publisher):
    return FaultProcessor(
        normalizer=EventNormalizer(reference_repo),
        engine=ClassificationEngine(),
        dedup=DeduplicationManager(fault_repo),
        lock_arena=lock_arena,
        publisher=publisher,
    )


# -----------------------------------------------------------------------------
# FASTAPI CLIENT FOR API TESTING
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_openapi_schema():
    app.openapi_schema = None
    yield
    app.openapi_schema = None


@pytest.fixture(scope="function")
async def async_client():
    """
    Provide an async client for FastAPI test with lifespan events.
    """

    @asynccontextmanager
    async def test_lifespan(_):
        yield

    app.router.lifespan_context = test_lifespan
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture(scope="function")
async def api_client(async_client, processor, fault_repo, db_session):
    """
    Client whose fault-event routes run against the in-memory stores.
    """

    async def _verify_database():
        yield db_session

    app.dependency_overrides[verify_database] = _verify_database
    app.dependency_overrides[get_fault_processor] = lambda: processor
    app.dependency_overrides[get_fault_event_repository] = lambda: fault_repo
    yield async_client
    app.dependency_overrides.clear()
