"""API test fixtures: app with a virtual-time engine and an async client."""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Force test config BEFORE any app imports
os.environ["DEBUG"] = "false"
os.environ["LOG_DIR"] = os.path.join(tempfile.gettempdir(), "purplesim-test-logs")

from purplesim.dependencies import get_simulation_engine, reset_singletons  # noqa: E402
from purplesim.main import app  # noqa: E402


@pytest.fixture
def engine(make_engine):
    """Virtual-time engine injected in place of the wall-clock singleton."""
    engine = make_engine()
    app.dependency_overrides[get_simulation_engine] = lambda: engine
    yield engine
    app.dependency_overrides.pop(get_simulation_engine, None)
    reset_singletons()


@pytest_asyncio.fixture
async def client(engine):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
