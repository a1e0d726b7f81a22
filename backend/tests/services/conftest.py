"""Service test fixtures — assembler, builder session and FastAPI test client.

Invariants:
    - Every test gets a fresh builder registry (no sessions leak between tests)
    - The client talks to the app in-process through ASGITransport

Design Decisions:
    - The registry is a module-level dict, so clearing it is the whole reset
"""

import pytest
from httpx import ASGITransport, AsyncClient

from team_builder.api.routes import builders as builders_module
from team_builder.main import app
from team_builder.services.builder_session import BuilderSession
from team_builder.services.graph_assembler import GraphAssembler


@pytest.fixture
def assembler():
    return GraphAssembler(max_nodes=50, builder_id="test-builder")


@pytest.fixture
def session(assembler):
    return BuilderSession("test-builder", "Test", assembler)


@pytest.fixture
async def client():
    """FastAPI test client with an empty builder registry."""
    builders_module._builders.clear()
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
    builders_module._builders.clear()


@pytest.fixture
async def builder_id(client):
    """A freshly created builder."""
    resp = await client.post("/api/v1/builders", json={"name": "Test team"})
    assert resp.status_code == 201
    return resp.json()["id"]
