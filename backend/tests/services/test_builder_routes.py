"""Builder lifecycle and library routes.

Tests cover:
    - create / list / get / delete builders
    - 404 for unknown builders, 400 for invalid bodies
    - health probe and component library listing
"""

from team_builder.api.routes import builders as builders_module
from team_builder.config import get_settings


# ─── Builders ────────────────────────────────────────────────────

async def test_create_builder(client):
    resp = await client.post("/api/v1/builders", json={"name": "  Research crew  "})
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Research crew"
    assert data["node_count"] == 0
    assert data["edge_count"] == 0


async def test_create_builder_default_name(client):
    resp = await client.post("/api/v1/builders", json={})
    assert resp.json()["name"] == "Untitled team"


async def test_create_builder_blank_name(client):
    resp = await client.post("/api/v1/builders", json={"name": "   "})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_builder_limit(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "max_builders", 1)
    assert (await client.post("/api/v1/builders", json={})).status_code == 201
    resp = await client.post("/api/v1/builders", json={})
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "BUILDER_LIMIT"


async def test_list_and_get_builder(client, builder_id):
    listed = (await client.get("/api/v1/builders")).json()
    assert [b["id"] for b in listed] == [builder_id]
    resp = await client.get(f"/api/v1/builders/{builder_id}")
    assert resp.json()["name"] == "Test team"


async def test_get_unknown_builder(client):
    resp = await client.get("/api/v1/builders/nope")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_delete_builder(client, builder_id):
    resp = await client.delete(f"/api/v1/builders/{builder_id}")
    assert resp.status_code == 204
    assert builder_id not in builders_module._builders
    assert (await client.delete(f"/api/v1/builders/{builder_id}")).status_code == 404


# ─── Health & library ────────────────────────────────────────────

async def test_health(client, builder_id):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["active_builders"] == 1


async def test_library_filtered_by_kind(client):
    resp = await client.get("/api/v1/library", params={"kind": "termination"})
    names = [e["name"] for e in resp.json()]
    assert names == ["max_messages", "text_mention"]
    assert all(e["kind"] == "termination" for e in resp.json())


async def test_library_unknown_kind(client):
    resp = await client.get("/api/v1/library", params={"kind": "widget"})
    assert resp.status_code == 400


async def test_connection_rules(client):
    rules = (await client.get("/api/v1/library/connections")).json()
    assert rules["model"]["attaches_to"] == ["team", "agent"]
    assert rules["model"]["accepts"] == []
    assert set(rules["team"]["accepts"]) == {"model", "agent", "termination"}
