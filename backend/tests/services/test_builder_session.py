"""Builder Session — drag lifecycle, drop handling and the render view.

Tests cover:
    - drag start validation (unknown node, wrong kind, unknown library entry)
    - drop verdicts while hovering zones
    - on_drop always clears the active drag, on success and on failure
    - library drops create and attach in one step
    - view() carries resolved configs, handles, zones and typed edges
"""

from team_builder.core.component_config import AgentConfig, ModelConfig, TeamConfig, ToolConfig
from team_builder.core.domain_types import ComponentKind, Slot
from team_builder.core.drop_zone import CAN_DROP_HINT, NEUTRAL_HINT, zone_id
from team_builder.core.node import Position


def _add(session, config):
    result = session.assembler.add_node(ComponentKind(config.component_type), config)
    assert result["status"] == "ok"
    return result["node_id"]


# ─── Drag start ──────────────────────────────────────────────────

def test_drag_start_from_canvas(session):
    model = _add(session, ModelConfig(model="gpt-x"))
    result = session.on_drag_start(ComponentKind.MODEL, node_id=model)
    assert result["status"] == "ok"
    assert session.drag.active.node_id == model


def test_drag_start_unknown_node(session):
    result = session.on_drag_start(ComponentKind.MODEL, node_id="model-ghost")
    assert result["error_code"] == "UNKNOWN_NODE"
    assert session.drag.active is None


def test_drag_start_wrong_kind(session):
    model = _add(session, ModelConfig(model="gpt-x"))
    result = session.on_drag_start(ComponentKind.TOOL, node_id=model)
    assert result["error_code"] == "KIND_MISMATCH"
    assert session.drag.active is None


def test_drag_start_unknown_library_item(session):
    result = session.on_drag_start(ComponentKind.TOOL, library_name="nope")
    assert result["error_code"] == "ILLEGAL_DROP"


# ─── Verdicts ────────────────────────────────────────────────────

def test_verdict_without_drag_is_neutral(session):
    agent = _add(session, AgentConfig())
    verdict = session.drop_verdict(zone_id(agent, Slot.MODEL))
    assert not verdict.legal
    assert verdict.hint == NEUTRAL_HINT


def test_verdict_matches_zone(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.MODEL, library_name="gpt-4o-mini")
    legal = session.drop_verdict(zone_id(agent, Slot.MODEL))
    assert legal.legal and legal.hint == CAN_DROP_HINT
    assert not session.on_drop_attempt(zone_id(agent, Slot.TOOL))


def test_verdict_unknown_zone(session):
    session.on_drag_start(ComponentKind.MODEL)
    assert not session.on_drop_attempt("nowhere-model-zone")


def test_verdict_dragged_kind_must_match_active(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.MODEL)
    assert not session.on_drop_attempt(zone_id(agent, Slot.MODEL), ComponentKind.TOOL)


def test_verdict_does_not_end_drag(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.TOOL)
    session.on_drop_attempt(zone_id(agent, Slot.TOOL))
    assert session.drag.active is not None


# ─── Drop ────────────────────────────────────────────────────────

def test_drop_canvas_node_attaches(session):
    agent = _add(session, AgentConfig())
    model = _add(session, ModelConfig(model="gpt-x"))
    session.on_drag_start(ComponentKind.MODEL, node_id=model)
    result = session.on_drop(zone_id(agent, Slot.MODEL))
    assert result["status"] == "ok"
    assert session.assembler.node(agent).config.model_client == model
    assert session.drag.active is None


def test_drop_library_item_creates_node(session):
    team = _add(session, TeamConfig())
    session.on_drag_start(ComponentKind.AGENT, library_name="user_proxy")
    result = session.on_drop(zone_id(team, Slot.PARTICIPANT))
    assert result["connection_type"] == "participant-connection"
    created = session.assembler.node(result["node_id"])
    assert created.config.name == "user_proxy"
    assert session.assembler.list_participants(team) == [created.id]


def test_drop_without_library_name_uses_default(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.TOOL)
    result = session.on_drop(zone_id(agent, Slot.TOOL))
    assert session.assembler.node(result["node_id"]).config.name == "calculator"


def test_failed_drop_clears_drag(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.TOOL, library_name="calculator")
    result = session.on_drop(zone_id(agent, Slot.MODEL))
    assert result["error_code"] == "INCOMPATIBLE_KINDS"
    assert session.drag.active is None
    assert len(session.assembler.state.nodes) == 1


def test_drop_into_occupied_slot(session):
    agent = _add(session, AgentConfig())
    session.assembler.attach(agent, _add(session, ModelConfig(model="gpt-x")))
    session.on_drag_start(ComponentKind.MODEL, library_name="gpt-4o-mini")
    result = session.on_drop(zone_id(agent, Slot.MODEL))
    assert result["error_code"] == "SLOT_OCCUPIED"
    assert session.drag.active is None
    assert len(session.assembler.state.nodes) == 2


def test_drop_without_drag(session):
    assert session.on_drop("x-model-zone")["error_code"] == "NO_ACTIVE_DRAG"


def test_drop_unknown_zone_clears_drag(session):
    session.on_drag_start(ComponentKind.MODEL)
    assert session.on_drop("ghost-model-zone")["error_code"] == "ILLEGAL_DROP"
    assert session.drag.active is None


def test_cancel_clears_drag(session):
    session.on_drag_start(ComponentKind.MODEL)
    assert session.on_drag_cancel() == {"status": "ok"}
    assert session.drag.active is None


# ─── Canvas edits ────────────────────────────────────────────────

def test_delete_edge_and_node_hooks(session):
    agent = _add(session, AgentConfig())
    tool = _add(session, ToolConfig(name="t", content="c"))
    edge_id = session.assembler.attach(agent, tool)["edge_id"]
    assert session.on_delete_edge(edge_id)["status"] == "ok"
    assert session.on_delete_node(tool)["status"] == "ok"
    assert session.on_move_node(agent, Position(x=5, y=5))["status"] == "ok"
    assert session.assembler.node(agent).position.x == 5


# ─── View ────────────────────────────────────────────────────────

def test_view_reflects_graph(session):
    team = _add(session, TeamConfig())
    agent = _add(session, AgentConfig(name="writer"))
    session.assembler.attach(team, agent)
    view = session.view()

    by_id = {n.id: n for n in view.nodes}
    assert by_id[team].config["participants"] == [agent]
    assert [h.type for h in by_id[team].handles] == ["source"]
    assert {z.slot for z in by_id[agent].zones} == {"model", "tool"}

    (edge,) = view.edges
    assert edge.type == "participant-connection"
    assert edge.source == team
    assert edge.target == agent
    assert edge.source_handle == f"{team}-output-handle"
    assert edge.target_handle == f"{agent}-input-handle"


def test_verdict_unknown_dragged_kind_is_neutral(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.MODEL)
    verdict = session.drop_verdict(zone_id(agent, Slot.MODEL), "widget")
    assert not verdict.legal
    assert verdict.hint == NEUTRAL_HINT


def test_verdict_accepts_plain_kind_string(session):
    agent = _add(session, AgentConfig())
    session.on_drag_start(ComponentKind.MODEL)
    assert session.on_drop_attempt(zone_id(agent, Slot.MODEL), "model")
