"""Connection Enforcement — tests for pure connection legality.

Tests cover:
    - check_kinds_compatible against the allowed-pair table
    - resolve_target_slot: derived slot, unknown slot, wrong slot
    - check_slot_free for single and multi occupancy slots
    - propose_connection chains all checks and derives the connection type
"""

from team_builder.core.component_config import (
    AgentConfig,
    ModelConfig,
    TeamConfig,
    TerminationConfig,
    ToolConfig,
)
from team_builder.core.domain_types import (
    ComponentKind,
    ConnectionType,
    NodeId,
    Slot,
)
from team_builder.core.enforce_connections import (
    check_kinds_compatible,
    check_nodes_exist,
    check_slot_free,
    connection_kinds,
    propose_connection,
    resolve_target_slot,
)
from team_builder.core.graph_state import GraphState, build_edge
from team_builder.core.node import create_node


def _state(*configs):
    """Helper: graph with one node per config, no edges."""
    nodes = {}
    for config in configs:
        node, _ = create_node(ComponentKind(config.component_type), config)
        nodes[node.id] = node
    return GraphState(nodes=nodes), list(nodes.values())


def _with_edge(state: GraphState, child, parent) -> GraphState:
    edge = build_edge(child, parent)
    return GraphState(nodes=state.nodes, edges={**state.edges, edge.id: edge})


# ─── check_nodes_exist ───────────────────────────────────────────

def test_unknown_node_reported():
    state, [model] = _state(ModelConfig(model="gpt-x"))
    error = check_nodes_exist(state, model.id, NodeId("ghost"))
    assert error["error_code"] == "UNKNOWN_NODE"
    assert error["node_id"] == "ghost"


# ─── check_kinds_compatible ──────────────────────────────────────

def test_agent_to_model_is_incompatible():
    _, [agent, model] = _state(AgentConfig(), ModelConfig(model="gpt-x"))
    error = check_kinds_compatible(agent, model)
    assert error["error_code"] == "INCOMPATIBLE_KINDS"


def test_tool_to_team_is_incompatible():
    _, [tool, team] = _state(ToolConfig(name="t", content="c"), TeamConfig())
    assert check_kinds_compatible(tool, team)["error_code"] == "INCOMPATIBLE_KINDS"


def test_model_to_agent_is_compatible():
    _, [model, agent] = _state(ModelConfig(model="gpt-x"), AgentConfig())
    assert check_kinds_compatible(model, agent) is None


# ─── resolve_target_slot ─────────────────────────────────────────

def test_slot_derived_from_kind_pair():
    _, [agent, team] = _state(AgentConfig(), TeamConfig())
    slot, error = resolve_target_slot(agent, team, None)
    assert error is None
    assert slot == Slot.PARTICIPANT


def test_unknown_slot_name():
    _, [model, team] = _state(ModelConfig(model="gpt-x"), TeamConfig())
    _, error = resolve_target_slot(model, team, "gpu-slot")
    assert error["error_code"] == "UNKNOWN_SLOT"


def test_slot_parent_does_not_have():
    _, [model, team] = _state(ModelConfig(model="gpt-x"), TeamConfig())
    _, error = resolve_target_slot(model, team, "tool-slot")
    assert error["error_code"] == "UNKNOWN_SLOT"


def test_tool_into_agent_model_slot_is_incompatible():
    _, [tool, agent] = _state(ToolConfig(name="t", content="c"), AgentConfig())
    _, error = resolve_target_slot(tool, agent, "model-slot")
    assert error["error_code"] == "INCOMPATIBLE_KINDS"


# ─── check_slot_free ─────────────────────────────────────────────

def test_model_slot_single_occupancy():
    state, [m1, agent] = _state(ModelConfig(model="gpt-x"), AgentConfig())
    assert check_slot_free(state, agent, Slot.MODEL) is None
    state = _with_edge(state, m1, agent)
    error = check_slot_free(state, agent, Slot.MODEL)
    assert error["error_code"] == "SLOT_OCCUPIED"
    assert error["occupied_by"] == m1.id


def test_termination_slot_single_occupancy():
    state, [term, team] = _state(TerminationConfig(max_messages=3), TeamConfig())
    state = _with_edge(state, term, team)
    assert check_slot_free(state, team, Slot.TERMINATION)["error_code"] == "SLOT_OCCUPIED"


def test_tool_slot_allows_many():
    state, [tool, agent] = _state(ToolConfig(name="t", content="c"), AgentConfig())
    state = _with_edge(state, tool, agent)
    assert check_slot_free(state, agent, Slot.TOOL) is None


# ─── propose_connection ──────────────────────────────────────────

def test_propose_model_to_agent():
    state, [model, agent] = _state(ModelConfig(model="gpt-x"), AgentConfig())
    edge, error = propose_connection(state, model.id, agent.id, "model-slot")
    assert error is None
    assert edge.connection_type == ConnectionType.MODEL
    assert edge.source_node == model.id
    assert edge.target_node == agent.id
    assert edge.source_handle.slot_id == f"{model.id}-output-handle"
    assert edge.target_handle.slot_id == f"{agent.id}-input-handle"


def test_propose_agent_to_team_is_participant():
    state, [agent, team] = _state(AgentConfig(), TeamConfig())
    edge, error = propose_connection(state, agent.id, team.id)
    assert error is None
    assert edge.connection_type == ConnectionType.PARTICIPANT
    assert edge.source_handle.slot_id == f"{team.id}-output-handle"
    assert edge.target_handle.slot_id == f"{agent.id}-input-handle"


def test_propose_agent_to_model_fails_incompatible():
    state, [agent, model] = _state(AgentConfig(), ModelConfig(model="gpt-x"))
    edge, error = propose_connection(state, agent.id, model.id, "model-slot")
    assert edge is None
    assert error["error_code"] == "INCOMPATIBLE_KINDS"


def test_propose_unknown_node():
    state, [model] = _state(ModelConfig(model="gpt-x"))
    edge, error = propose_connection(state, model.id, NodeId("ghost"))
    assert edge is None
    assert error["error_code"] == "UNKNOWN_NODE"


def test_propose_into_occupied_slot():
    state, [m1, m2, team] = _state(
        ModelConfig(model="gpt-x"), ModelConfig(model="gpt-y"), TeamConfig(),
    )
    state = _with_edge(state, m1, team)
    edge, error = propose_connection(state, m2.id, team.id, "model")
    assert edge is None
    assert error["error_code"] == "SLOT_OCCUPIED"


def test_propose_does_not_mutate_state():
    state, [model, agent] = _state(ModelConfig(model="gpt-x"), AgentConfig())
    propose_connection(state, model.id, agent.id)
    assert state.edges == {}


def test_connection_kinds_summary():
    assert connection_kinds(ComponentKind.AGENT) == {
        "attaches_to": ["team"], "accepts": ["model", "tool"],
    }
    assert connection_kinds(ComponentKind.MODEL)["accepts"] == []
    assert connection_kinds(ComponentKind.MODEL)["attaches_to"] == ["team", "agent"]
    assert connection_kinds(ComponentKind.TEAM)["accepts"] == ["model", "agent", "termination"]
