"""Graph Invariant Enforcement — whole-graph checks.

Tests cover:
    - A well-formed graph passes
    - Dangling edges, stored references, double models and bad handles fail
"""

from team_builder.core.component_config import (
    AgentConfig,
    ModelConfig,
    TeamConfig,
)
from team_builder.core.domain_types import ComponentKind, NodeId
from team_builder.core.enforce_graph import check_graph_invariants
from team_builder.core.graph_state import GraphState, build_edge
from team_builder.core.node import Node, create_node


def _nodes(*configs):
    return [create_node(ComponentKind(c.component_type), c)[0] for c in configs]


def _state(nodes, pairs) -> GraphState:
    edges = [build_edge(child, parent) for child, parent in pairs]
    return GraphState(
        nodes={n.id: n for n in nodes}, edges={e.id: e for e in edges},
    )


def test_well_formed_graph_passes():
    team, agent, model = _nodes(TeamConfig(), AgentConfig(), ModelConfig(model="gpt-x"))
    state = _state([team, agent, model], [(model, agent), (agent, team)])
    assert check_graph_invariants(state) is None


def test_empty_graph_passes():
    assert check_graph_invariants(GraphState()) is None


def test_dangling_edge_fails():
    agent, model = _nodes(AgentConfig(), ModelConfig(model="gpt-x"))
    state = _state([agent, model], [(model, agent)])
    del state.nodes[model.id]
    error = check_graph_invariants(state)
    assert error["error_code"] == "GRAPH_INVARIANT"


def test_stored_reference_fails():
    [agent] = _nodes(AgentConfig())
    tainted = Node(
        id=agent.id, kind=ComponentKind.AGENT, label="a",
        config=AgentConfig(tools=[NodeId("tool-1")]),
    )
    error = check_graph_invariants(GraphState(nodes={tainted.id: tainted}))
    assert error["error_code"] == "GRAPH_INVARIANT"
    assert error["node_id"] == agent.id


def test_two_models_on_team_fail():
    team, m1, m2 = _nodes(TeamConfig(), ModelConfig(model="a"), ModelConfig(model="b"))
    state = _state([team, m1, m2], [(m1, team), (m2, team)])
    error = check_graph_invariants(state)
    assert error["error_code"] == "GRAPH_INVARIANT"
    assert error["slot"] == "model"


def test_node_key_mismatch_fails():
    [agent] = _nodes(AgentConfig())
    error = check_graph_invariants(GraphState(nodes={NodeId("other"): agent}))
    assert error["error_code"] == "GRAPH_INVARIANT"


def test_edge_on_missing_handle_fails():
    agent, model = _nodes(AgentConfig(), ModelConfig(model="gpt-x"))
    edge = build_edge(model, agent)
    bad_handle = edge.target_handle.model_copy(update={"slot_id": "nowhere"})
    bad = edge.model_copy(update={"target_handle": bad_handle})
    state = GraphState(nodes={agent.id: agent, model.id: model}, edges={bad.id: bad})
    assert check_graph_invariants(state)["error_code"] == "GRAPH_INVARIANT"
