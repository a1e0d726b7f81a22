"""Graph Invariant Enforcement — whole-graph checks run before every commit.

Invariants:
    - check_graph_invariants is PURE and returns the first violation or None
    - A staged graph that fails these checks is discarded, never exposed
    - Checked: node keys and kind tags, stored configs free of references,
      edge endpoints and handles, single-occupancy slots
"""

from team_builder.core.component_config import kind_of, references_of
from team_builder.core.domain_types import SLOT_RULES, ComponentKind
from team_builder.core.errors import GRAPH_INVARIANT, error_outcome
from team_builder.core.graph_state import Edge, GraphState, attached, handles


def _violation(message: str, **details) -> dict:
    return error_outcome(GRAPH_INVARIANT, message, **details)


def check_nodes(state: GraphState) -> dict | None:
    for key, node in state.nodes.items():
        if key != node.id:
            return _violation(f"Node stored under '{key}' has id '{node.id}'.", node_id=key)
        if kind_of(node.config) != node.kind:
            return _violation(
                f"Node '{node.id}' is a {node.kind.value} carrying a "
                f"{node.config.component_type} config.",
                node_id=node.id,
            )
        if any(references_of(node.config).values()):
            return _violation(
                f"Node '{node.id}' stores attachment references in its config.",
                node_id=node.id,
            )
    return None


def _check_edge(state: GraphState, edge: Edge) -> dict | None:
    for node_id, kind in (
        (edge.source_node, edge.source_kind), (edge.target_node, edge.target_kind),
    ):
        node = state.nodes.get(node_id)
        if node is None:
            return _violation(
                f"Edge '{edge.id}' references missing node '{node_id}'.",
                edge_id=edge.id,
            )
        if node.kind != kind:
            return _violation(
                f"Edge '{edge.id}' records {kind.value} for {node.kind.value} node '{node_id}'.",
                edge_id=edge.id,
            )
    if edge.target_node == edge.source_node:
        return _violation(f"Edge '{edge.id}' is a self-loop.", edge_id=edge.id)
    if edge.slot not in SLOT_RULES[edge.target_kind]:
        return _violation(
            f"Edge '{edge.id}' targets a slot its parent does not have.",
            edge_id=edge.id,
        )
    return None


def _check_edge_handles(state: GraphState, edge: Edge) -> dict | None:
    for handle in (edge.source_handle, edge.target_handle):
        if handle.node_id not in state.nodes:
            return _violation(
                f"Edge '{edge.id}' ends on a handle of missing node '{handle.node_id}'.",
                edge_id=edge.id,
            )
        if handle not in handles(state, handle.node_id):
            return _violation(
                f"Edge '{edge.id}' ends on handle '{handle.slot_id}' "
                f"which node '{handle.node_id}' does not expose.",
                edge_id=edge.id,
            )
    return None


def check_edges(state: GraphState) -> dict | None:
    for key, edge in state.edges.items():
        if key != edge.id:
            return _violation(f"Edge stored under '{key}' has id '{edge.id}'.", edge_id=key)
        error = _check_edge(state, edge) or _check_edge_handles(state, edge)
        if error:
            return error
    return None


def check_slot_occupancy(state: GraphState) -> dict | None:
    """Team: at most one model and one termination. Agent: at most one model."""
    for node in state.nodes.values():
        if node.kind not in (ComponentKind.TEAM, ComponentKind.AGENT):
            continue
        for slot, rule in SLOT_RULES[node.kind].items():
            if rule.single and len(attached(state, node.id, slot)) > 1:
                return _violation(
                    f"Node '{node.id}' has more than one {slot.value} attached.",
                    node_id=node.id,
                    slot=slot.value,
                )
    return None


def check_graph_invariants(state: GraphState) -> dict | None:
    """Chain all graph checks. Returns first error or None."""
    return (
        check_nodes(state)
        or check_edges(state)
        or check_slot_occupancy(state)
    )
