"""Graph Snapshot — serialization / deserialization for GraphState.

Invariants:
    - graph_to_snapshot produces a JSON-safe dict (no Enums, no models)
    - graph_from_snapshot reconstructs an identical GraphState (same ids, same
      edge order) or returns an error outcome; it never returns a partial graph
    - No node is accepted whose config variant differs from its kind
    - Edge connection types in a snapshot are checked against the kind pair,
      never trusted
"""

from pydantic import ValidationError

from team_builder.core.component_config import check_kind_match, parse_config
from team_builder.core.domain_types import (
    ALLOWED_CONNECTIONS,
    ComponentKind,
    EdgeId,
    NodeId,
)
from team_builder.core.enforce_graph import check_graph_invariants
from team_builder.core.errors import (
    GRAPH_INVARIANT,
    INCOMPATIBLE_KINDS,
    INVALID_CONFIG,
    UNKNOWN_NODE,
    error_outcome,
)
from team_builder.core.graph_state import Edge, GraphState, build_edge
from team_builder.core.node import Node, Position

SNAPSHOT_VERSION = 1


def _node_to_dict(node: Node) -> dict:
    return {
        "id": node.id,
        "kind": node.kind.value,
        "label": node.label,
        "position": {"x": node.position.x, "y": node.position.y},
        "config": node.config.model_dump(mode="json"),
    }


def _edge_to_dict(edge: Edge) -> dict:
    return {
        "id": edge.id,
        "source": edge.source_node,
        "target": edge.target_node,
        "source_handle": edge.source_handle.slot_id,
        "target_handle": edge.target_handle.slot_id,
        "type": edge.connection_type.value,
    }


def graph_to_snapshot(state: GraphState) -> dict:
    """Serialize GraphState to a JSON-safe dict. Pure, no IO."""
    return {
        "version": SNAPSHOT_VERSION,
        "nodes": [_node_to_dict(n) for n in state.nodes.values()],
        "edges": [_edge_to_dict(e) for e in state.edges.values()],
    }


def _node_from_dict(data: dict) -> tuple[Node | None, dict | None]:
    if not isinstance(data, dict):
        return None, error_outcome(INVALID_CONFIG, "Snapshot node is not an object.")
    node_id = data.get("id")
    try:
        kind = ComponentKind(data["kind"])
        config = parse_config(data["config"])
        error = check_kind_match(kind, config)
        if error:
            return None, {**error, "node_id": node_id}
        if not isinstance(node_id, str) or not node_id:
            raise ValueError("missing or non-string id")
        position = data.get("position") or {}
        node = Node(
            id=NodeId(node_id),
            kind=kind,
            label=data.get("label") or node_id,
            config=config,
            position=Position(x=position.get("x", 0.0), y=position.get("y", 0.0)),
        )
    except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
        return None, error_outcome(
            INVALID_CONFIG, f"Node '{node_id or '?'}' is malformed: {e}",
            node_id=node_id if isinstance(node_id, str) else None,
        )
    return node, None


def _edge_from_dict(data: dict, nodes: dict[NodeId, Node]) -> tuple[Edge | None, dict | None]:
    if not isinstance(data, dict):
        return None, error_outcome(GRAPH_INVARIANT, "Snapshot edge is not an object.")
    edge_id = data.get("id")
    if not isinstance(edge_id, str) or not edge_id:
        return None, error_outcome(GRAPH_INVARIANT, "Snapshot edge without an id.")
    endpoints = (data.get("source"), data.get("target"))
    if not all(isinstance(end, str) for end in endpoints):
        return None, error_outcome(
            GRAPH_INVARIANT,
            f"Edge '{edge_id}' endpoints must be node ids.",
            edge_id=edge_id,
        )
    source, target = nodes.get(endpoints[0]), nodes.get(endpoints[1])
    if source is None or target is None:
        missing = endpoints[0] if source is None else endpoints[1]
        return None, error_outcome(
            UNKNOWN_NODE,
            f"Edge '{edge_id}' references missing node '{missing}'.",
            node_id=missing,
        )
    derived = ALLOWED_CONNECTIONS.get((source.kind, target.kind))
    if derived is None:
        return None, error_outcome(
            INCOMPATIBLE_KINDS,
            f"Edge '{edge_id}' connects {source.kind.value} to "
            f"{target.kind.value}.",
        )
    declared = data.get("type")
    if declared is not None and declared != derived.value:
        return None, error_outcome(
            GRAPH_INVARIANT,
            f"Edge '{edge_id}' is labelled '{declared}' but "
            f"connects a {derived.value}.",
        )
    return build_edge(source, target, EdgeId(edge_id)), None



def graph_from_snapshot(data: dict) -> tuple[GraphState | None, dict | None]:
    """Rebuild a GraphState from a snapshot dict. All-or-nothing."""
    nodes: dict[NodeId, Node] = {}
    for node_data in data.get("nodes", []):
        node, error = _node_from_dict(node_data)
        if error:
            return None, error
        if node.id in nodes:
            return None, error_outcome(
                GRAPH_INVARIANT, f"Duplicate node id '{node.id}'.", node_id=node.id,
            )
        nodes[node.id] = node

    edges: dict[EdgeId, Edge] = {}
    for edge_data in data.get("edges", []):
        edge, error = _edge_from_dict(edge_data, nodes)
        if error:
            return None, error
        if edge.id in edges:
            return None, error_outcome(
                GRAPH_INVARIANT, f"Duplicate edge id '{edge.id}'.", edge_id=edge.id,
            )
        edges[edge.id] = edge

    state = GraphState(nodes=nodes, edges=edges)
    error = check_graph_invariants(state)
    if error:
        return None, error
    return state, None
