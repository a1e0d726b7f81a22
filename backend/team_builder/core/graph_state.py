"""Graph State — immutable snapshot of nodes and edges, plus pure queries over it.

Invariants:
    - GraphState is never mutated; the assembler stages a new one and swaps it in
    - Edges are the single source of truth for attachments: participants, tools,
      model_client and termination_condition are always derived by query
    - Edge.connection_type is computed from the endpoint kinds, never stored
    - Edge source/target nodes carry the data-flow direction (child -> parent);
      source_handle/target_handle are the rendering endpoints

Design Decisions:
    - Participant edges are drawn from the team's output handle to the agent's
      input handle, the remaining edges from the child's output handle to the
      parent's input handle
"""

from dataclasses import dataclass, field
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, computed_field, model_validator

from team_builder.core.component_config import (
    REFERENCE_FIELDS,
    ComponentConfig,
)
from team_builder.core.domain_types import (
    ALLOWED_CONNECTIONS,
    SLOT_RULES,
    ComponentKind,
    ConnectionType,
    EdgeId,
    HandleRole,
    NodeId,
    Slot,
    ZoneId,
)
from team_builder.core.drop_zone import DropZone, zones_for
from team_builder.core.node import (
    Handle,
    Node,
    handles_for,
    input_handle_id,
    output_handle_id,
)


CONNECTION_SLOTS: dict[ConnectionType, Slot] = {
    ConnectionType.MODEL: Slot.MODEL,
    ConnectionType.TOOL: Slot.TOOL,
    ConnectionType.PARTICIPANT: Slot.PARTICIPANT,
    ConnectionType.TERMINATION: Slot.TERMINATION,
}


class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: EdgeId
    source_node: NodeId
    target_node: NodeId
    source_kind: ComponentKind
    target_kind: ComponentKind
    source_handle: Handle
    target_handle: Handle

    @model_validator(mode="after")
    def _pair_is_allowed(self) -> "Edge":
        if (self.source_kind, self.target_kind) not in ALLOWED_CONNECTIONS:
            raise ValueError(
                f"{self.source_kind.value} -> {self.target_kind.value} is not a legal connection",
            )
        return self

    @computed_field
    @property
    def connection_type(self) -> ConnectionType:
        return ALLOWED_CONNECTIONS[(self.source_kind, self.target_kind)]

    @property
    def slot(self) -> Slot:
        return CONNECTION_SLOTS[self.connection_type]

    def touches(self, node_id: NodeId) -> bool:
        return node_id in (self.source_node, self.target_node)


def new_edge_id() -> EdgeId:
    return EdgeId(f"edge-{uuid4().hex[:12]}")


def route_handles(child: Node, parent: Node) -> tuple[Handle, Handle]:
    """Rendering endpoints (source handle, target handle) for child -> parent."""
    if ALLOWED_CONNECTIONS.get((child.kind, parent.kind)) == ConnectionType.PARTICIPANT:
        return (
            Handle(node_id=parent.id, role=HandleRole.SOURCE,
                   slot_id=output_handle_id(parent.id)),
            Handle(node_id=child.id, role=HandleRole.TARGET,
                   slot_id=input_handle_id(child.id)),
        )
    return (
        Handle(node_id=child.id, role=HandleRole.SOURCE,
               slot_id=output_handle_id(child.id)),
        Handle(node_id=parent.id, role=HandleRole.TARGET,
               slot_id=input_handle_id(parent.id)),
    )


def build_edge(child: Node, parent: Node, edge_id: EdgeId | None = None) -> Edge:
    """Edge for an already-validated child -> parent attachment."""
    source_handle, target_handle = route_handles(child, parent)
    return Edge(
        id=edge_id or new_edge_id(),
        source_node=child.id,
        target_node=parent.id,
        source_kind=child.kind,
        target_kind=parent.kind,
        source_handle=source_handle,
        target_handle=target_handle,
    )


@dataclass(frozen=True)
class GraphState:
    """Nodes and edges keyed by id. Insertion order of edges is attachment order."""
    nodes: dict[NodeId, Node] = field(default_factory=dict)
    edges: dict[EdgeId, Edge] = field(default_factory=dict)

    def staged(self) -> tuple[dict[NodeId, Node], dict[EdgeId, Edge]]:
        """Fresh copies of the node and edge maps for building the next state."""
        return dict(self.nodes), dict(self.edges)


# ─── Queries ─────────────────────────────────────────────────────

def edges_into(
    state: GraphState, node_id: NodeId, slot: Slot | None = None,
) -> list[Edge]:
    """Edges attached to node_id as parent, optionally limited to one slot."""
    return [
        e for e in state.edges.values()
        if e.target_node == node_id and (slot is None or e.slot == slot)
    ]


def edges_touching(state: GraphState, node_id: NodeId) -> list[Edge]:
    return [e for e in state.edges.values() if e.touches(node_id)]


def attached(state: GraphState, parent_id: NodeId, slot: Slot) -> list[NodeId]:
    """Child node ids in a parent's slot, in attachment order."""
    return [e.source_node for e in edges_into(state, parent_id, slot)]


def list_participants(state: GraphState, team_id: NodeId) -> list[NodeId]:
    return attached(state, team_id, Slot.PARTICIPANT)


def list_tools(state: GraphState, agent_id: NodeId) -> list[NodeId]:
    return attached(state, agent_id, Slot.TOOL)


def model_of(state: GraphState, node_id: NodeId) -> NodeId | None:
    found = attached(state, node_id, Slot.MODEL)
    return found[0] if found else None


def termination_of(state: GraphState, team_id: NodeId) -> NodeId | None:
    found = attached(state, team_id, Slot.TERMINATION)
    return found[0] if found else None


def resolved_config(state: GraphState, node_id: NodeId) -> ComponentConfig:
    """Node config with reference fields filled from the edge set."""
    node = state.nodes[node_id]
    if not REFERENCE_FIELDS[node.kind]:
        return node.config
    update: dict[str, object] = {}
    for slot, rule in SLOT_RULES[node.kind].items():
        children = attached(state, node_id, slot)
        update[rule.config_field] = (
            (children[0] if children else None) if rule.single else children
        )
    return node.config.model_copy(update=update)


def resolved_node(state: GraphState, node_id: NodeId) -> Node:
    node = state.nodes[node_id]
    return node.model_copy(update={"config": resolved_config(state, node_id)})


def handles(state: GraphState, node_id: NodeId) -> list[Handle]:
    node = state.nodes[node_id]
    has_inputs = node.kind == ComponentKind.TEAM and bool(
        model_of(state, node_id) or termination_of(state, node_id)
    )
    return handles_for(node, has_team_inputs=has_inputs)


def find_zone(state: GraphState, zone: ZoneId) -> DropZone | None:
    """Resolve a drop-zone id to the zone of a node currently in the graph."""
    for node in state.nodes.values():
        if not zone.startswith(f"{node.id}-"):
            continue
        for candidate in zones_for(node):
            if candidate.id == zone:
                return candidate
    return None


def resolve_component(state: GraphState, node_id: NodeId) -> dict:
    """Nested export form: each reference replaced by the child's resolved component."""
    node = state.nodes[node_id]
    data = node.config.model_dump(mode="json")
    for slot, rule in SLOT_RULES[node.kind].items():
        children = [resolve_component(state, c) for c in attached(state, node_id, slot)]
        data[rule.config_field] = (
            (children[0] if children else None) if rule.single else children
        )
    return data
