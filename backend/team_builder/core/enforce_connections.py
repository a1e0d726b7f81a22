"""Connection Enforcement — decides whether child -> parent may be connected.

Invariants:
    - All functions are PURE: no IO, no side effects
    - Return error dict on violation, None on success
    - propose_connection is the only producer of new Edges; the connection
      type is derived from the kind pair, never supplied by the caller
    - Single-occupancy slots never replace implicitly: detach first
"""

from team_builder.core.domain_types import (
    ALLOWED_CONNECTIONS,
    SLOT_RULES,
    ComponentKind,
    NodeId,
    Slot,
    parse_slot,
)
from team_builder.core.errors import (
    INCOMPATIBLE_KINDS,
    SLOT_OCCUPIED,
    UNKNOWN_NODE,
    UNKNOWN_SLOT,
    error_outcome,
)
from team_builder.core.graph_state import Edge, GraphState, attached, build_edge
from team_builder.core.node import Node


def check_nodes_exist(state: GraphState, *node_ids: NodeId) -> dict | None:
    """Every referenced id must be a node of the graph."""
    for node_id in node_ids:
        if node_id not in state.nodes:
            return error_outcome(
                UNKNOWN_NODE, f"Node '{node_id}' is not in the graph.",
                node_id=node_id,
            )
    return None


def check_kinds_compatible(source: Node, target: Node) -> dict | None:
    """(source.kind, target.kind) must appear in the allowed-pair table."""
    if (source.kind, target.kind) not in ALLOWED_CONNECTIONS:
        return error_outcome(
            INCOMPATIBLE_KINDS,
            f"A {source.kind.value} cannot be attached to a {target.kind.value}.",
            source_kind=source.kind.value,
            target_kind=target.kind.value,
        )
    return None


def resolve_target_slot(
    source: Node, target: Node, slot: "str | Slot | None",
) -> tuple[Slot | None, dict | None]:
    """Slot on target that receives source. Derived from the kind pair when slot is None."""
    if slot is None:
        for candidate, rule in SLOT_RULES[target.kind].items():
            if rule.accepts == source.kind:
                return candidate, None
        return None, check_kinds_compatible(source, target)

    parsed = parse_slot(slot)
    if parsed is None:
        return None, error_outcome(
            UNKNOWN_SLOT, f"'{slot}' is not a slot name.", slot=str(slot),
        )
    rule = SLOT_RULES[target.kind].get(parsed)
    if rule is None:
        return None, error_outcome(
            UNKNOWN_SLOT,
            f"A {target.kind.value} has no '{parsed.value}' slot.",
            slot=parsed.value,
        )
    if rule.accepts != source.kind:
        return None, error_outcome(
            INCOMPATIBLE_KINDS,
            f"The {parsed.value} slot of a {target.kind.value} accepts "
            f"{rule.accepts.value}, not {source.kind.value}.",
            source_kind=source.kind.value,
            target_kind=target.kind.value,
        )
    return parsed, None


def check_slot_free(state: GraphState, target: Node, slot: Slot) -> dict | None:
    """Single-occupancy slots (model, termination) accept one attachment."""
    rule = SLOT_RULES[target.kind][slot]
    occupants = attached(state, target.id, slot)
    if rule.single and occupants:
        return error_outcome(
            SLOT_OCCUPIED,
            f"The {slot.value} slot of '{target.id}' already holds "
            f"'{occupants[0]}'. Detach it before attaching another.",
            node_id=target.id,
            slot=slot.value,
            occupied_by=occupants[0],
        )
    return None


def propose_connection(
    state: GraphState,
    source_id: NodeId,
    target_id: NodeId,
    slot: "str | Slot | None" = None,
) -> tuple[Edge | None, dict | None]:
    """Validate source -> target on slot and build the Edge. First error wins."""
    error = check_nodes_exist(state, source_id, target_id)
    if error:
        return None, error
    source, target = state.nodes[source_id], state.nodes[target_id]

    error = check_kinds_compatible(source, target)
    if error:
        return None, error
    resolved, error = resolve_target_slot(source, target, slot)
    if error:
        return None, error
    error = check_slot_free(state, target, resolved)
    if error:
        return None, error
    return build_edge(source, target), None


def connection_kinds(kind: ComponentKind) -> dict[str, list[str]]:
    """Kinds a component may attach to, and kinds that may attach to it.

    Both lists follow the order of ALLOWED_CONNECTIONS.
    """
    return {
        "attaches_to": [t.value for (s, t) in ALLOWED_CONNECTIONS if s == kind],
        "accepts": [s.value for (s, t) in ALLOWED_CONNECTIONS if t == kind],
    }
