"""Builder Session — one canvas: a Graph Assembler plus its drag session.

Invariants:
    - Event hooks are processed one at a time; each either completes or is
      rejected synchronously
    - on_drop always ends the drag, whether the drop succeeds or not
    - The drop-zone verdict is only a hint; on_drop relies on the assembler's
      own validation
    - view() is computed from the current committed GraphState only

Design Decisions:
    - Drags from the library create the node and its attachment in one step
      (GraphAssembler.attach_new), so a rejected drop leaves no orphan node
"""

import logging

from team_builder.core.component_config import ComponentConfig
from team_builder.core.component_library import default_item, library_item
from team_builder.core.domain_types import ComponentKind, EdgeId, NodeId, ZoneId
from team_builder.core.drop_zone import ActiveDrag, DragSession, DropVerdict, NEUTRAL_HINT
from team_builder.core.errors import (
    ILLEGAL_DROP,
    KIND_MISMATCH,
    NO_ACTIVE_DRAG,
    UNKNOWN_NODE,
    error_outcome,
)
from team_builder.core.graph_state import find_zone, resolved_config
from team_builder.core.node import Position
from team_builder.schemas.graph import EdgeView, GraphData, NodeView
from team_builder.services.graph_assembler import GraphAssembler

logger = logging.getLogger(__name__)


class BuilderSession:
    """Event hooks the renderer calls, backed by one GraphAssembler."""

    def __init__(
        self,
        builder_id: str,
        name: str = "",
        assembler: GraphAssembler | None = None,
    ):
        self.builder_id = builder_id
        self.name = name
        self.assembler = assembler or GraphAssembler(builder_id=builder_id)
        self.drag = DragSession()

    # ─── Drag lifecycle ──────────────────────────────────────────

    def on_drag_start(
        self,
        kind: ComponentKind,
        node_id: NodeId | None = None,
        library_name: str | None = None,
    ) -> dict:
        """Begin dragging a canvas node (node_id) or a library entry (library_name)."""
        kind = ComponentKind(kind)
        if node_id is not None:
            node = self.assembler.state.nodes.get(node_id)
            if node is None:
                return error_outcome(
                    UNKNOWN_NODE, f"Node '{node_id}' is not in the graph.", node_id=node_id,
                )
            if node.kind != kind:
                return error_outcome(
                    KIND_MISMATCH,
                    f"Node '{node_id}' is a {node.kind.value}, not a {kind.value}.",
                )
        elif library_name is not None and library_item(kind, library_name) is None:
            return error_outcome(
                ILLEGAL_DROP, f"No {kind.value} named '{library_name}' in the library.",
            )
        self.drag.start(ActiveDrag(kind=kind, node_id=node_id, library_name=library_name))
        logger.debug(
            "Drag started: %s", kind.value, extra={"builder_id": self.builder_id},
        )
        return {"status": "ok", "kind": kind.value, "node_id": node_id,
                "library_name": library_name}

    def drop_verdict(
        self, zone: ZoneId, dragged_kind: ComponentKind | None = None,
    ) -> DropVerdict:
        """Legality and hint for hovering the active drag over a zone."""
        active = self.drag.active
        if active is None or (dragged_kind is not None and dragged_kind != active.kind):
            return DropVerdict(False, NEUTRAL_HINT)
        verdict = self.drag.check(find_zone(self.assembler.state, zone))
        logger.debug(
            "Drop check %s on %s: %s", active.kind.value, zone, verdict.legal,
            extra={"builder_id": self.builder_id},
        )
        return verdict

    def on_drop_attempt(
        self, zone: ZoneId, dragged_kind: ComponentKind | None = None,
    ) -> bool:
        return self.drop_verdict(zone, dragged_kind).legal

    def on_drop(self, zone: ZoneId) -> dict:
        """Attach the dragged item to the zone's slot. Ends the drag unconditionally."""
        active = self.drag.active
        try:
            if active is None:
                return error_outcome(NO_ACTIVE_DRAG, "No drag in progress.")
            target = find_zone(self.assembler.state, zone)
            if target is None:
                return error_outcome(
                    ILLEGAL_DROP, f"Drop zone '{zone}' does not exist.", zone_id=zone,
                )
            if active.node_id is not None:
                return self.assembler.attach(target.node_id, active.node_id, target.slot)
            return self.assembler.attach_new(
                target.node_id, self._library_config(active), target.slot,
            )
        finally:
            self.drag.end()

    def on_drag_cancel(self) -> dict:
        """Drag cancelled or pointer left the canvas."""
        self.drag.end()
        return {"status": "ok"}

    def _library_config(self, active: ActiveDrag) -> ComponentConfig:
        item = library_item(active.kind, active.library_name) if active.library_name else None
        if item is None:
            item = default_item(active.kind)
        return item.config

    # ─── Canvas edits ────────────────────────────────────────────

    def on_delete_node(self, node_id: NodeId) -> dict:
        return self.assembler.remove_node(node_id)

    def on_delete_edge(self, edge_id: EdgeId) -> dict:
        return self.assembler.detach(edge_id)

    def on_move_node(self, node_id: NodeId, position: Position) -> dict:
        return self.assembler.move_node(node_id, position)

    # ─── Read model ──────────────────────────────────────────────

    def view(self) -> GraphData:
        """Read-only snapshot for drawing: nodes with handles and zones, typed edges."""
        state = self.assembler.state
        nodes = [
            NodeView(
                id=node.id,
                type=node.kind.value,
                label=node.label,
                position={"x": node.position.x, "y": node.position.y},
                config=resolved_config(state, node.id).model_dump(mode="json"),
                handles=[
                    {"id": h.slot_id, "type": h.role.value}
                    for h in self.assembler.handles(node.id)
                ],
                zones=[
                    {"id": z.id, "slot": z.slot.value,
                     "accepts": sorted(k.value for k in z.accepts)}
                    for z in self.assembler.drop_zones(node.id)
                ],
            )
            for node in state.nodes.values()
        ]
        edges = [
            EdgeView(
                id=edge.id,
                source=edge.source_handle.node_id,
                target=edge.target_handle.node_id,
                source_handle=edge.source_handle.slot_id,
                target_handle=edge.target_handle.slot_id,
                type=edge.connection_type.value,
            )
            for edge in state.edges.values()
        ]
        return GraphData(nodes=nodes, edges=edges)
