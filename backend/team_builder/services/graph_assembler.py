"""Graph Assembler — the only component with mutation authority over a graph.

Invariants:
    - Every mutation stages a new GraphState, runs check_graph_invariants on it,
      and swaps it in only if the check passes; readers never see a partial graph
    - Rejected operations return an error outcome and leave the graph untouched
    - attach/detach/remove_node keep config views and edges in agreement because
      config references are derived from edges on every read
    - update_config reconciles only the reference fields the caller explicitly set

Design Decisions:
    - Impureim sandwich: read state -> pure validate (core/enforce_*) -> stage -> commit
    - Cycle prevention needs no policy here: the allowed kind pairs only point
      from leaves to agents and from agents to teams
"""

import logging

from team_builder.core.component_config import (
    ComponentConfig,
    check_kind_match,
    kind_of,
    references_of,
    strip_references,
    validate_config,
)
from team_builder.core.domain_types import (
    SLOT_RULES,
    ComponentKind,
    EdgeId,
    NodeId,
    Slot,
)
from team_builder.core.drop_zone import DropZone, zones_for
from team_builder.core.enforce_connections import (
    check_kinds_compatible,
    check_nodes_exist,
    propose_connection,
    resolve_target_slot,
)
from team_builder.core.enforce_graph import check_graph_invariants
from team_builder.core.errors import (
    GRAPH_FULL,
    UNKNOWN_EDGE,
    error_outcome,
)
from team_builder.core.graph_snapshot import graph_from_snapshot, graph_to_snapshot
from team_builder.core.graph_state import (
    Edge,
    GraphState,
    attached,
    build_edge,
    edges_into,
    edges_touching,
    handles,
    list_participants,
    list_tools,
    resolve_component,
    resolved_node,
)
from team_builder.core.node import Handle, Node, Position, create_node, replace_config

logger = logging.getLogger(__name__)


class GraphAssembler:
    """Owns one team-builder graph and applies every mutation to it."""

    def __init__(
        self,
        state: GraphState | None = None,
        max_nodes: int | None = None,
        builder_id: str | None = None,
    ):
        self._state = state or GraphState()
        self.max_nodes = max_nodes
        self.builder_id = builder_id

    @property
    def state(self) -> GraphState:
        return self._state

    # ─── Commit ──────────────────────────────────────────────────

    def _commit(
        self, nodes: dict[NodeId, Node], edges: dict[EdgeId, Edge], action: str,
    ) -> dict | None:
        staged = GraphState(nodes=nodes, edges=edges)
        error = check_graph_invariants(staged)
        if error:
            logger.warning(
                "Staged graph rejected on %s: %s", action, error["message"],
                extra={"builder_id": self.builder_id, "error_code": error["error_code"]},
            )
            return error
        self._state = staged
        return None

    def _reject(self, action: str, error: dict) -> dict:
        logger.info(
            "%s rejected: %s", action, error["message"],
            extra={"builder_id": self.builder_id, "error_code": error["error_code"]},
        )
        return error

    # ─── Nodes ───────────────────────────────────────────────────

    def _check_capacity(self, extra: int = 1) -> dict | None:
        if self.max_nodes is not None and len(self._state.nodes) + extra > self.max_nodes:
            return error_outcome(
                GRAPH_FULL,
                f"Graph already holds {len(self._state.nodes)} of "
                f"{self.max_nodes} nodes.",
            )
        return None

    def _prepare_node(
        self,
        kind: ComponentKind,
        config: ComponentConfig,
        position: Position | None,
        label: str | None,
    ) -> tuple[Node | None, dict | None]:
        error = (
            check_kind_match(kind, config)
            or validate_config(config)
            or self._check_capacity()
        )
        if error:
            return None, error
        return create_node(kind, strip_references(config), label, position)

    def add_node(
        self,
        kind: ComponentKind,
        config: ComponentConfig,
        position: Position | None = None,
        label: str | None = None,
    ) -> dict:
        """Add a node. References named in config are attached in the same step."""
        node, error = self._prepare_node(kind, config, position, label)
        if error:
            return self._reject("add_node", error)
        nodes, edges = self._state.staged()
        nodes[node.id] = node
        error = self._reconcile_references(
            GraphState(nodes, edges), node, config, nodes, edges,
        )
        if not error:
            error = self._commit(nodes, edges, "add_node")
        if error:
            return self._reject("add_node", error)
        logger.info(
            "Added %s node %s", node.kind.value, node.id,
            extra={"builder_id": self.builder_id, "node_id": node.id},
        )
        return {"status": "ok", "node_id": node.id, "kind": node.kind.value}

    def remove_node(self, node_id: NodeId) -> dict:
        """Remove a node and every edge touching it, as one step."""
        error = check_nodes_exist(self._state, node_id)
        if error:
            return self._reject("remove_node", error)
        nodes, edges = self._state.staged()
        removed = [e.id for e in edges_touching(self._state, node_id)]
        for edge_id in removed:
            del edges[edge_id]
        del nodes[node_id]
        error = self._commit(nodes, edges, "remove_node")
        if error:
            return self._reject("remove_node", error)
        logger.info(
            "Removed node %s with %d edge(s)", node_id, len(removed),
            extra={"builder_id": self.builder_id, "node_id": node_id},
        )
        return {"status": "ok", "node_id": node_id, "removed_edges": removed}

    def move_node(self, node_id: NodeId, position: Position) -> dict:
        error = check_nodes_exist(self._state, node_id)
        if error:
            return self._reject("move_node", error)
        nodes, edges = self._state.staged()
        nodes[node_id] = nodes[node_id].model_copy(update={"position": position})
        self._state = GraphState(nodes=nodes, edges=edges)
        logger.info(
            "Moved node %s to (%s, %s)", node_id, position.x, position.y,
            extra={"builder_id": self.builder_id, "node_id": node_id},
        )
        return {"status": "ok", "node_id": node_id}

    def rename_node(self, node_id: NodeId, label: str) -> dict:
        error = check_nodes_exist(self._state, node_id)
        if error:
            return self._reject("rename_node", error)
        nodes, edges = self._state.staged()
        nodes[node_id] = nodes[node_id].model_copy(update={"label": label})
        self._state = GraphState(nodes=nodes, edges=edges)
        logger.info(
            "Renamed node %s to %r", node_id, label,
            extra={"builder_id": self.builder_id, "node_id": node_id},
        )
        return {"status": "ok", "node_id": node_id}

    def update_config(self, node_id: NodeId, config: ComponentConfig) -> dict:
        """Replace a node's config; reconcile edges for reference fields the caller set."""
        error = check_nodes_exist(self._state, node_id)
        if error:
            return self._reject("update_config", error)
        node, error = replace_config(self._state.nodes[node_id], strip_references(config))
        error = error or validate_config(config)
        if error:
            return self._reject("update_config", error)
        nodes, edges = self._state.staged()
        nodes[node_id] = node
        error = self._reconcile_references(
            GraphState(nodes, edges), node, config, nodes, edges,
        ) or self._commit(nodes, edges, "update_config")
        if error:
            return self._reject("update_config", error)
        logger.info(
            "Updated config of node %s", node_id,
            extra={"builder_id": self.builder_id, "node_id": node_id},
        )
        return {"status": "ok", "node_id": node_id}

    def _reconcile_references(
        self,
        view: GraphState,
        parent: Node,
        config: ComponentConfig,
        nodes: dict[NodeId, Node],
        edges: dict[EdgeId, Edge],
    ) -> dict | None:
        """Make the parent's slots hold exactly the references set on config.

        Existing edges are reused (ids kept) where a reference survives;
        the slot's edges are re-appended in the requested order.
        """
        desired = references_of(config)
        explicit = config.model_fields_set
        for slot, rule in SLOT_RULES[parent.kind].items():
            if rule.config_field not in explicit:
                continue
            current = edges_into(view, parent.id, slot)
            wanted = desired[rule.config_field]
            if [e.source_node for e in current] == wanted:
                continue
            spare = list(current)
            rebuilt: list[Edge] = []
            for child_id in wanted:
                reuse = next((e for e in spare if e.source_node == child_id), None)
                if reuse is not None:
                    spare.remove(reuse)
                    rebuilt.append(reuse)
                    continue
                error = check_nodes_exist(view, child_id)
                if error:
                    return error
                child = nodes[child_id]
                error = check_kinds_compatible(child, parent)
                if not error:
                    _, error = resolve_target_slot(child, parent, slot)
                if error:
                    return error
                rebuilt.append(build_edge(child, parent))
            for edge in current:
                del edges[edge.id]
            for edge in rebuilt:
                edges[edge.id] = edge
        return None

    # ─── Edges ───────────────────────────────────────────────────

    def attach(
        self, parent_id: NodeId, child_id: NodeId, slot: "str | Slot | None" = None,
    ) -> dict:
        """Attach child to a slot of parent (e.g. model-slot, participant)."""
        edge, error = propose_connection(self._state, child_id, parent_id, slot)
        if error:
            return self._reject("attach", error)
        nodes, edges = self._state.staged()
        edges[edge.id] = edge
        error = self._commit(nodes, edges, "attach")
        if error:
            return self._reject("attach", error)
        logger.info(
            "Attached %s to %s (%s)", child_id, parent_id, edge.connection_type.value,
            extra={"builder_id": self.builder_id, "edge_id": edge.id},
        )
        return self._edge_outcome(edge)

    def attach_new(
        self,
        parent_id: NodeId,
        config: ComponentConfig,
        slot: "str | Slot | None" = None,
        position: Position | None = None,
        label: str | None = None,
    ) -> dict:
        """Create a node from config and attach it to parent, as one step."""
        node, error = self._prepare_node(kind_of(config), config, position, label)
        if error:
            return self._reject("attach_new", error)
        nodes, edges = self._state.staged()
        nodes[node.id] = node
        edge, error = propose_connection(GraphState(nodes, edges), node.id, parent_id, slot)
        if error:
            return self._reject("attach_new", error)
        edges[edge.id] = edge
        error = self._commit(nodes, edges, "attach_new")
        if error:
            return self._reject("attach_new", error)
        logger.info(
            "Created %s node %s attached to %s", node.kind.value, node.id, parent_id,
            extra={"builder_id": self.builder_id, "node_id": node.id, "edge_id": edge.id},
        )
        return {**self._edge_outcome(edge), "node_id": node.id}

    def detach(self, edge_id: EdgeId) -> dict:
        """Remove one edge; the parent's config view loses the reference with it."""
        edge = self._state.edges.get(edge_id)
        if edge is None:
            return self._reject("detach", error_outcome(
                UNKNOWN_EDGE, f"Edge '{edge_id}' is not in the graph.", edge_id=edge_id,
            ))
        nodes, edges = self._state.staged()
        del edges[edge_id]
        error = self._commit(nodes, edges, "detach")
        if error:
            return self._reject("detach", error)
        logger.info(
            "Detached %s from %s", edge.source_node, edge.target_node,
            extra={"builder_id": self.builder_id, "edge_id": edge_id},
        )
        return self._edge_outcome(edge)

    @staticmethod
    def _edge_outcome(edge: Edge) -> dict:
        return {
            "status": "ok",
            "edge_id": edge.id,
            "source": edge.source_node,
            "target": edge.target_node,
            "connection_type": edge.connection_type.value,
            "slot": edge.slot.value,
        }

    # ─── Queries ─────────────────────────────────────────────────

    def node(self, node_id: NodeId) -> Node | None:
        """Node with its config references resolved from edges."""
        if node_id not in self._state.nodes:
            return None
        return resolved_node(self._state, node_id)

    def nodes(self) -> list[Node]:
        return [resolved_node(self._state, n) for n in self._state.nodes]

    def edges(self) -> list[Edge]:
        return list(self._state.edges.values())

    def list_participants(self, team_id: NodeId) -> list[NodeId]:
        return list_participants(self._state, team_id)

    def list_tools(self, agent_id: NodeId) -> list[NodeId]:
        return list_tools(self._state, agent_id)

    def slot_contents(self, parent_id: NodeId, slot: Slot) -> list[NodeId]:
        return attached(self._state, parent_id, slot)

    def handles(self, node_id: NodeId) -> list[Handle]:
        """Handles of a node; empty for an id not in the graph."""
        if node_id not in self._state.nodes:
            return []
        return handles(self._state, node_id)

    def drop_zones(self, node_id: NodeId) -> list[DropZone]:
        if node_id not in self._state.nodes:
            return []
        return zones_for(self._state.nodes[node_id])

    def export_component(self, node_id: NodeId) -> dict:
        """Nested component tree rooted at node_id (e.g. a whole team)."""
        return resolve_component(self._state, node_id)

    # ─── Snapshot ────────────────────────────────────────────────

    def snapshot(self) -> dict:
        return graph_to_snapshot(self._state)

    def load_snapshot(self, data: dict) -> dict:
        """Replace the whole graph with a snapshot; all-or-nothing."""
        state, error = graph_from_snapshot(data)
        if not error:
            error = self._check_capacity(len(state.nodes) - len(self._state.nodes))
        if error:
            return self._reject("load_snapshot", error)
        self._state = state
        logger.info(
            "Loaded snapshot with %d node(s), %d edge(s)",
            len(state.nodes), len(state.edges),
            extra={"builder_id": self.builder_id},
        )
        return {"status": "ok", "nodes": len(state.nodes), "edges": len(state.edges)}
