"""Builder Graph Routes — nodes, edges, queries, export and import for one builder.

Invariants:
    - Every mutation goes through the builder's GraphAssembler
    - Core error outcomes are raised as typed errors via ensure_ok
    - Connection types are never accepted from the client
"""

import logging

from fastapi import APIRouter, status

from team_builder.api.routes.builders import ensure_ok, get_builder_or_404
from team_builder.core.domain_types import ComponentKind, EdgeId, NodeId
from team_builder.core.errors import KindMismatchError, ResourceNotFoundError, ErrorContext
from team_builder.core.node import Position
from team_builder.schemas.graph import (
    AttachRequest,
    GraphData,
    NodeCreate,
    NodeUpdate,
    NodeView,
    SnapshotImport,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/builders", tags=["builder-graph"])


def _node_view(builder, node_id: NodeId) -> NodeView:
    return next(n for n in builder.view().nodes if n.id == node_id)


def _require_node(builder, node_id: str, kind: ComponentKind | None = None):
    node = builder.assembler.state.nodes.get(node_id)
    context = ErrorContext(builder_id=builder.builder_id, node_id=node_id)
    if node is None:
        raise ResourceNotFoundError("Node", node_id, "UNKNOWN_NODE", context)
    if kind is not None and node.kind != kind:
        raise KindMismatchError(
            f"Node '{node_id}' is a {node.kind.value}, not a {kind.value}", context,
        )
    return node


@router.get("/{builder_id}/graph", response_model=GraphData)
async def get_graph(builder_id: str):
    """Current graph for rendering."""
    return get_builder_or_404(builder_id).view()


@router.get("/{builder_id}/snapshot")
async def get_snapshot(builder_id: str):
    """Serialized graph, sufficient to rebuild an identical one."""
    return get_builder_or_404(builder_id).assembler.snapshot()


@router.post("/{builder_id}/import", response_model=GraphData)
async def import_snapshot(builder_id: str, body: SnapshotImport):
    """Replace the graph with a snapshot (all-or-nothing)."""
    builder = get_builder_or_404(builder_id)
    ensure_ok(builder, builder.assembler.load_snapshot(body.model_dump()))
    return builder.view()


@router.get("/{builder_id}/export/{team_id}")
async def export_team(builder_id: str, team_id: str):
    """Nested component tree of one team."""
    builder = get_builder_or_404(builder_id)
    _require_node(builder, team_id, ComponentKind.TEAM)
    return builder.assembler.export_component(NodeId(team_id))


@router.post(
    "/{builder_id}/nodes", response_model=NodeView,
    status_code=status.HTTP_201_CREATED,
)
async def add_node(builder_id: str, body: NodeCreate):
    builder = get_builder_or_404(builder_id)
    position = Position(**body.position.model_dump()) if body.position else None
    result = ensure_ok(builder, builder.assembler.add_node(
        body.kind, body.config, position, body.label,
    ))
    return _node_view(builder, result["node_id"])


@router.patch("/{builder_id}/nodes/{node_id}", response_model=NodeView)
async def update_node(builder_id: str, node_id: str, body: NodeUpdate):
    """Update config, label and/or position of a node."""
    builder = get_builder_or_404(builder_id)
    node_id = NodeId(node_id)
    _require_node(builder, node_id)
    if body.config is not None:
        ensure_ok(builder, builder.assembler.update_config(node_id, body.config))
    if body.label is not None:
        ensure_ok(builder, builder.assembler.rename_node(node_id, body.label))
    if body.position is not None:
        ensure_ok(builder, builder.on_move_node(
            node_id, Position(**body.position.model_dump()),
        ))
    return _node_view(builder, node_id)


@router.delete("/{builder_id}/nodes/{node_id}")
async def delete_node(builder_id: str, node_id: str):
    """Remove a node and cascade its edges."""
    builder = get_builder_or_404(builder_id)
    return ensure_ok(builder, builder.on_delete_node(NodeId(node_id)))


@router.post("/{builder_id}/edges", status_code=status.HTTP_201_CREATED)
async def attach(builder_id: str, body: AttachRequest):
    """Attach child to a slot of parent; the connection type is derived."""
    builder = get_builder_or_404(builder_id)
    return ensure_ok(builder, builder.assembler.attach(
        NodeId(body.parent_id), NodeId(body.child_id), body.slot,
    ))


@router.delete("/{builder_id}/edges/{edge_id}")
async def detach(builder_id: str, edge_id: str):
    builder = get_builder_or_404(builder_id)
    return ensure_ok(builder, builder.on_delete_edge(EdgeId(edge_id)))


@router.get("/{builder_id}/nodes/{node_id}/participants")
async def get_participants(builder_id: str, node_id: str):
    builder = get_builder_or_404(builder_id)
    _require_node(builder, node_id, ComponentKind.TEAM)
    return {"team_id": node_id,
            "participants": builder.assembler.list_participants(NodeId(node_id))}


@router.get("/{builder_id}/nodes/{node_id}/tools")
async def get_tools(builder_id: str, node_id: str):
    builder = get_builder_or_404(builder_id)
    _require_node(builder, node_id, ComponentKind.AGENT)
    return {"agent_id": node_id, "tools": builder.assembler.list_tools(NodeId(node_id))}
