"""Node — a graph vertex pairing identity, kind tag and config variant.

Invariants:
    - node.config.component_type == node.kind at every observable point; the
      model validator refuses to build a Node otherwise
    - Handles are computed from kind (and, for Team, from its attachments),
      never stored
    - Handle slot ids are stable: ``<node_id>-input-handle`` / ``<node_id>-output-handle``
"""

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, model_validator

from team_builder.core.component_config import (
    ComponentConfig,
    check_kind_match,
    kind_of,
)
from team_builder.core.domain_types import ComponentKind, HandleRole, NodeId


class Position(BaseModel):
    """Canvas coordinate owned by the layout layer; opaque to validation."""
    model_config = ConfigDict(frozen=True)
    x: float = 0.0
    y: float = 0.0


class Handle(BaseModel):
    model_config = ConfigDict(frozen=True)
    node_id: NodeId
    role: HandleRole
    slot_id: str


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: NodeId
    kind: ComponentKind
    label: str
    config: ComponentConfig
    position: Position = Position()

    @model_validator(mode="after")
    def _kind_matches_config(self) -> "Node":
        if kind_of(self.config) != self.kind:
            raise ValueError(
                f"config variant '{self.config.component_type}' does not match "
                f"node kind '{self.kind.value}'",
            )
        return self


def new_node_id(kind: ComponentKind) -> NodeId:
    return NodeId(f"{ComponentKind(kind).value}-{uuid4().hex[:12]}")


def default_label(config: ComponentConfig) -> str:
    """Display label derived from the config (name, model or termination type)."""
    for attr in ("name", "model"):
        value = getattr(config, attr, None)
        if value:
            return value
    termination_type = getattr(config, "termination_type", None)
    if termination_type is not None:
        return termination_type.value
    return config.component_type


def create_node(
    kind: ComponentKind,
    config: ComponentConfig,
    label: str | None = None,
    position: Position | None = None,
    node_id: NodeId | None = None,
) -> tuple[Node | None, dict | None]:
    """Build a Node with a fresh id. Returns (node, None) or (None, KIND_MISMATCH error)."""
    error = check_kind_match(kind, config)
    if error:
        return None, error
    kind = ComponentKind(kind)
    node = Node(
        id=node_id or new_node_id(kind),
        kind=kind,
        label=label or default_label(config),
        config=config,
        position=position or Position(),
    )
    return node, None


def replace_config(node: Node, config: ComponentConfig) -> tuple[Node | None, dict | None]:
    """Copy of node with a new config; refuses a variant that differs from node.kind."""
    error = check_kind_match(node.kind, config)
    if error:
        return None, {**error, "node_id": node.id}
    return node.model_copy(update={"config": config}), None


def input_handle_id(node_id: NodeId) -> str:
    return f"{node_id}-input-handle"


def output_handle_id(node_id: NodeId) -> str:
    return f"{node_id}-output-handle"


def handles_for(node: Node, has_team_inputs: bool = False) -> list[Handle]:
    """Ordered handle descriptors for a node.

    Team exposes its input handle only when a model or termination is
    attached (has_team_inputs). Agent has one input and one output. Model,
    Tool and Termination are attachment leaves with a single output.
    """
    source = Handle(
        node_id=node.id, role=HandleRole.SOURCE, slot_id=output_handle_id(node.id),
    )
    target = Handle(
        node_id=node.id, role=HandleRole.TARGET, slot_id=input_handle_id(node.id),
    )
    match node.kind:
        case ComponentKind.TEAM:
            return [target, source] if has_team_inputs else [source]
        case ComponentKind.AGENT:
            return [target, source]
        case _:
            return [source]
