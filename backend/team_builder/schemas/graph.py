"""Graph Schemas — Pydantic models for the team builder API.

Invariants:
    - GraphData shape matches what the canvas renderer (React Flow) draws
    - Node types correspond to ComponentKind values
    - Edge types correspond to ConnectionType values and are always derived
      server-side; no request schema accepts a connection type

Design Decisions:
    - Separate from core models: these are API contracts, core models are domain
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from team_builder.core.component_config import ComponentConfig
from team_builder.core.domain_types import ComponentKind

NodeType = Literal["team", "agent", "model", "tool", "termination"]
EdgeType = Literal[
    "model-connection", "tool-connection",
    "participant-connection", "termination-connection",
]


class PositionData(BaseModel):
    x: float = 0.0
    y: float = 0.0


class HandleView(BaseModel):
    id: str
    type: Literal["source", "target"]


class ZoneView(BaseModel):
    id: str
    slot: str
    accepts: list[NodeType]


class NodeView(BaseModel):
    """A node as drawn: resolved config, computed handles and drop zones."""
    id: str
    type: NodeType
    label: str
    position: PositionData
    config: dict
    handles: list[HandleView] = []
    zones: list[ZoneView] = []


class EdgeView(BaseModel):
    """An edge as drawn, between two node handles."""
    id: str
    source: str
    target: str
    source_handle: str
    target_handle: str
    type: EdgeType


class GraphData(BaseModel):
    """Complete builder graph for rendering."""
    nodes: list[NodeView] = []
    edges: list[EdgeView] = []


# --- Requests -----------------------------------------------------------------

class NodeCreate(BaseModel):
    kind: ComponentKind
    config: ComponentConfig
    label: str | None = Field(None, max_length=200)
    position: PositionData | None = None


class NodeUpdate(BaseModel):
    """Partial node update: any of config, label, position."""
    config: ComponentConfig | None = None
    label: str | None = Field(None, min_length=1, max_length=200)
    position: PositionData | None = None


class AttachRequest(BaseModel):
    parent_id: str
    child_id: str
    slot: str | None = None


class DragStart(BaseModel):
    kind: ComponentKind
    node_id: str | None = None
    library_name: str | None = None


class DragOver(BaseModel):
    zone_id: str
    dragged_kind: ComponentKind | None = None


class DropRequest(BaseModel):
    zone_id: str


class DropVerdictResponse(BaseModel):
    legal: bool
    hint: str


class SnapshotImport(BaseModel):
    version: int = 1
    nodes: list[dict] = []
    edges: list[dict] = []

    @field_validator("version")
    @classmethod
    def supported_version(cls, v: int) -> int:
        if v != 1:
            raise ValueError(f"unsupported snapshot version {v}")
        return v
