"""Domain Types — the closed vocabulary of the team builder graph.

Invariants:
    - ComponentKind is a closed set: every node kind and every drop-zone
      accept-list is expressed in it
    - ALLOWED_CONNECTIONS is the single table mapping (source kind, target kind)
      to a ConnectionType; pairs absent from it may never be connected
    - SLOT_RULES is the single table describing parent slots (accepted kind,
      occupancy, connection type)

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
    - NewType over wrapper classes for identifiers: zero runtime cost
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

NodeId = NewType("NodeId", str)
EdgeId = NewType("EdgeId", str)
ZoneId = NewType("ZoneId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ComponentKind(str, Enum):
    """Kinds of building block that can live on the canvas."""
    TEAM = "team"
    AGENT = "agent"
    MODEL = "model"
    TOOL = "tool"
    TERMINATION = "termination"


class ConnectionType(str, Enum):
    """Semantic edge types. Always derived from the endpoint kind pair."""
    MODEL = "model-connection"
    TOOL = "tool-connection"
    PARTICIPANT = "participant-connection"
    TERMINATION = "termination-connection"


class HandleRole(str, Enum):
    SOURCE = "source"
    TARGET = "target"


class Slot(str, Enum):
    """Named attachment positions on a parent's config."""
    MODEL = "model"
    PARTICIPANT = "participant"
    TOOL = "tool"
    TERMINATION = "termination"


class TeamType(str, Enum):
    ROUND_ROBIN = "RoundRobinGroupChat"
    SELECTOR = "SelectorGroupChat"


class AgentType(str, Enum):
    ASSISTANT = "AssistantAgent"
    USER_PROXY = "UserProxyAgent"


class ModelType(str, Enum):
    OPENAI = "OpenAIChatCompletionClient"
    AZURE_OPENAI = "AzureOpenAIChatCompletionClient"


class ToolType(str, Enum):
    PYTHON_FUNCTION = "PythonFunction"


class TerminationType(str, Enum):
    MAX_MESSAGE = "MaxMessageTermination"
    TEXT_MENTION = "TextMentionTermination"
    OR_CONDITION = "OrTerminationCondition"


# ─── Connection & Slot Tables ────────────────────────────────────

ALLOWED_CONNECTIONS: dict[tuple[ComponentKind, ComponentKind], ConnectionType] = {
    (ComponentKind.MODEL, ComponentKind.TEAM): ConnectionType.MODEL,
    (ComponentKind.MODEL, ComponentKind.AGENT): ConnectionType.MODEL,
    (ComponentKind.TOOL, ComponentKind.AGENT): ConnectionType.TOOL,
    (ComponentKind.AGENT, ComponentKind.TEAM): ConnectionType.PARTICIPANT,
    (ComponentKind.TERMINATION, ComponentKind.TEAM): ConnectionType.TERMINATION,
}


@dataclass(frozen=True)
class SlotRule:
    """How a slot on a parent behaves."""
    slot: Slot
    accepts: ComponentKind
    single: bool
    connection_type: ConnectionType
    config_field: str


_MODEL_SLOT = SlotRule(
    Slot.MODEL, ComponentKind.MODEL, True, ConnectionType.MODEL, "model_client",
)

SLOT_RULES: dict[ComponentKind, dict[Slot, SlotRule]] = {
    ComponentKind.TEAM: {
        Slot.MODEL: _MODEL_SLOT,
        Slot.PARTICIPANT: SlotRule(
            Slot.PARTICIPANT, ComponentKind.AGENT, False,
            ConnectionType.PARTICIPANT, "participants",
        ),
        Slot.TERMINATION: SlotRule(
            Slot.TERMINATION, ComponentKind.TERMINATION, True,
            ConnectionType.TERMINATION, "termination_condition",
        ),
    },
    ComponentKind.AGENT: {
        Slot.MODEL: _MODEL_SLOT,
        Slot.TOOL: SlotRule(
            Slot.TOOL, ComponentKind.TOOL, False,
            ConnectionType.TOOL, "tools",
        ),
    },
    ComponentKind.MODEL: {},
    ComponentKind.TOOL: {},
    ComponentKind.TERMINATION: {},
}

# Drop-zone id segment per slot (``<node_id>-<segment>-zone``)
ZONE_SEGMENTS: dict[Slot, str] = {
    Slot.MODEL: "model",
    Slot.PARTICIPANT: "agent",
    Slot.TOOL: "tool",
    Slot.TERMINATION: "termination",
}


def parse_slot(value: "str | Slot") -> Slot | None:
    """Accept ``model``, ``model-slot`` or a Slot member. None if unknown."""
    if isinstance(value, Slot):
        return value
    name = value.strip().lower()
    if name.endswith("-slot"):
        name = name[: -len("-slot")]
    if name in ("agent", "participants"):
        name = Slot.PARTICIPANT.value
    elif name == "tools":
        name = Slot.TOOL.value
    try:
        return Slot(name)
    except ValueError:
        return None
