"""Drop Zones — per-slot acceptance points and the drag session that feeds them.

Invariants:
    - evaluate_drop is PURE: a function of (zone accepts, active drag) only
    - No active drag, or an empty accepts set, always rejects
    - The "can-drop" hint is advisory; attach re-validates on its own
    - DragSession owns the only ActiveDrag; end() clears it unconditionally

Design Decisions:
    - ActiveDrag is one flat value passed explicitly to the validator, not a
      nested lookup into ambient drag context
    - Rejection is a verdict, never an error outcome
"""

from dataclasses import dataclass

from team_builder.core.domain_types import (
    SLOT_RULES,
    ZONE_SEGMENTS,
    ComponentKind,
    NodeId,
    Slot,
    ZoneId,
)
from team_builder.core.node import Node

CAN_DROP_HINT = "can-drop"
NEUTRAL_HINT = ""


@dataclass(frozen=True)
class DropZone:
    id: ZoneId
    node_id: NodeId
    slot: Slot
    accepts: frozenset[ComponentKind]


@dataclass(frozen=True)
class ActiveDrag:
    """The item being dragged: a library entry (node_id None) or a canvas node."""
    kind: ComponentKind
    node_id: NodeId | None = None
    library_name: str | None = None


@dataclass(frozen=True)
class DropVerdict:
    legal: bool
    hint: str


def zone_id(node_id: NodeId, slot: Slot) -> ZoneId:
    return ZoneId(f"{node_id}-{ZONE_SEGMENTS[slot]}-zone")


def zones_for(node: Node) -> list[DropZone]:
    """Drop zones a node exposes, one per slot of its kind."""
    return [
        DropZone(
            id=zone_id(node.id, slot),
            node_id=node.id,
            slot=slot,
            accepts=frozenset({rule.accepts}),
        )
        for slot, rule in SLOT_RULES[node.kind].items()
    ]


def evaluate_drop(
    accepts: frozenset[ComponentKind] | set[ComponentKind],
    active: ActiveDrag | None,
) -> DropVerdict:
    """Is dropping the active item on a zone accepting `accepts` legal?"""
    if active is None or not accepts:
        return DropVerdict(False, NEUTRAL_HINT)
    legal = active.kind in accepts
    return DropVerdict(legal, CAN_DROP_HINT if legal else NEUTRAL_HINT)


class DragSession:
    """Holds the single active drag of one interaction session."""

    def __init__(self) -> None:
        self._active: ActiveDrag | None = None

    @property
    def active(self) -> ActiveDrag | None:
        return self._active

    def start(self, drag: ActiveDrag) -> None:
        self._active = drag

    def check(self, zone: DropZone | None) -> DropVerdict:
        if zone is None:
            return DropVerdict(False, NEUTRAL_HINT)
        return evaluate_drop(zone.accepts, self._active)

    def end(self) -> ActiveDrag | None:
        """Clear the active drag (drop, cancel or pointer-leave); returns what was active."""
        active, self._active = self._active, None
        return active
