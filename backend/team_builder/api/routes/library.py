"""Component Library Route — the catalogue drags start from.

Invariants:
    - Read-only; entries come from core/component_library.py
"""

from fastapi import APIRouter, Query

from team_builder.core.component_library import list_library
from team_builder.core.domain_types import ComponentKind
from team_builder.core.enforce_connections import connection_kinds
from team_builder.schemas.builder import LibraryEntry

router = APIRouter(prefix="/api/v1/library", tags=["library"])


@router.get("", response_model=list[LibraryEntry])
async def get_library(kind: ComponentKind | None = Query(None)):
    """List library components, optionally filtered by kind."""
    return [
        LibraryEntry(
            kind=item.kind.value,
            name=item.name,
            label=item.label,
            description=item.description,
            config=item.config.model_dump(mode="json"),
        )
        for item in list_library(kind)
    ]


@router.get("/connections")
async def get_connection_rules():
    """Which kinds each kind attaches to and accepts."""
    return {kind.value: connection_kinds(kind) for kind in ComponentKind}
