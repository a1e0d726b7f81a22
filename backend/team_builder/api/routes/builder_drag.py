"""Builder Drag Routes — the renderer's drag-and-drop event hooks.

Invariants:
    - drag/over never fails: an illegal hover is a verdict, not an error
    - drag/drop ends the active drag whether or not it succeeds
"""

from fastapi import APIRouter, status

from team_builder.api.routes.builders import ensure_ok, get_builder_or_404
from team_builder.core.domain_types import ZoneId
from team_builder.schemas.graph import DragOver, DragStart, DropRequest, DropVerdictResponse

router = APIRouter(prefix="/api/v1/builders", tags=["builder-drag"])


@router.post("/{builder_id}/drag/start")
async def drag_start(builder_id: str, body: DragStart):
    builder = get_builder_or_404(builder_id)
    return ensure_ok(builder, builder.on_drag_start(
        body.kind, body.node_id, body.library_name,
    ))


@router.post("/{builder_id}/drag/over", response_model=DropVerdictResponse)
async def drag_over(builder_id: str, body: DragOver):
    """Is dropping the active item on this zone legal right now?"""
    builder = get_builder_or_404(builder_id)
    verdict = builder.drop_verdict(ZoneId(body.zone_id), body.dragged_kind)
    return DropVerdictResponse(legal=verdict.legal, hint=verdict.hint)


@router.post("/{builder_id}/drag/drop", status_code=status.HTTP_201_CREATED)
async def drag_drop(builder_id: str, body: DropRequest):
    builder = get_builder_or_404(builder_id)
    return ensure_ok(builder, builder.on_drop(ZoneId(body.zone_id)))


@router.post("/{builder_id}/drag/cancel")
async def drag_cancel(builder_id: str):
    return get_builder_or_404(builder_id).on_drag_cancel()
