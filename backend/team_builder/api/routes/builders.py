"""Builder Lifecycle — create, list, get and delete in-memory builder sessions.

Invariants:
    - BuilderSession is per-builder, in-memory (module-level dict)
    - _builders dict is the single source for in-memory builder state
    - get_builder_or_404 is the only lookup used by the other builder routes

Design Decisions:
    - Module-level dict: single-process uvicorn, state lost on restart
"""

import logging
from uuid import uuid4

from fastapi import APIRouter, status

from team_builder.config import get_settings
from team_builder.core.errors import (
    ErrorCategory,
    ErrorContext,
    ResourceNotFoundError,
    TeamBuilderError,
    ErrorSeverity,
    raise_for_outcome,
)
from team_builder.schemas.builder import BuilderCreate, BuilderResponse
from team_builder.services.builder_session import BuilderSession
from team_builder.services.graph_assembler import GraphAssembler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/builders", tags=["builders"])

_builders: dict[str, BuilderSession] = {}


def get_builder_or_404(builder_id: str) -> BuilderSession:
    """Get builder session or raise 404."""
    builder = _builders.get(builder_id)
    if builder is None:
        raise ResourceNotFoundError(
            "Builder", builder_id, context=ErrorContext(builder_id=builder_id),
        )
    return builder


def ensure_ok(builder: BuilderSession, result: dict) -> dict:
    """Translate an error outcome from the core into its typed exception."""
    return raise_for_outcome(result, ErrorContext(
        builder_id=builder.builder_id,
        node_id=result.get("node_id"),
        edge_id=result.get("edge_id"),
    ))


def _to_response(builder: BuilderSession) -> BuilderResponse:
    state = builder.assembler.state
    return BuilderResponse(
        id=builder.builder_id,
        name=builder.name,
        node_count=len(state.nodes),
        edge_count=len(state.edges),
    )


@router.post(
    "", response_model=BuilderResponse, status_code=status.HTTP_201_CREATED,
)
async def create_builder(body: BuilderCreate):
    """Create an empty builder canvas."""
    settings = get_settings()
    if len(_builders) >= settings.max_builders:
        raise TeamBuilderError(
            f"Builder limit reached ({settings.max_builders})",
            "BUILDER_LIMIT", ErrorCategory.CONFLICT, ErrorSeverity.WARNING,
            http_status=status.HTTP_429_TOO_MANY_REQUESTS,
        )
    builder_id = uuid4().hex
    builder = BuilderSession(
        builder_id,
        name=body.name,
        assembler=GraphAssembler(
            max_nodes=settings.max_nodes_per_graph, builder_id=builder_id,
        ),
    )
    _builders[builder_id] = builder
    logger.info("Builder created", extra={"builder_id": builder_id})
    return _to_response(builder)


@router.get("", response_model=list[BuilderResponse])
async def list_builders():
    return [_to_response(b) for b in _builders.values()]


@router.get("/{builder_id}", response_model=BuilderResponse)
async def get_builder(builder_id: str):
    return _to_response(get_builder_or_404(builder_id))


@router.delete("/{builder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_builder(builder_id: str):
    """Discard a builder and its graph."""
    get_builder_or_404(builder_id)
    _builders.pop(builder_id, None)
    logger.info("Builder deleted", extra={"builder_id": builder_id})
