"""Sync Routes — push, pull and list endpoints of the reference sync server.

Invariants:
    - POST /api/sync/push upserts the diagram and answers {success, diagram_id}
    - A push whose updatedAt is older than the stored version is rejected (409 STALE_DIAGRAM)
    - GET /api/sync/pull/{id} answers 404 for unknown ids, else the camelCase body
    - GET /api/sync/diagrams answers the snake_case catalog projection

Design Decisions:
    - Bodies decoded through the same codec as the client: whatever the
      client can encode, the server can store and serve back
    - Errors raised as ChartSyncError subclasses; the global handler renders
      the {"error", "code"} envelope the client parses
"""

import logging

from fastapi import APIRouter, Depends

from chartdb_sync.core.errors import ResourceNotFoundError, StaleDiagramError
from chartdb_sync.core.wire_codec import decode_diagram, encode_diagram
from chartdb_sync.infrastructure.local_catalog import (
    SqlDiagramCatalog, get_catalog,
)
from chartdb_sync.schemas.sync import (
    PushRequest, PushResponse, RemoteDiagramSummary,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.post("/push", response_model=PushResponse)
async def push_diagram(
    body: PushRequest, catalog: SqlDiagramCatalog = Depends(get_catalog),
):
    """Store (create or replace) a diagram."""
    diagram = decode_diagram(body.diagram)
    existing = await catalog.load_diagram(diagram.id)
    if existing is not None and diagram.updated_at < existing.updated_at:
        raise StaleDiagramError(diagram.id)
    await catalog.save_diagram(diagram)
    logger.info("Diagram stored", extra={"diagram_id": diagram.id})
    return PushResponse(success=True, diagram_id=diagram.id)


@router.get("/pull/{diagram_id}")
async def pull_diagram(
    diagram_id: str, catalog: SqlDiagramCatalog = Depends(get_catalog),
):
    """Return the stored diagram in wire encoding."""
    diagram = await catalog.load_diagram(diagram_id)
    if diagram is None:
        raise ResourceNotFoundError("Diagram", diagram_id)
    return encode_diagram(diagram)


@router.get("/diagrams", response_model=list[RemoteDiagramSummary])
async def list_diagrams(catalog: SqlDiagramCatalog = Depends(get_catalog)):
    """Catalog projection of every stored diagram."""
    items = await catalog.list_diagrams()
    return [RemoteDiagramSummary.from_list_item(i) for i in items]
