"""SQL Diagram Catalog — LocalCatalog implementation over async SQLAlchemy.

Invariants:
    - Rows keyed by diagram id; add_diagram never overwrites (duplicate → DatabaseError)
    - save_diagram is an upsert: catalog columns and body replaced together
    - Catalog-only rows (body NULL) load as Diagrams with every collection absent
    - Timestamps read back as aware UTC (SQLite drops the offset)

Design Decisions:
    - Body stored in wire encoding: one codec for the network and the disk,
      the reference endpoint serves stored bodies without re-encoding
    - list_diagrams ordered by updated_at desc: most recently edited first
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select

from chartdb_sync.core.diagram import (
    Diagram, DiagramListItem, from_list_item,
)
from chartdb_sync.core.domain_types import DatabaseType
from chartdb_sync.core.wire_codec import decode_diagram, encode_diagram
from chartdb_sync.infrastructure.database import (
    DatabaseSessionManager, get_db_manager,
)
from chartdb_sync.models.diagram_record import DiagramRecord

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_list_item(record: DiagramRecord) -> DiagramListItem:
    return DiagramListItem(
        id=record.id,
        name=record.name,
        database_type=DatabaseType(record.database_type),
        database_edition=record.database_edition,
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
    )


def _to_diagram(record: DiagramRecord) -> Diagram:
    if record.body is None:
        return from_list_item(_to_list_item(record))
    return decode_diagram(record.body)


def _fill_record(record: DiagramRecord, diagram: Diagram) -> None:
    record.name = diagram.name
    record.database_type = diagram.database_type.value
    record.database_edition = diagram.database_edition
    record.created_at = diagram.created_at
    record.updated_at = diagram.updated_at
    has_body = any(
        collection is not None for collection in (
            diagram.tables, diagram.relationships, diagram.dependencies,
            diagram.areas, diagram.custom_types, diagram.notes,
        )
    )
    record.body = encode_diagram(diagram) if has_body else None


class SqlDiagramCatalog:
    """Local diagram catalog persisted through DatabaseSessionManager."""

    def __init__(self, db: DatabaseSessionManager):
        self.db = db

    async def list_diagrams(self) -> list[DiagramListItem]:
        async with self.db.session() as session:
            result = await session.execute(
                select(DiagramRecord).order_by(DiagramRecord.updated_at.desc()),
            )
            return [_to_list_item(r) for r in result.scalars().all()]

    async def load_diagram(self, diagram_id: str) -> Diagram | None:
        async with self.db.session() as session:
            record = await session.get(DiagramRecord, diagram_id)
            if record is None:
                return None
            return _to_diagram(record)

    async def add_diagram(self, diagram: Diagram) -> None:
        async with self.db.session() as session:
            record = DiagramRecord(id=diagram.id)
            _fill_record(record, diagram)
            session.add(record)
            await session.commit()
        logger.info(
            "Diagram added to local catalog",
            extra={"diagram_id": diagram.id},
        )

    async def save_diagram(self, diagram: Diagram) -> None:
        async with self.db.session() as session:
            record = await session.get(DiagramRecord, diagram.id)
            if record is None:
                record = DiagramRecord(id=diagram.id)
                session.add(record)
            _fill_record(record, diagram)
            await session.commit()


async def get_catalog() -> SqlDiagramCatalog:
    """FastAPI dependency for the catalog backing the reference endpoint."""
    return SqlDiagramCatalog(get_db_manager())
